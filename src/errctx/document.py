"""Serialized form of errctx nodes.

A node serializes to a document with three keys::

    {
      "err": <nested document | string | null>,
      "context": {"timestamp": "<RFC3339>", ...},
      "stack": {"file": "<string>", "line": <integer>}
    }

This module builds such documents, encodes them as JSON, decodes them back
into Pydantic models and validates raw data against the JSON schema.
"""

import json
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any

import jsonschema
from pydantic import BaseModel, ConfigDict, Field

from errctx.fields import FieldKind, FieldValue, error_text, safe_str
from errctx.timestamps import ZERO_TIME, parse_rfc3339

if TYPE_CHECKING:
    from errctx.error import ContextError

logger = logging.getLogger(__name__)

DOCUMENT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "errctx error document",
    "$ref": "#/$defs/document",
    "$defs": {
        "document": {
            "type": "object",
            "required": ["err", "context", "stack"],
            "additionalProperties": False,
            "properties": {
                "err": {
                    "anyOf": [
                        {"$ref": "#/$defs/document"},
                        {"type": "string"},
                        {"type": "null"},
                    ]
                },
                "context": {
                    "type": "object",
                    "required": ["timestamp"],
                    "properties": {"timestamp": {"type": "string"}},
                    "additionalProperties": True,
                },
                "stack": {
                    "type": "object",
                    "required": ["file", "line"],
                    "properties": {
                        "file": {"type": "string"},
                        "line": {"type": "integer"},
                    },
                },
            },
        }
    },
}

_DOCUMENT_KEYS = frozenset(("err", "context", "stack"))


def _field_to_data(field: FieldValue) -> Any:
    if field.kind is FieldKind.NODE:
        return to_document(field.value)
    if field.kind is FieldKind.ERROR:
        return error_text(field.value)
    return field.value


def to_document(node: "ContextError") -> dict[str, Any]:
    """Convert a node (and any nested nodes) into plain data."""
    wrapped = node.wrapped_field
    if wrapped.kind is FieldKind.ABSENT:
        err = None
    elif wrapped.kind in (FieldKind.NODE, FieldKind.ERROR):
        err = _field_to_data(wrapped)
    else:
        err = safe_str(wrapped.value)

    return {
        "err": err,
        "context": {key: _field_to_data(field) for key, field in node.context_entries()},
        "stack": dict(node.stack),
    }


def dumps(document: dict[str, Any], indent: int | None = None) -> str:
    """Encode a document as JSON; values JSON cannot represent become strings."""
    return json.dumps(document, indent=indent, ensure_ascii=False, default=safe_str)


class StackDocument(BaseModel):
    """The ``stack`` section of a document."""
    file: str
    line: int

    model_config = ConfigDict(extra="allow")


class ErrorDocument(BaseModel):
    """Decoded error document."""
    err: "ErrorDocument | str | None" = None
    context: dict[str, Any] = Field(default_factory=dict)
    stack: StackDocument

    @classmethod
    def from_json(cls, data: str | bytes) -> "ErrorDocument":
        """Decode a JSON document produced by ``ContextError.to_json``."""
        return cls.model_validate_json(data)

    def nested(self, key: str) -> "ErrorDocument | None":
        """Return the context entry ``key`` as a document, if it is one."""
        value = self.context.get(key)
        if isinstance(value, dict) and _DOCUMENT_KEYS <= value.keys():
            return ErrorDocument.model_validate(value)
        return None

    def timestamp(self) -> datetime:
        """Parsed ``context.timestamp``, or ZERO_TIME."""
        value = self.context.get("timestamp")
        if isinstance(value, str):
            parsed = parse_rfc3339(value)
            if parsed is not None:
                return parsed
        return ZERO_TIME

    def cause(self) -> str | None:
        """Innermost ``err`` string of the document chain."""
        current = self
        while isinstance(current.err, ErrorDocument):
            current = current.err
        return current.err


ErrorDocument.model_rebuild()


class DocumentValidationError:
    """A schema violation found in a document."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"

    def __repr__(self) -> str:
        return f"DocumentValidationError(path={self.path!r}, message={self.message!r})"


def validate_document(data: Any) -> list[DocumentValidationError]:
    """Validate plain data against DOCUMENT_SCHEMA.

    Args:
        data: Decoded JSON (e.g. ``json.loads(node.to_json())``)

    Returns:
        List of validation errors (empty if valid)
    """
    validator = jsonschema.Draft202012Validator(DOCUMENT_SCHEMA)
    errors = [
        DocumentValidationError(e.json_path or "$", e.message)
        for e in validator.iter_errors(data)
    ]
    if errors:
        logger.debug(f"Document failed validation with {len(errors)} error(s)")
    return errors
