"""Field sets and the tagged variant used for field values.

Every value stored in a node (context entries, stack entries and the wrapped
error itself) is classified once into a closed set of kinds. Rendering and
serialization dispatch on that kind instead of probing types while walking.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

# Field set: string keys to arbitrary values
Fields = dict[str, Any]

MISSING = "MISSING"


@runtime_checkable
class CauseCapable(Protocol):
    """Anything that can report the root cause of an error chain."""

    def cause(self) -> Any: ...


class FieldKind(str, Enum):
    """Kinds a stored value can take."""
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NODE = "node"      # a ContextError
    ERROR = "error"    # any other error-like value
    RAW = "raw"
    ABSENT = "absent"  # only used for a missing wrapped error


def is_cause_capable(value: Any) -> bool:
    """Check whether a value exposes a callable ``cause()``."""
    return isinstance(value, CauseCapable) and callable(value.cause)


def classify(value: Any) -> FieldKind:
    """Return the kind of a value.

    ``bool`` is tested before numbers since it subclasses ``int``.
    """
    # Local import: error.py imports this module
    from errctx.error import ContextError

    if value is None:
        return FieldKind.ABSENT
    if isinstance(value, ContextError):
        return FieldKind.NODE
    if isinstance(value, BaseException) or is_cause_capable(value):
        return FieldKind.ERROR
    if isinstance(value, bool):
        return FieldKind.BOOL
    if isinstance(value, (int, float)):
        return FieldKind.NUMBER
    if isinstance(value, str):
        return FieldKind.STRING
    return FieldKind.RAW


@dataclass(frozen=True)
class FieldValue:
    """A value paired with its kind."""
    kind: FieldKind
    value: Any

    @classmethod
    def of(cls, value: Any) -> "FieldValue":
        return cls(classify(value), value)


def safe_str(value: Any) -> str:
    """``str()`` that never raises."""
    try:
        return str(value)
    except Exception:
        return f"<unstringifiable {type(value).__name__}>"


def error_text(error: Any) -> str:
    """String form of an error-like value.

    Exceptions with an empty message are shown by their class name.
    """
    text = safe_str(error)
    if not text and isinstance(error, BaseException):
        return type(error).__name__
    return text


def parse_key_vals(*key_vals: Any) -> Fields:
    """Turn alternating key, value arguments into a field set.

    Keys are converted with ``str()``. A trailing key without a value gets
    the ``MISSING`` sentinel. Later keys overwrite earlier ones.

    Args:
        *key_vals: key1, value1, key2, value2, ...

    Returns:
        Parsed fields (empty if no arguments were given)
    """
    meta: Fields = {}
    for i in range(0, len(key_vals), 2):
        value = key_vals[i + 1] if i + 1 < len(key_vals) else MISSING
        meta[safe_str(key_vals[i])] = value
    return meta
