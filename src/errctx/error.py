"""The errctx error type.

``ContextError`` wraps another error and carries two field sets:

- ``context``: caller-supplied key/value pairs plus a ``timestamp``
- ``stack``: the ``file`` and ``line`` where the error was built

Typical use::

    try:
        conn.send(payload)
    except OSError as e:
        raise contextualize(e, "host", host, "attempt", attempt)
"""

import threading
from collections.abc import Iterator
from datetime import datetime
from typing import Any

from errctx.config import RenderConfig
from errctx.document import dumps, to_document
from errctx.fields import (
    FieldKind,
    Fields,
    FieldValue,
    classify,
    is_cause_capable,
    parse_key_vals,
)
from errctx.render import render_tree
from errctx.stack import DEFAULT_CAPTURE, CallSiteCapture
from errctx.timestamps import ZERO_TIME, format_rfc3339, parse_rfc3339


class ContextError(Exception):
    """An error decorated with context fields and its call site.

    Nodes are populated while constructing and are not modified afterwards;
    the field sets are plain dicts and should be treated as read-only.

    Args:
        wrapped: Error being decorated (another ContextError, any exception,
            any other value, or None)
        *key_vals: Alternating keys and values added to ``context``
        capture: Call-site capture to use (default: untrimmed paths)
        stacklevel: Frame to record, as in ``warnings.warn``; 1 is the code
            calling ``ContextError(...)``. Subclasses overriding ``__init__``
            should pass ``stacklevel + 1``.
    """

    def __init__(
        self,
        wrapped: Any = None,
        *key_vals: Any,
        capture: CallSiteCapture | None = None,
        stacklevel: int = 1,
    ):
        super().__init__(wrapped)
        self.context: Fields = {}
        self.stack: Fields = {}
        self._lock = threading.Lock()

        with self._lock:
            # Callers may override the timestamp with their own value
            self.context["timestamp"] = format_rfc3339()
            self.context.update(parse_key_vals(*key_vals))

            self.wrapped = wrapped
            self.wrapped_field = FieldValue.of(wrapped)
            self._wrapped_has_cause = is_cause_capable(wrapped)
            if isinstance(wrapped, BaseException):
                self.__cause__ = wrapped

            (capture or DEFAULT_CAPTURE).record(self.stack, stacklevel)

            self._context_kinds = {k: classify(v) for k, v in self.context.items()}
            self._stack_kinds = {k: classify(v) for k, v in self.stack.items()}

    def _entries(
        self, fields: Fields, kinds: dict[str, FieldKind], sort_keys: bool
    ) -> list[tuple[str, FieldValue]]:
        keys = sorted(fields) if sort_keys else list(fields)
        entries = []
        for key in keys:
            value = fields[key]
            kind = kinds.get(key)
            entries.append((key, FieldValue(kind if kind is not None else classify(value), value)))
        return entries

    def context_entries(self, sort_keys: bool = False) -> list[tuple[str, FieldValue]]:
        """Context fields with their kinds."""
        return self._entries(self.context, self._context_kinds, sort_keys)

    def stack_entries(self, sort_keys: bool = False) -> list[tuple[str, FieldValue]]:
        """Stack fields with their kinds."""
        return self._entries(self.stack, self._stack_kinds, sort_keys)

    def cause(self) -> Any:
        """Return the innermost error of the chain.

        Walks nested ContextErrors without recursion. At the bottom, a
        wrapped value that can report a cause itself is asked for it;
        otherwise the wrapped value is the cause.
        """
        current = self
        while current.wrapped_field.kind is FieldKind.NODE:
            current = current.wrapped
        if current._wrapped_has_cause:
            return current.wrapped.cause()
        return current.wrapped

    def iter_causes(self) -> Iterator[Any]:
        """Yield each wrapped value from this node's down to the innermost one."""
        current: Any = self
        while isinstance(current, ContextError):
            current = current.wrapped
            yield current

    def timestamp(self) -> datetime:
        """Return the ``timestamp`` context field as a datetime.

        Returns ZERO_TIME when the field is missing, not a string, or not
        valid RFC3339.
        """
        value = self.context.get("timestamp")
        if isinstance(value, str):
            parsed = parse_rfc3339(value)
            if parsed is not None:
                return parsed
        return ZERO_TIME

    def tree(self, config: RenderConfig | None = None) -> str:
        """Render the error as an ERR/CTX/STACK tree."""
        return render_tree(self, config)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return to_document(self)

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to a JSON document."""
        return dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        return self.tree()

    def __reduce__(self):
        # The construction lock cannot be pickled; a fresh one is made on load
        state = {k: v for k, v in self.__dict__.items() if k != "_lock"}
        return _restore, (type(self), self.args, state)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(wrapped={self.wrapped!r}, "
            f"context={self.context!r}, stack={self.stack!r})"
        )


def _restore(cls: type, args: tuple, state: dict[str, Any]) -> ContextError:
    """Rebuild a pickled or copied ContextError without re-running capture."""
    node = cls.__new__(cls, *args)
    node.args = args
    node.__dict__.update(state)
    node._lock = threading.Lock()
    if isinstance(node.wrapped, BaseException):
        node.__cause__ = node.wrapped
    return node


def contextualize(err: Any, *key_vals: Any, capture: CallSiteCapture | None = None) -> ContextError:
    """Wrap an error with context fields, logging-style.

    Args:
        err: Error to decorate (may be None)
        *key_vals: key1, value1, key2, value2, ... A trailing key without a
            value is stored with the value ``"MISSING"``.
        capture: Call-site capture to use (default: untrimmed paths)

    Returns:
        A new ContextError recording the caller's file and line
    """
    return ContextError(err, *key_vals, capture=capture, stacklevel=2)
