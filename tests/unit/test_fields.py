"""Unit tests for field sets and value classification."""

import pytest

from errctx import ContextError
from errctx.fields import (
    MISSING,
    CauseCapable,
    FieldKind,
    FieldValue,
    classify,
    error_text,
    is_cause_capable,
    parse_key_vals,
    safe_str,
)


class _Causer:
    def cause(self):
        return "root"


class TestParseKeyVals:
    """Test key/value argument parsing."""

    def test_empty(self):
        """Test empty."""
        assert parse_key_vals() == {}

    def test_pairs(self):
        """Test pairs."""
        assert parse_key_vals("user", "alice", "attempt", 3) == {"user": "alice", "attempt": 3}

    def test_odd_length_gets_missing(self):
        """A trailing key without value is stored with the sentinel."""
        assert parse_key_vals("user", "alice", "orphan") == {"user": "alice", "orphan": MISSING}
        assert MISSING == "MISSING"

    def test_keys_are_stringified(self):
        """Test keys are stringified."""
        assert parse_key_vals(1, "one", None, "none") == {"1": "one", "None": "none"}

    def test_last_duplicate_wins(self):
        """Test last duplicate wins."""
        assert parse_key_vals("k", 1, "other", 2, "k", 3) == {"k": 3, "other": 2}

    def test_none_value_is_kept(self):
        """Test none value is kept."""
        assert parse_key_vals("k", None) == {"k": None}


class TestClassify:
    """Test the closed set of field kinds."""

    @pytest.mark.parametrize(
        "value,kind",
        [
            ("text", FieldKind.STRING),
            (3, FieldKind.NUMBER),
            (2.5, FieldKind.NUMBER),
            (True, FieldKind.BOOL),
            (False, FieldKind.BOOL),
            (None, FieldKind.ABSENT),
            (ValueError("bad"), FieldKind.ERROR),
            ([1, 2], FieldKind.RAW),
            ({"a": 1}, FieldKind.RAW),
        ],
    )
    def test_scalar_kinds(self, value, kind):
        """Test scalar kinds."""
        assert classify(value) is kind

    def test_context_error_is_node(self):
        """Test context error is node."""
        assert classify(ContextError(ValueError("x"))) is FieldKind.NODE

    def test_cause_capable_object_is_error(self):
        """Test cause capable object is error."""
        assert classify(_Causer()) is FieldKind.ERROR

    def test_field_value_of(self):
        """Test field value of."""
        field = FieldValue.of("x")
        assert field.kind is FieldKind.STRING
        assert field.value == "x"


class TestCauseCapability:
    """Test detection of objects reporting a cause."""

    def test_object_with_cause_method(self):
        """Test object with cause method."""
        assert is_cause_capable(_Causer())
        assert isinstance(_Causer(), CauseCapable)

    def test_plain_exception(self):
        """Test plain exception."""
        assert not is_cause_capable(ValueError("x"))

    def test_non_callable_cause_attribute(self):
        """Test non callable cause attribute."""
        class HasAttr:
            cause = "not callable"

        assert not is_cause_capable(HasAttr())


class TestErrorText:
    """Test string forms of error-like values."""

    def test_exception_message(self):
        """Test exception message."""
        assert error_text(OSError("disk full")) == "disk full"

    def test_empty_message_uses_class_name(self):
        """Test empty message uses class name."""
        assert error_text(KeyboardInterrupt()) == "KeyboardInterrupt"

    def test_non_exception(self):
        """Test non exception."""
        assert error_text(_Causer()).startswith("<")

    def test_exception_with_failing_str(self):
        """Test exception whose __str__ raises."""
        class Broken(Exception):
            def __str__(self):
                raise RuntimeError("no text")

        assert error_text(Broken()) == "<unstringifiable Broken>"


class TestSafeStr:
    """Test string conversion that never raises."""

    def test_plain_value(self):
        """Test plain value."""
        assert safe_str(42) == "42"

    def test_failing_str(self):
        """Test failing str."""
        class Opaque:
            def __str__(self):
                raise ValueError("nope")

        assert safe_str(Opaque()) == "<unstringifiable Opaque>"
