"""Pytest configuration and fixtures for errctx tests."""

import pytest

from errctx import ContextError, contextualize


@pytest.fixture
def io_error():
    """An OS-level error to wrap."""
    return OSError("connection refused")


@pytest.fixture
def sample_node(io_error) -> ContextError:
    """Node with a wrapped error and a couple of context fields."""
    return contextualize(io_error, "user", "alice", "attempt", 3)


@pytest.fixture
def nested_node(io_error) -> ContextError:
    """Three nodes deep, wrapping io_error at the bottom."""
    inner = contextualize(io_error, "layer", "inner")
    middle = contextualize(inner, "layer", "middle")
    return contextualize(middle, "layer", "outer")
