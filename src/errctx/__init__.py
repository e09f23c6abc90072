"""errctx - Errors with context fields and call-site information.

errctx wraps any error with arbitrary key/value context and the file/line
where it was wrapped. The result renders as a readable tree, serializes to a
JSON document, and reports the root cause of a chain of wrapped errors.
"""

__version__ = "0.1.0"
__author__ = "errctx contributors"
__description__ = "Errors with context fields and call-site information"

from errctx.config import CaptureConfig, ErrctxConfig, RenderConfig, load_config
from errctx.document import (
    DOCUMENT_SCHEMA,
    DocumentValidationError,
    ErrorDocument,
    validate_document,
)
from errctx.error import ContextError, contextualize
from errctx.fields import MISSING, CauseCapable, Fields
from errctx.stack import CallSiteCapture, library_root
from errctx.timestamps import ZERO_TIME

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "CaptureConfig",
    "CallSiteCapture",
    "CauseCapable",
    "ContextError",
    "DOCUMENT_SCHEMA",
    "DocumentValidationError",
    "ErrctxConfig",
    "ErrorDocument",
    "Fields",
    "MISSING",
    "RenderConfig",
    "ZERO_TIME",
    "contextualize",
    "library_root",
    "load_config",
    "validate_document",
]
