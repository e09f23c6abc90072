"""Call-site capture for errctx nodes.

Records the source file and line of the code that built an error. File paths
can be shortened by stripping a configured prefix, e.g. the directory an
application or this library is installed under.
"""

import logging
import os
import sys

from errctx.config import CaptureConfig
from errctx.fields import Fields

logger = logging.getLogger(__name__)

UNKNOWN_FILE = "<unknown>"

# Expected tail of this module's path, used to find the library root
_MODULE_SUFFIX = os.path.join("errctx", "stack.py")


def library_root(module_file: str | None = None) -> str:
    """Return the directory holding the ``errctx`` package.

    Computed by removing the known ``errctx/stack.py`` suffix from this
    module's file name.

    Args:
        module_file: Path to use instead of this module's ``__file__``

    Returns:
        Prefix to strip, or an empty string if it cannot be determined
    """
    file = module_file if module_file is not None else __file__
    if not file or not file.endswith(_MODULE_SUFFIX):
        logger.debug(f"Cannot derive library root from {file!r}")
        return ""
    return file[: len(file) - len(_MODULE_SUFFIX)]


class CallSiteCapture:
    """Locates stack frames and normalizes their file names."""

    __slots__ = ("prefix",)

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    @classmethod
    def from_config(cls, config: CaptureConfig) -> "CallSiteCapture":
        """Create a capture from the ``capture`` config section."""
        if config.trim_library_root:
            return cls(library_root())
        return cls(config.path_prefix)

    def trim(self, filename: str) -> str:
        """Strip the prefix from a file name; unrelated names pass through."""
        if self.prefix and filename.startswith(self.prefix):
            return filename[len(self.prefix):]
        return filename

    def locate(self, depth: int = 0) -> tuple[str, int]:
        """Return file and line of a frame above the caller.

        Args:
            depth: 0 is the function calling ``locate``, 1 its caller, ...

        Returns:
            (trimmed file name, line number), or ``("<unknown>", 0)``
        """
        try:
            frame = sys._getframe(depth + 1)
        except ValueError:
            logger.debug(f"No stack frame at depth {depth}")
            return UNKNOWN_FILE, 0
        return self.trim(frame.f_code.co_filename), frame.f_lineno

    def record(self, fields: Fields, depth: int = 0) -> None:
        """Write ``file`` and ``line`` of a frame above the caller into fields."""
        # +1 skips this method's own frame
        file, line = self.locate(depth + 1)
        fields["file"] = file
        fields["line"] = line

    def __repr__(self) -> str:
        return f"CallSiteCapture(prefix={self.prefix!r})"


DEFAULT_CAPTURE = CallSiteCapture()
