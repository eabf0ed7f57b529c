"""Exception taxonomy for traversal and workspace operations.

Traversal failures wrap the originating ``OSError`` as ``__cause__`` and keep
the offending path, so callers can tell a vanished root from a permission
problem without string matching.
"""

from __future__ import annotations

import errno
from pathlib import Path


class WorkdirError(Exception):
    """Base class for all errors raised by ``workdir``."""


class TraversalError(WorkdirError):
    """A directory walk was aborted by a filesystem error."""

    def __init__(self, path: Path | str, message: str | None = None) -> None:
        self.path = Path(path)
        super().__init__(message or f"cannot traverse {self.path}")


class RootNotFoundError(TraversalError):
    """The walk root (or a path inside it) does not exist."""

    def __init__(self, path: Path | str, message: str | None = None) -> None:
        super().__init__(path, message or f"no such directory: {Path(path)}")


class TraversalPermissionError(TraversalError):
    """The OS refused access to a path during the walk."""

    def __init__(self, path: Path | str, message: str | None = None) -> None:
        super().__init__(path, message or f"permission denied: {Path(path)}")


class UnsafeRemovalError(WorkdirError):
    """Recursive removal was refused for a filesystem anchor."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"refusing to remove {self.path}")


def traversal_error_for(path: Path | str, exc: OSError) -> TraversalError:
    """Map an ``OSError`` raised at ``path`` onto the traversal taxonomy.

    The returned error is not chained yet; raise it with ``from exc``.
    """
    if isinstance(exc, FileNotFoundError) or exc.errno == errno.ENOENT:
        return RootNotFoundError(path, f"no such file or directory: {Path(path)}")
    if isinstance(exc, PermissionError) or exc.errno in {errno.EACCES, errno.EPERM}:
        return TraversalPermissionError(path)
    detail = exc.strerror or str(exc)
    return TraversalError(path, f"cannot traverse {Path(path)}: {detail}")


__all__ = [
    "WorkdirError",
    "TraversalError",
    "RootNotFoundError",
    "TraversalPermissionError",
    "UnsafeRemovalError",
    "traversal_error_for",
]
