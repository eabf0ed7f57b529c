"""Public package surface for workdir.

Exports the listing facade, the walk engine, and the status colorizer.
``main`` is imported lazily to keep package imports lightweight.
"""

from __future__ import annotations

from .errors import RootNotFoundError, TraversalError, WorkdirError
from .git_status import colorize_status
from .walk import EntryInfo, FilterPolicy, walk
from .workspace import WorkDir


def main(*args, **kwargs):
    """Lazily import CLI entrypoint."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "main",
    "WorkDir",
    "walk",
    "EntryInfo",
    "FilterPolicy",
    "colorize_status",
    "WorkdirError",
    "TraversalError",
    "RootNotFoundError",
]
