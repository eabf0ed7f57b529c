"""Stock skip/format/post-process functions for listings."""

from __future__ import annotations

from pathlib import Path

from .types import EntryInfo, FilterPolicy, FormatFn


def hidden(path: Path, info: EntryInfo) -> bool:
    """Skip dot-prefixed entries (and, for directories, their subtree)."""
    return info.name.startswith(".")


def show_all(path: Path, info: EntryInfo) -> bool:
    return False


def name_only(path: Path, info: EntryInfo) -> str:
    return info.name


def unfiltered(line: str) -> str:
    return line


def relative_path(root: Path | str) -> FormatFn:
    """Build a formatter rendering entries relative to ``root``.

    Paths use ``/`` separators and directories get a trailing ``/``.
    """
    base = Path(root)

    def format_relative(path: Path, info: EntryInfo) -> str:
        try:
            line = path.relative_to(base).as_posix()
        except ValueError:
            line = path.as_posix()
        if info.is_dir:
            line += "/"
        return line

    return format_relative


def default_policy(root: Path | str, *, show_hidden: bool = False, names_only: bool = False) -> FilterPolicy:
    """Policy used by ``WorkDir.ls``: hide dot-entries, root-relative paths."""
    return FilterPolicy(
        skip=show_all if show_hidden else hidden,
        format=name_only if names_only else relative_path(root),
        post_process=unfiltered,
    )


__all__ = [
    "hidden",
    "show_all",
    "name_only",
    "unfiltered",
    "relative_path",
    "default_policy",
]
