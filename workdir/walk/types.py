"""Value types shared by the walk engine and listing policies."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path


@dataclass(frozen=True)
class EntryInfo:
    """Metadata for one discovered entry.

    ``is_dir`` is taken without following symlinks, so a link to a
    directory is reported as a leaf and never descended into.
    """

    name: str
    is_dir: bool


SkipFn = Callable[[Path, EntryInfo], bool]
FormatFn = Callable[[Path, EntryInfo], str]
PostProcessFn = Callable[[str], str]


@dataclass(frozen=True)
class FilterPolicy:
    """Skip/format/post-process triple applied during one traversal."""

    skip: SkipFn
    format: FormatFn
    post_process: PostProcessFn

    def replace(
        self,
        *,
        skip: SkipFn | None = None,
        format: FormatFn | None = None,
        post_process: PostProcessFn | None = None,
    ) -> FilterPolicy:
        """Return a copy with the given functions swapped in."""
        changes: dict[str, object] = {}
        if skip is not None:
            changes["skip"] = skip
        if format is not None:
            changes["format"] = format
        if post_process is not None:
            changes["post_process"] = post_process
        return replace(self, **changes)


__all__ = [
    "EntryInfo",
    "FilterPolicy",
    "SkipFn",
    "FormatFn",
    "PostProcessFn",
]
