"""Policy-driven directory walking.

Exposes the ``walk`` engine, the ``FilterPolicy`` value it is configured
with, and the stock policy functions.
"""

from __future__ import annotations

from .engine import walk
from .policy import default_policy, hidden, name_only, relative_path, show_all, unfiltered
from .types import EntryInfo, FilterPolicy

__all__ = [
    "walk",
    "EntryInfo",
    "FilterPolicy",
    "default_policy",
    "hidden",
    "show_all",
    "name_only",
    "relative_path",
    "unfiltered",
]
