"""Git short-status parsing and status-prefix colorization.

Parses ``git status --porcelain=v1 -z`` into records keyed by path relative to
a listing root, and renders the two-character status column with ANSI color
so listings can show VCS state next to each entry.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .command import run_command
from .walk.types import PostProcessFn

logger = logging.getLogger(__name__)

STATUS_RESET = "\033[0m"
ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
CLEAN_PREFIX = "   "
GIT_TIMEOUT_SECONDS = 2.0

_STAGED_SGR = "32"
_WORKTREE_SGR = "38;5;214"
_UNTRACKED_SGR = "31"
_IGNORED_SGR = "90"
_UNMERGED_SGR = "1;35"

_INDEX_CODES = frozenset("MADRCT")
_WORKTREE_CODES = frozenset("MDT")
_UNMERGED_STATUSES = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})


@dataclass(frozen=True)
class StatusRecord:
    """One porcelain entry; ``orig_path`` is set for renames and copies."""

    status: str
    path: str
    orig_path: str | None = None


def _column_sgr(code: str, column: int, unmerged: bool) -> str | None:
    if code == " ":
        return None
    if unmerged:
        return _UNMERGED_SGR
    if code == "?":
        return _UNTRACKED_SGR
    if code == "!":
        return _IGNORED_SGR
    if column == 0 and code in _INDEX_CODES:
        return _STAGED_SGR
    if column == 1 and code in _WORKTREE_CODES:
        return _WORKTREE_SGR
    return None


def colorize_status(prefix: str) -> str:
    """Wrap each status code of a ``"XY "`` prefix in color escapes.

    Every colored code is followed by :data:`STATUS_RESET`. Anything that is
    not a three-character prefix with a known code is returned unchanged.
    """
    if len(prefix) != 3 or prefix[2] != " ":
        return prefix

    codes = prefix[:2]
    unmerged = codes in _UNMERGED_STATUSES
    parts: list[str] = []
    colored = False
    for column, code in enumerate(codes):
        sgr = _column_sgr(code, column, unmerged)
        if sgr is None:
            parts.append(code)
            continue
        parts.append(f"\033[{sgr}m{code}{STATUS_RESET}")
        colored = True
    if not colored:
        return prefix
    return "".join(parts) + " "


def parse_porcelain_z(output: str) -> list[StatusRecord]:
    """Split NUL-separated porcelain v1 output into status records.

    Rename and copy entries are followed by an extra token naming the source
    path; it is attached as ``orig_path`` rather than read as a record.
    """
    records: list[StatusRecord] = []
    tokens = output.split("\0")
    index = 0
    while index < len(tokens):
        token = tokens[index]
        index += 1
        if not token:
            continue
        if len(token) < 4 or token[2] != " ":
            continue

        status = token[:2]
        orig_path: str | None = None
        if "R" in status or "C" in status:
            if index < len(tokens) and tokens[index]:
                orig_path = tokens[index]
            index += 1
        records.append(StatusRecord(status=status, path=token[3:], orig_path=orig_path))

    return records


def _resolve_repo_root(path: Path, timeout_seconds: float) -> Path | None:
    try:
        proc = run_command(path, "git", "rev-parse", "--show-toplevel", timeout=timeout_seconds)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git rev-parse failed in %s: %s", path, exc)
        return None
    if proc.returncode != 0:
        return None
    top_level = proc.stdout.strip()
    return Path(top_level).resolve() if top_level else None


def collect_git_status(root: Path | str, timeout_seconds: float = GIT_TIMEOUT_SECONDS) -> dict[str, str]:
    """Return ``{path relative to root: status}`` for changed entries under ``root``.

    Untracked and ignored directories keep their trailing ``/``. Outside a
    repository, without git, or when git fails, the result is empty.
    """
    if shutil.which("git") is None:
        logger.debug("git not found on PATH")
        return {}

    tree_root = Path(root).resolve()
    repo_root = _resolve_repo_root(tree_root, timeout_seconds)
    if repo_root is None:
        return {}

    try:
        proc = run_command(
            repo_root,
            "git",
            "status",
            "--porcelain=v1",
            "-z",
            "--untracked-files=normal",
            timeout=timeout_seconds,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git status failed in %s: %s", repo_root, exc)
        return {}
    if proc.returncode != 0:
        logger.debug("git status exited with %d in %s", proc.returncode, repo_root)
        return {}

    statuses: dict[str, str] = {}
    for record in parse_porcelain_z(proc.stdout):
        is_dir = record.path.endswith("/")
        # Lexical join: a symlink entry is keyed by its own path, not its target.
        target = repo_root.joinpath(*PurePosixPath(record.path).parts)
        if target == tree_root or not target.is_relative_to(tree_root):
            continue
        rel = target.relative_to(tree_root).as_posix()
        statuses[rel + "/" if is_dir else rel] = record.status
    return statuses


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def status_for_line(statuses: dict[str, str], line: str) -> str | None:
    """Look up the status of a root-relative listing line.

    Entries below an untracked or ignored directory inherit its status.
    """
    status = statuses.get(line)
    if status is not None:
        return status
    for parent in PurePosixPath(line.rstrip("/")).parents:
        if str(parent) == ".":
            break
        inherited = statuses.get(f"{parent.as_posix()}/")
        if inherited in {"??", "!!"}:
            return inherited
    return None


def status_post_process(
    statuses: dict[str, str],
    *,
    changed_only: bool = False,
    color: bool = True,
) -> PostProcessFn:
    """Build a post-process step prefixing each line with its status column.

    Clean lines get :data:`CLEAN_PREFIX`, or are dropped with ``changed_only``.
    """

    def prefix_status(line: str) -> str:
        status = status_for_line(statuses, line)
        if status is None:
            return "" if changed_only else CLEAN_PREFIX + line
        prefix = f"{status} "
        return (colorize_status(prefix) if color else prefix) + line

    return prefix_status


__all__ = [
    "STATUS_RESET",
    "ANSI_ESCAPE_RE",
    "strip_ansi",
    "CLEAN_PREFIX",
    "StatusRecord",
    "colorize_status",
    "parse_porcelain_z",
    "collect_git_status",
    "status_for_line",
    "status_post_process",
]
