"""Working-directory facade: listings plus fixture lifecycle helpers.

``WorkDir`` binds a root directory, an output sink, and a listing policy.
It lists the tree through :func:`workdir.walk.walk`, optionally annotated with
git status, and offers the small create/populate/remove helpers tests use to
build throwaway directory layouts.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from .command import run_command
from .errors import UnsafeRemovalError
from .git_status import CLEAN_PREFIX, collect_git_status, status_post_process, strip_ansi
from .walk import FilterPolicy, default_policy, relative_path, walk
from .walk.types import PostProcessFn

logger = logging.getLogger(__name__)

DIR_MODE = 0o755
FILE_MODE = 0o644
TEMP_PREFIX = "workdir"


class NullWriter(io.TextIOBase):
    """Text sink that discards everything written to it."""

    def writable(self) -> bool:
        return True

    def write(self, text: str) -> int:
        return len(text)


class WorkDir:
    """A directory root with a listing policy and an output sink."""

    def __init__(
        self,
        root: Path | str = ".",
        writer: TextIO | None = None,
        policy: FilterPolicy | None = None,
        *,
        show_hidden: bool = False,
        name_only: bool = False,
    ) -> None:
        self.root = Path(root)
        self.writer = writer
        if policy is None:
            policy = default_policy(self.root, show_hidden=show_hidden, names_only=name_only)
        self.policy = policy

    @classmethod
    def temp_dir(cls, prefix: str = TEMP_PREFIX, **kwargs: object) -> WorkDir:
        """Create a fresh directory under ``$TMPDIR`` and wrap it.

        ``TMPDIR`` is re-read on every call. When it names a missing
        directory the underlying ``FileNotFoundError`` propagates.
        """
        parent = os.environ.get("TMPDIR") or None
        path = tempfile.mkdtemp(prefix=prefix, dir=parent)
        logger.debug("created temp dir %s", path)
        kwargs.setdefault("writer", NullWriter())
        return cls(path, **kwargs)

    def __str__(self) -> str:
        return str(self.root)

    def __fspath__(self) -> str:
        return os.fspath(self.root)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.root)!r})"

    def join(self, name: str | Path) -> Path:
        return self.root / name

    def _sink(self, writer: TextIO | None) -> TextIO:
        if writer is not None:
            return writer
        if self.writer is not None:
            return self.writer
        return sys.stdout

    def lines(self, post_process: PostProcessFn | None = None) -> Iterator[str]:
        """Walk the root with this instance's policy and yield output lines."""
        policy = self.policy
        if post_process is not None:
            policy = policy.replace(post_process=post_process)
        return walk(self.root, policy)

    def _write_lines(self, lines: Iterator[str] | list[str], writer: TextIO | None) -> int:
        sink = self._sink(writer)
        count = 0
        for line in lines:
            sink.write(f"{line}\n")
            count += 1
        return count

    def ls(
        self,
        writer: TextIO | None = None,
        post_process: PostProcessFn | None = None,
        *,
        sort: bool = False,
    ) -> int:
        """Write the listing to ``writer`` and return the number of lines.

        A missing root raises :class:`~workdir.errors.RootNotFoundError`
        before anything is written. With ``sort`` the whole listing is
        collected first and written in lexical order.
        """
        lines = self.lines(post_process)
        if sort:
            return self._write_lines(sorted(lines), writer)
        return self._write_lines(lines, writer)

    def ls_status(
        self,
        writer: TextIO | None = None,
        *,
        changed_only: bool = False,
        color: bool = True,
        sort: bool = False,
    ) -> int:
        """List root-relative paths prefixed with their git status column.

        Clean entries get a blank column, or are left out with
        ``changed_only``. Outside a git repository every entry is clean.
        """
        statuses = collect_git_status(self.root)
        policy = self.policy.replace(
            format=relative_path(self.root),
            post_process=status_post_process(statuses, changed_only=changed_only, color=color),
        )
        lines = walk(self.root, policy)
        if sort:
            # Sort on the path, not the colored prefix.
            ordered = sorted(lines, key=lambda line: strip_ansi(line)[len(CLEAN_PREFIX) :])
            return self._write_lines(ordered, writer)
        return self._write_lines(lines, writer)

    def is_empty(self, subpath: str | Path = "") -> bool:
        """Return whether ``root/subpath`` has no entries.

        A path that does not exist counts as empty; a regular file does not.
        """
        target = self.join(subpath)
        try:
            with os.scandir(target) as entries:
                return next(entries, None) is None
        except FileNotFoundError:
            return True
        except NotADirectoryError:
            return False

    def mkdir_all(self, *subdirs: str | Path) -> None:
        """Create each subdirectory (and parents); stops at the first failure."""
        for sub in subdirs:
            os.makedirs(self.join(sub), mode=DIR_MODE, exist_ok=True)

    def touch(self, name: str) -> str:
        """Create or truncate ``root/name`` as an empty file."""
        fd = os.open(self.join(name), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        os.close(fd)
        return name

    def touch_all(self, *names: str) -> list[str]:
        """Touch every name in order; files created before a failure stay."""
        return [self.touch(name) for name in names]

    def write_file(self, name: str, data: bytes | str) -> None:
        """Write ``data`` to ``root/name``, replacing previous content."""
        payload = data.encode("utf-8") if isinstance(data, str) else data
        fd = os.open(self.join(name), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload)

    def remove_all(self) -> None:
        """Recursively delete the root; a root that is already gone is fine.

        Filesystem anchors such as ``/`` are refused with
        :class:`~workdir.errors.UnsafeRemovalError`.
        """
        resolved = self.root.resolve()
        if resolved == Path(resolved.anchor):
            logger.warning("refusing to remove filesystem root %s", resolved)
            raise UnsafeRemovalError(resolved)
        if not os.path.lexists(self.root):
            return
        if self.root.is_symlink() or not self.root.is_dir():
            self.root.unlink()
            return
        shutil.rmtree(self.root)
        logger.debug("removed %s", self.root)

    def run(
        self,
        *args: str,
        check: bool = False,
        timeout: float | None = None,
    ) -> subprocess.CompletedProcess[str]:
        """Run an external command with the root as its working directory."""
        return run_command(self.root, *args, check=check, timeout=timeout)


__all__ = ["WorkDir", "NullWriter", "DIR_MODE", "FILE_MODE"]
