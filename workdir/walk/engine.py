"""Concurrent directory walk feeding rendered lines to the calling thread.

A producer thread scans the tree depth-first and hands formatted lines over a
single-slot queue; the consumer (the generator returned by :func:`walk`)
applies the post-process step and yields non-empty lines in discovery order.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from queue import Full, Queue

from ..errors import TraversalError, traversal_error_for
from .policy import default_policy
from .types import EntryInfo, FilterPolicy

logger = logging.getLogger(__name__)

HANDOFF_POLL_SECONDS = 0.05

_WALK_DONE = object()


@dataclass(frozen=True)
class _WalkFailure:
    """Error captured on the producer side, re-raised by the consumer."""

    path: Path
    error: BaseException


class _WalkCancelled(Exception):
    pass


class _EntryError(Exception):
    """Carries the path an ``OSError`` was raised for out of the scan loop."""

    def __init__(self, path: Path, error: OSError) -> None:
        super().__init__(path, error)
        self.path = path
        self.error = error


class _WalkProducer:
    """Pre-order scanner pushing ``policy.format`` output into ``handoff``."""

    def __init__(
        self,
        root: Path,
        policy: FilterPolicy,
        handoff: Queue[object],
        cancelled: threading.Event,
    ) -> None:
        self._root = root
        self._policy = policy
        self._handoff = handoff
        self._cancelled = cancelled

    def _put(self, item: object) -> None:
        while True:
            if self._cancelled.is_set():
                raise _WalkCancelled
            try:
                self._handoff.put(item, timeout=HANDOFF_POLL_SECONDS)
                return
            except Full:
                continue

    def _scan(self, directory: Path) -> Iterator[tuple[Path, EntryInfo]]:
        # Entries are read up front so only one directory handle is open at a time.
        with os.scandir(directory) as it:
            entries = list(it)
        for child in entries:
            path = Path(child.path)
            try:
                is_dir = child.is_dir(follow_symlinks=False)
            except OSError as exc:
                raise _EntryError(path, exc) from exc
            yield path, EntryInfo(name=child.name, is_dir=is_dir)

    def _visit(self) -> None:
        stack: list[tuple[Path, Iterator[tuple[Path, EntryInfo]]]] = [(self._root, self._scan(self._root))]
        while stack:
            directory, children = stack[-1]
            try:
                path, info = next(children)
            except StopIteration:
                stack.pop()
                continue
            except OSError as exc:
                raise _EntryError(directory, exc) from exc

            if self._cancelled.is_set():
                raise _WalkCancelled
            if self._policy.skip(path, info):
                continue
            self._put(self._policy.format(path, info))
            if info.is_dir:
                stack.append((path, self._scan(path)))

    def run(self) -> None:
        try:
            self._visit()
        except _WalkCancelled:
            logger.debug("walk of %s cancelled by consumer", self._root)
            return
        except _EntryError as exc:
            failure = _WalkFailure(path=exc.path, error=exc.error)
        except BaseException as exc:
            failure = _WalkFailure(path=self._root, error=exc)
        else:
            failure = None

        try:
            self._put(_WALK_DONE if failure is None else failure)
        except _WalkCancelled:
            logger.debug("walk of %s finished after consumer left", self._root)


def _checked_root(root: Path | str) -> Path:
    root_path = Path(root)
    try:
        st = root_path.stat()
    except OSError as exc:
        raise traversal_error_for(root_path, exc) from exc
    if not stat.S_ISDIR(st.st_mode):
        raise TraversalError(root_path, f"not a directory: {root_path}")
    return root_path


def _walk_lines(root: Path, policy: FilterPolicy) -> Iterator[str]:
    handoff: Queue[object] = Queue(maxsize=1)
    cancelled = threading.Event()
    producer = _WalkProducer(root, policy, handoff, cancelled)
    worker = threading.Thread(target=producer.run, name="workdir-walk", daemon=True)
    logger.debug("walking %s", root)
    worker.start()

    emitted = 0
    try:
        while True:
            item = handoff.get()
            if item is _WALK_DONE:
                logger.debug("walk of %s finished, %d lines", root, emitted)
                return
            if isinstance(item, _WalkFailure):
                if isinstance(item.error, OSError):
                    raise traversal_error_for(item.path, item.error) from item.error
                raise item.error
            line = policy.post_process(str(item))
            if line:
                emitted += 1
                yield line
    finally:
        cancelled.set()
        worker.join()


def walk(root: Path | str, policy: FilterPolicy | None = None) -> Iterator[str]:
    """Walk ``root`` and return an iterator over rendered output lines.

    The root is checked before this function returns: a missing root raises
    :class:`~workdir.errors.RootNotFoundError` and a non-directory raises
    :class:`~workdir.errors.TraversalError`, in both cases before any line
    is produced. Later filesystem errors surface from the iterator and abort
    the walk; lines already yielded stay yielded.

    The root itself is never emitted and never pruned. When ``policy.skip``
    is true for a directory its whole subtree is skipped. Closing the iterator
    early stops the background producer.
    """
    root_path = _checked_root(root)
    if policy is None:
        policy = default_policy(root_path)
    return _walk_lines(root_path, policy)


__all__ = ["walk", "HANDOFF_POLL_SECONDS"]
