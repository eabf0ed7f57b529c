"""Tests for the concurrent walk engine.

Covers pruning, root handling, post-process suppression, ordering, error
propagation, and producer shutdown when the consumer stops early.
"""

from __future__ import annotations

import os
import tempfile
import threading
import unittest
from pathlib import Path
from unittest import mock

from workdir.errors import RootNotFoundError, TraversalError, TraversalPermissionError
from workdir.walk import FilterPolicy, hidden, relative_path, show_all, unfiltered, walk


def _build_tree(root: Path) -> None:
    (root / "sub").mkdir()
    (root / "empty").mkdir()
    (root / "sub" / "deeper").mkdir()
    for rel in ("A", "B", "sub/C", "sub/deeper/D", ".hidden"):
        (root / rel).write_text("", encoding="utf-8")


def _policy(root: Path, skip=show_all, post_process=unfiltered) -> FilterPolicy:
    return FilterPolicy(skip=skip, format=relative_path(root), post_process=post_process)


class WalkEngineTests(unittest.TestCase):
    def test_walk_emits_every_entry_once_except_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)

            lines = list(walk(root, _policy(root)))

            self.assertEqual(len(lines), len(set(lines)))
            self.assertEqual(
                sorted(lines),
                [".hidden", "A", "B", "empty/", "sub/", "sub/C", "sub/deeper/", "sub/deeper/D"],
            )

    def test_walk_is_pre_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)

            lines = list(walk(root, _policy(root)))

            for index, line in enumerate(lines):
                parent = line.rstrip("/").rpartition("/")[0]
                if parent:
                    self.assertIn(f"{parent}/", lines[:index])

    def test_skipped_directory_prunes_whole_subtree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)
            visited: list[str] = []

            def skip_sub(path: Path, info) -> bool:
                visited.append(path.relative_to(root).as_posix())
                return info.name == "sub"

            lines = sorted(walk(root, _policy(root, skip=skip_sub)))

            self.assertEqual(lines, [".hidden", "A", "B", "empty/"])
            self.assertNotIn("sub/C", visited)
            self.assertNotIn("sub/deeper", visited)

    def test_skip_on_file_omits_only_that_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)

            lines = sorted(walk(root, _policy(root, skip=lambda path, info: info.name == "C")))

            self.assertNotIn("sub/C", lines)
            self.assertIn("sub/", lines)
            self.assertIn("sub/deeper/D", lines)

    def test_root_is_never_pruned_even_when_skip_matches_it(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / ".dotted-root"
            root.mkdir()
            _build_tree(root)

            lines = sorted(walk(root, _policy(root, skip=hidden)))

            self.assertEqual(lines, ["A", "B", "empty/", "sub/", "sub/C", "sub/deeper/", "sub/deeper/D"])

    def test_empty_root_yields_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(list(walk(tmp, _policy(Path(tmp)))), [])

    def test_post_process_empty_result_suppresses_only_that_line(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)

            lines = sorted(walk(root, _policy(root, post_process=lambda line: "" if line == "B" else line)))

            self.assertNotIn("B", lines)
            self.assertIn("A", lines)
            self.assertEqual(len(lines), 7)

    def test_post_process_runs_on_formatted_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "x").write_text("", encoding="utf-8")

            lines = list(walk(root, _policy(root, post_process=str.upper)))

            self.assertEqual(lines, ["X"])

    def test_output_order_is_stable_across_runs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)
            for index in range(20):
                (root / f"file-{index:02d}").write_text("", encoding="utf-8")

            first = list(walk(root, _policy(root)))
            for _ in range(3):
                self.assertEqual(list(walk(root, _policy(root))), first)

    def test_default_policy_hides_dot_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)
            (root / ".git").mkdir()
            (root / ".git" / "HEAD").write_text("", encoding="utf-8")

            lines = sorted(walk(root))

            self.assertEqual(lines, ["A", "B", "empty/", "sub/", "sub/C", "sub/deeper/", "sub/deeper/D"])

    def test_missing_root_fails_before_iteration(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "gone"
            with self.assertRaises(RootNotFoundError) as ctx:
                walk(missing, _policy(missing))
            self.assertEqual(ctx.exception.path, missing)
            self.assertIsInstance(ctx.exception.__cause__, FileNotFoundError)

    def test_file_root_fails_with_traversal_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "file.txt"
            target.write_text("x", encoding="utf-8")
            with self.assertRaises(TraversalError):
                walk(target, _policy(Path(tmp)))

    def test_root_removed_after_check_fails_with_not_found(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)
            real_scandir = os.scandir

            def vanished(path):
                if Path(path) == root:
                    raise FileNotFoundError(2, "No such file or directory", str(path))
                return real_scandir(path)

            lines = walk(root, _policy(root))
            with mock.patch("workdir.walk.engine.os.scandir", side_effect=vanished):
                with self.assertRaises(RootNotFoundError):
                    list(lines)

    def test_unreadable_subdirectory_aborts_whole_walk(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)
            blocked = root / "sub"
            real_scandir = os.scandir

            def denied(path):
                if Path(path) == blocked:
                    raise PermissionError(13, "Permission denied", str(path))
                return real_scandir(path)

            collected: list[str] = []
            with mock.patch("workdir.walk.engine.os.scandir", side_effect=denied):
                with self.assertRaises(TraversalPermissionError) as ctx:
                    for line in walk(root, _policy(root)):
                        collected.append(line)

            self.assertEqual(ctx.exception.path, blocked)
            self.assertIsInstance(ctx.exception.__cause__, PermissionError)
            self.assertIn("sub/", collected)
            self.assertFalse(any(line.startswith("sub/") and line != "sub/" for line in collected))

    def test_policy_exception_propagates_to_consumer(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)

            def broken_format(path: Path, info) -> str:
                raise ValueError("bad format")

            policy = FilterPolicy(skip=show_all, format=broken_format, post_process=unfiltered)
            with self.assertRaisesRegex(ValueError, "bad format"):
                list(walk(root, policy))

    def test_system_exit_in_policy_reaches_consumer(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _build_tree(root)

            def exiting_skip(path: Path, info) -> bool:
                raise SystemExit(3)

            raised: list[BaseException] = []

            def consume() -> None:
                try:
                    list(walk(root, _policy(root, skip=exiting_skip)))
                except BaseException as exc:
                    raised.append(exc)

            consumer = threading.Thread(target=consume, daemon=True)
            consumer.start()
            consumer.join(timeout=5.0)

            self.assertFalse(consumer.is_alive())
            self.assertEqual(len(raised), 1)
            self.assertIsInstance(raised[0], SystemExit)
            self.assertEqual(raised[0].code, 3)

    def test_closing_iterator_early_stops_producer(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for index in range(50):
                (root / f"f{index}").write_text("", encoding="utf-8")

            lines = walk(root, _policy(root))
            first = next(lines)
            lines.close()

            self.assertTrue(first.startswith("f"))
            alive = [thread for thread in threading.enumerate() if thread.name == "workdir-walk"]
            self.assertEqual(alive, [])

    @unittest.skipIf(not hasattr(os, "symlink") or os.name != "posix", "symlinks need POSIX")
    def test_symlinked_directory_is_listed_but_not_descended(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            real = root / "real"
            real.mkdir()
            (real / "inside").write_text("", encoding="utf-8")
            (root / "link").symlink_to(real, target_is_directory=True)

            lines = sorted(walk(root, _policy(root)))

            self.assertEqual(lines, ["link", "real/", "real/inside"])


if __name__ == "__main__":
    unittest.main()
