"""Tests for reflog: commit/checkout/reset/merge write reflog; reflog command output."""

import io
import os
import sys
import tempfile
import unittest
from pathlib import Path

from pylet.config import set_value
from pylet.porcelain import (
    add,
    branch_create,
    branch_delete,
    checkout_branch,
    commit,
    merge,
    reflog_show,
    reset,
)
from pylet.errors import NoSuchBranchError
from pylet.objects import Commit
from pylet.reflog import ZEROS, read_reflog
from pylet.repo import Repository


def _capture(fn, *args, **kwargs):
    out = io.StringIO()
    old_stdout = sys.stdout
    sys.stdout = out
    try:
        fn(*args, **kwargs)
    finally:
        sys.stdout = old_stdout
    return out.getvalue()


class TestCommitWritesReflog(unittest.TestCase):
    """Commit writes HEAD and branch reflog."""

    def setUp(self) -> None:
        d = tempfile.mkdtemp(prefix="pylet_reflog_commit_")
        self.repo_dir = Path(d)
        self.repo = Repository.at(self.repo_dir)
        self.repo.init()
        set_value(self.repo, "user.name", "Alice")
        set_value(self.repo, "user.email", "alice@example.com")

    def test_init_logs_initial_commit(self) -> None:
        entries = read_reflog(self.repo, "HEAD")
        self.assertEqual(len(entries), 1)
        old, new, _, _, _, msg = entries[0]
        self.assertEqual(old, ZEROS)
        self.assertEqual(new, self.repo.head_id())
        self.assertEqual(msg, "commit (initial): initial commit")

    def test_commit_writes_head_and_branch_reflog(self) -> None:
        (self.repo_dir / "f").write_text("x")
        add(self.repo, "f")
        commit(self.repo, "first")
        self.repo.save()
        head_log = self.repo_dir / ".pylet" / "logs" / "HEAD"
        branch_log = self.repo_dir / ".pylet" / "logs" / "refs" / "heads" / "master"
        head_lines = head_log.read_text().strip().splitlines()
        branch_lines = branch_log.read_text().strip().splitlines()
        self.assertEqual(len(head_lines), 2)
        self.assertEqual(len(branch_lines), 2)
        self.assertIn("commit: first", head_lines[-1])
        self.assertIn("commit: first", branch_lines[-1])
        self.assertIn("Alice <alice@example.com>", head_lines[-1])
        self.assertRegex(head_lines[-1], r"^[0-9a-f]{40} [0-9a-f]{40} ")

    def test_nothing_written_until_save(self) -> None:
        (self.repo_dir / "f").write_text("x")
        add(self.repo, "f")
        commit(self.repo, "first")
        head_log = self.repo_dir / ".pylet" / "logs" / "HEAD"
        self.assertEqual(len(head_log.read_text().splitlines()), 1)
        self.assertEqual(len(read_reflog(self.repo, "HEAD")), 2)


class TestHeadMovements(unittest.TestCase):
    def setUp(self) -> None:
        os.environ["PYLET_DATE"] = "1700000000 +0000"
        self.repo = Repository.in_memory()
        self.repo.init()
        self.repo.worktree.write("f", b"1")
        add(self.repo, "f")
        self.first = commit(self.repo, "first")
        branch_create(self.repo, "feature")

    def tearDown(self) -> None:
        os.environ.pop("PYLET_DATE", None)

    def test_checkout_writes_head_only(self) -> None:
        checkout_branch(self.repo, "feature")
        head = read_reflog(self.repo, "HEAD")
        self.assertEqual(head[-1][5], "checkout: moving from master to feature")
        self.assertEqual(head[-1][3], 1700000000)
        feature = read_reflog(self.repo, "refs/heads/feature")
        self.assertEqual([e[5] for e in feature], ["branch: Created from master"])

    def test_reset_and_merge_entries(self) -> None:
        self.repo.worktree.write("f", b"2")
        add(self.repo, "f")
        second = commit(self.repo, "second")
        reset(self.repo, self.first)
        checkout_branch(self.repo, "feature")
        _capture(merge, self.repo, "master")
        checkout_branch(self.repo, "master")
        reset(self.repo, second)
        checkout_branch(self.repo, "feature")
        _capture(merge, self.repo, "master")
        msgs = [e[5] for e in read_reflog(self.repo, "refs/heads/feature")]
        self.assertEqual(msgs[-1], "merge master: Fast-forward")
        master_msgs = [e[5] for e in read_reflog(self.repo, "refs/heads/master")]
        self.assertIn(f"reset: moving to {self.first}", master_msgs)

    def test_merge_commit_entry(self) -> None:
        self.repo.worktree.write("g", b"g")
        add(self.repo, "g")
        commit(self.repo, "master g")
        checkout_branch(self.repo, "feature")
        self.repo.worktree.write("h", b"h")
        add(self.repo, "h")
        commit(self.repo, "feature h")
        _capture(merge, self.repo, "master")
        msgs = [e[5] for e in read_reflog(self.repo, "HEAD")]
        self.assertEqual(msgs[-1], "commit (merge): Merged master into feature.")

    def test_deleted_branch_log_removed_on_save(self) -> None:
        self.repo.save()
        self.assertIsNotNone(self.repo.storage.load("logs/refs/heads/feature"))
        branch_delete(self.repo, "feature")
        self.repo.save()
        self.assertIsNone(self.repo.storage.load("logs/refs/heads/feature"))


class TestReflogShow(unittest.TestCase):
    def setUp(self) -> None:
        self.repo = Repository.in_memory()
        self.repo.init()
        self.repo.worktree.write("f", b"1")
        add(self.repo, "f")
        self.first = commit(self.repo, "first")

    def test_newest_first(self) -> None:
        out = _capture(reflog_show, self.repo)
        lines = out.splitlines()
        self.assertEqual(lines[0], f"{self.first[:7]} HEAD@{{0}}: commit: first")
        initial = Commit.initial().id
        self.assertEqual(lines[1], f"{initial[:7]} HEAD@{{1}}: commit (initial): initial commit")
        self.assertEqual(len(lines), 2)

    def test_branch_and_limit(self) -> None:
        out = _capture(reflog_show, self.repo, "master", max_count=1)
        self.assertEqual(out, f"{self.first[:7]} master@{{0}}: commit: first\n")

    def test_unknown_branch(self) -> None:
        with self.assertRaises(NoSuchBranchError):
            reflog_show(self.repo, "nope")


if __name__ == "__main__":
    unittest.main()
