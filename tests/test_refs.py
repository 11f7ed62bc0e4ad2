"""Tests for the branch table: names, create/delete/switch, HEAD and refs persistence."""

import tempfile
import unittest
from pathlib import Path

from pylet.errors import (
    BranchExistsError,
    CannotRemoveCurrentBranchError,
    InvalidBranchNameError,
    NoSuchBranchError,
    StateCorruptError,
)
from pylet.refs import BranchTable, parse_head, validate_branch_name
from pylet.storage import FileStorage, MemoryStorage

A = "a" * 40
B = "b" * 40


def make_temp_storage() -> FileStorage:
    d = tempfile.mkdtemp(prefix="pylet_refs_")
    storage = FileStorage(Path(d) / ".pylet")
    storage.create()
    return storage


class TestBranchNames(unittest.TestCase):
    def test_valid(self) -> None:
        for name in ("master", "feature-1", "fix_2", "v1.0"):
            validate_branch_name(name)

    def test_invalid(self) -> None:
        for name in ("", ".hidden", "a..b", "has space", "a/b", "x~1", "y^", "q?", "s*", "br[", "w.lock", "c:d"):
            with self.assertRaises(InvalidBranchNameError, msg=name):
                validate_branch_name(name)


class TestBranchTable(unittest.TestCase):
    def setUp(self) -> None:
        self.table = BranchTable({"master": A}, "master")

    def test_head_is_current_branch_head(self) -> None:
        self.assertEqual(self.table.head(), A)
        self.table.set("master", B)
        self.assertEqual(self.table.head(), B)

    def test_create_does_not_switch(self) -> None:
        self.table.create("other", A)
        self.assertIn("other", self.table)
        self.assertEqual(self.table.current, "master")
        self.assertEqual(self.table.names(), ["master", "other"])

    def test_create_existing(self) -> None:
        with self.assertRaises(BranchExistsError) as cm:
            self.table.create("master", B)
        self.assertEqual(str(cm.exception), "A branch with that name already exists.")

    def test_delete(self) -> None:
        self.table.create("other", A)
        self.table.delete("other")
        self.assertNotIn("other", self.table)
        self.assertEqual(self.table.removed_names(), ["other"])

    def test_delete_current(self) -> None:
        with self.assertRaises(CannotRemoveCurrentBranchError):
            self.table.delete("master")

    def test_delete_missing(self) -> None:
        with self.assertRaises(NoSuchBranchError) as cm:
            self.table.delete("nope")
        self.assertEqual(str(cm.exception), "A branch with that name does not exist.")

    def test_switch(self) -> None:
        self.table.create("other", B)
        self.table.switch("other")
        self.assertEqual(self.table.current, "other")
        self.assertEqual(self.table.head(), B)
        with self.assertRaises(NoSuchBranchError) as cm:
            self.table.switch("nope")
        self.assertEqual(str(cm.exception), "No such branch exists.")

    def test_current_must_have_head(self) -> None:
        with self.assertRaises(StateCorruptError):
            BranchTable({}, "master")


class TestBranchPersistence(unittest.TestCase):
    def test_save_load_files(self) -> None:
        storage = make_temp_storage()
        table = BranchTable({"master": A, "other": B}, "other")
        table.save(storage)
        self.assertEqual((storage.root / "HEAD").read_text(), "ref: refs/heads/other\n")
        self.assertEqual((storage.root / "refs" / "heads" / "master").read_text(), A + "\n")
        loaded = BranchTable.load(storage)
        self.assertEqual(loaded.current, "other")
        self.assertEqual(loaded.heads, {"master": A, "other": B})

    def test_deleted_ref_removed_on_save(self) -> None:
        storage = MemoryStorage()
        table = BranchTable({"master": A, "other": B}, "master")
        table.save(storage)
        table.delete("other")
        table.save(storage)
        self.assertIsNone(storage.load("refs/heads/other"))
        self.assertEqual(BranchTable.load(storage).names(), ["master"])

    def test_bad_ref_content(self) -> None:
        storage = MemoryStorage()
        storage.save("HEAD", b"ref: refs/heads/master\n")
        storage.save("refs/heads/master", b"not-a-sha\n")
        with self.assertRaises(StateCorruptError):
            BranchTable.load(storage)

    def test_parse_head(self) -> None:
        self.assertEqual(parse_head(b"ref: refs/heads/dev\n"), "dev")
        with self.assertRaises(StateCorruptError):
            parse_head(None)
        with self.assertRaises(StateCorruptError):
            parse_head(A.encode())


if __name__ == "__main__":
    unittest.main()
