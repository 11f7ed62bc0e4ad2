"""Tests for content objects: blob fingerprints, commit serialization, fixed initial commit."""

import hashlib
import unittest
import zlib

from pylet.errors import StateCorruptError
from pylet.objects import Blob, Commit, StoredObject


class TestBlob(unittest.TestCase):
    def test_blob_id_is_sha1_of_header_and_content(self) -> None:
        blob = Blob(b"hello\n")
        expected = hashlib.sha1(b"blob 6\0hello\n").hexdigest()
        self.assertEqual(blob.id, expected)

    def test_identical_content_identical_id(self) -> None:
        self.assertEqual(Blob(b"x").id, Blob(b"x").id)
        self.assertNotEqual(Blob(b"x").id, Blob(b"y").id)

    def test_serialize_deserialize(self) -> None:
        blob = Blob(b"\x00binary\xff")
        back = StoredObject.deserialize(blob.serialize())
        self.assertIsInstance(back, Blob)
        self.assertEqual(back.content, b"\x00binary\xff")


class TestCommit(unittest.TestCase):
    def test_initial_commit_is_fixed(self) -> None:
        a = Commit.initial()
        b = Commit.initial()
        self.assertEqual(a.id, b.id)
        self.assertEqual(a.message, "initial commit")
        self.assertEqual(a.timestamp, 0)
        self.assertEqual(a.files, {})
        self.assertEqual(a.parents, [])

    def test_content_layout(self) -> None:
        p = "a" * 40
        m = "b" * 40
        c = Commit("msg", {"z.txt": "2" * 40, "a.txt": "1" * 40}, parent=p, merge_parent=m, timestamp=5, tz_offset="+0100")
        expected = (
            f"parent {p}\nmerge {m}\ndate 5 +0100\n"
            f"file {'1' * 40} a.txt\nfile {'2' * 40} z.txt\n\nmsg"
        ).encode()
        self.assertEqual(c.content, expected)
        self.assertEqual(list(c.files), ["a.txt", "z.txt"])

    def test_merge_parent_changes_id(self) -> None:
        plain = Commit("m", {}, parent="a" * 40, timestamp=1)
        merged = Commit("m", {}, parent="a" * 40, merge_parent="b" * 40, timestamp=1)
        self.assertNotEqual(plain.id, merged.id)
        self.assertTrue(merged.is_merge())
        self.assertEqual(merged.parents, ["a" * 40, "b" * 40])

    def test_round_trip_with_multiline_message(self) -> None:
        c = Commit("line one\n\nline three", {"f": "c" * 40}, parent="d" * 40, timestamp=99)
        back = StoredObject.deserialize(c.serialize())
        self.assertIsInstance(back, Commit)
        self.assertEqual(back.id, c.id)
        self.assertEqual(back.message, "line one\n\nline three")
        self.assertEqual(back.files, {"f": "c" * 40})
        self.assertEqual(back.parent, "d" * 40)
        self.assertIsNone(back.merge_parent)

    def test_tracks_and_blob_id(self) -> None:
        c = Commit("m", {"f": "c" * 40})
        self.assertTrue(c.tracks("f"))
        self.assertFalse(c.tracks("g"))
        self.assertEqual(c.blob_id("f"), "c" * 40)
        self.assertIsNone(c.blob_id("g"))

    def test_non_canonical_content_rejected(self) -> None:
        content = b"date 0 +0000\nfile " + b"b" * 40 + b" z\nfile " + b"a" * 40 + b" a\n\nmsg"
        with self.assertRaises(StateCorruptError):
            Commit.from_content(content)

    def test_unknown_header_rejected(self) -> None:
        with self.assertRaises(StateCorruptError):
            Commit.from_content(b"author someone\n\nmsg")

    def test_undecodable_content_rejected(self) -> None:
        with self.assertRaises(StateCorruptError):
            Commit.from_content(b"\xff\n\nmsg")


class TestDeserializeErrors(unittest.TestCase):
    def test_not_zlib(self) -> None:
        with self.assertRaises(StateCorruptError):
            StoredObject.deserialize(b"not compressed")

    def test_size_mismatch(self) -> None:
        with self.assertRaises(StateCorruptError):
            StoredObject.deserialize(zlib.compress(b"blob 10\0short"))

    def test_unknown_type(self) -> None:
        with self.assertRaises(StateCorruptError):
            StoredObject.deserialize(zlib.compress(b"tree 0\0"))

    def test_undecodable_header(self) -> None:
        with self.assertRaises(StateCorruptError):
            StoredObject.deserialize(zlib.compress(b"\xff\xfe 3\0abc"))


if __name__ == "__main__":
    unittest.main()
