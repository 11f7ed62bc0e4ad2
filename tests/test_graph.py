"""Tests for commit graph helpers: first-parent walk, ancestor distances, split point."""

import unittest
from typing import Optional

from pylet.graph import ancestor_distances, iter_first_parent, split_point
from pylet.objects import Commit
from pylet.objectstore import ObjectStore
from pylet.storage import MemoryStorage


class GraphTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store = ObjectStore(MemoryStorage())
        self.root = self.make("root")

    def make(self, msg: str, parent: Optional[str] = None, merge: Optional[str] = None) -> str:
        return self.store.put(Commit(msg, {}, parent=parent, merge_parent=merge, timestamp=1))


class TestLinear(GraphTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.a = self.make("a", self.root)
        self.b = self.make("b", self.a)

    def test_iter_first_parent(self) -> None:
        msgs = [c.message for c in iter_first_parent(self.store, self.b)]
        self.assertEqual(msgs, ["b", "a", "root"])

    def test_distances(self) -> None:
        self.assertEqual(ancestor_distances(self.store, self.b), {self.b: 0, self.a: 1, self.root: 2})

    def test_split_of_ancestor_is_ancestor(self) -> None:
        self.assertEqual(split_point(self.store, self.b, self.a), self.a)
        self.assertEqual(split_point(self.store, self.a, self.b), self.a)

    def test_disjoint_histories(self) -> None:
        other = self.make("other root")
        self.assertIsNone(split_point(self.store, self.b, other))


class TestForked(GraphTestCase):
    def test_simple_fork(self) -> None:
        base = self.make("base", self.root)
        left = self.make("left", base)
        right = self.make("right", self.make("right0", base))
        self.assertEqual(split_point(self.store, left, right), base)

    def test_first_parent_walk_skips_merge_parent(self) -> None:
        side = self.make("side", self.root)
        main = self.make("main", self.root)
        m = self.make("merge", main, side)
        msgs = [c.message for c in iter_first_parent(self.store, m)]
        self.assertEqual(msgs, ["merge", "main", "root"])


class TestMergeParentTopology(GraphTestCase):
    """Branch merged into master earlier: split point follows the merge parent."""

    def test_split_is_previously_merged_commit(self) -> None:
        m1 = self.make("m1", self.root)
        b1 = self.make("b1", self.root)
        m2 = self.make("merge b1", m1, b1)
        b2 = self.make("b2", b1)
        self.assertEqual(split_point(self.store, m2, b2), b1)
        self.assertEqual(split_point(self.store, b2, m2), b1)

    def test_given_already_merged(self) -> None:
        m1 = self.make("m1", self.root)
        b1 = self.make("b1", self.root)
        m2 = self.make("merge b1", m1, b1)
        self.assertEqual(split_point(self.store, m2, b1), b1)


class TestCrissCross(GraphTestCase):
    """Two branches merged into each other: either crossing commit is a latest common ancestor."""

    def test_criss_cross_picks_latest(self) -> None:
        a1 = self.make("a1", self.root)
        b1 = self.make("b1", self.root)
        a2 = self.make("a2", a1, b1)
        b2 = self.make("b2", b1, a1)
        split = split_point(self.store, a2, b2)
        self.assertIn(split, (a1, b1))
        self.assertNotEqual(split, self.root)
        self.assertEqual(split, min(a1, b1))

    def test_smallest_combined_distance_wins(self) -> None:
        # root: 1 step from left via its merge parent, 2 from right; x: 3 and 1
        x = self.make("x", self.root)
        deep = self.make("d2", self.make("d1", x))
        left = self.make("left", deep, self.root)
        right = self.make("right", x)
        self.assertEqual(split_point(self.store, left, right), self.root)


if __name__ == "__main__":
    unittest.main()
