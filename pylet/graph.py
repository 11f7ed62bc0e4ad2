"""Commit graph helpers: parents, first-parent history, ancestor distances, split point."""

from __future__ import annotations

from collections import deque
from typing import Dict, Generator, Optional

from .objects import Commit
from .objectstore import ObjectStore


def get_commit_parents(objects: ObjectStore, commit_hash: str) -> list[str]:
    """Parent ids of a commit: primary first, then merge parent."""
    return objects.get_commit(commit_hash).parents


def iter_first_parent(
    objects: ObjectStore, start_hash: str
) -> Generator[Commit, None, None]:
    """Walk from start_hash along primary parents only (merge parents are ignored)."""
    h: Optional[str] = start_hash
    while h:
        commit = objects.get_commit(h)
        yield commit
        h = commit.parent


def ancestor_distances(objects: ObjectStore, start_hash: str) -> Dict[str, int]:
    """BFS over both parent edges: commit id -> fewest edges from start_hash (start is 0)."""
    dist: Dict[str, int] = {start_hash: 0}
    queue: deque[str] = deque([start_hash])
    while queue:
        h = queue.popleft()
        for p in get_commit_parents(objects, h):
            if p not in dist:
                dist[p] = dist[h] + 1
                queue.append(p)
    return dist


def split_point(objects: ObjectStore, current: str, given: str) -> Optional[str]:
    """Common ancestor of current and given closest to both, over the full DAG.

    The smallest combined distance wins, then the smallest distance from
    current, then the smaller id. None if histories are disjoint.
    """
    dist_current = ancestor_distances(objects, current)
    dist_given = ancestor_distances(objects, given)
    common = set(dist_current) & set(dist_given)
    if not common:
        return None
    return min(
        common,
        key=lambda h: (dist_current[h] + dist_given[h], dist_current[h], h),
    )
