"""Three-way merge: per-file decision table, conflict text, and the merge plan.

Blob ids are content hashes, so comparing ids compares content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import CONFLICT_END, CONFLICT_SEP, CONFLICT_START
from .objects import Commit
from .objectstore import ObjectStore
from .worktree import WorkingTree

# Per-file outcomes
TAKE_GIVEN = "take-given"
REMOVE = "remove"
CONFLICT = "conflict"
KEEP = "keep"

# Merge outcomes
ALREADY_MERGED = "ancestor"
FAST_FORWARD = "fast-forward"
MERGED = "merged"


@dataclass
class FileMerge:
    """What merge does to one file."""

    name: str
    action: str
    split_id: Optional[str]
    current_id: Optional[str]
    given_id: Optional[str]


@dataclass
class MergeResult:
    """Outcome of a merge: kind, split point, per-file changes, new commit."""

    status: str
    split_point: str
    updated_paths: List[str] = field(default_factory=list)
    deleted_paths: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    commit_id: Optional[str] = None


def classify(
    split_id: Optional[str], current_id: Optional[str], given_id: Optional[str]
) -> str:
    """Decide one file's fate from its blob id in split point, current and given (None = absent).

    First match wins:
      unchanged in current, changed in given      -> take given
      added only in given                         -> take given
      unchanged in current, deleted in given      -> remove
      changed differently on both sides           -> conflict
      anything else (same change, or only current changed) -> keep
    """
    s, c, g = split_id, current_id, given_id
    if s and c and g and s == c and s != g:
        return TAKE_GIVEN
    if not s and not c and g:
        return TAKE_GIVEN
    if s and c and not g and s == c:
        return REMOVE
    if s and c and g and s != c and s != g and c != g:
        return CONFLICT
    if s and not c and g and s != g:
        return CONFLICT
    if s and c and not g and s != c:
        return CONFLICT
    if not s and c and g and c != g:
        return CONFLICT
    return KEEP


def conflict_content(current: Optional[bytes], given: Optional[bytes]) -> bytes:
    """Conflict file body; a missing side contributes nothing."""
    return CONFLICT_START + (current or b"") + CONFLICT_SEP + (given or b"") + CONFLICT_END


def plan_merge(split: Commit, current: Commit, given: Commit) -> List[FileMerge]:
    """Classify every file tracked by any of the three commits, sorted by name."""
    names = set(split.files) | set(current.files) | set(given.files)
    plan = []
    for name in sorted(names):
        s, c, g = split.blob_id(name), current.blob_id(name), given.blob_id(name)
        plan.append(FileMerge(name, classify(s, c, g), s, c, g))
    return plan


def untracked_in_the_way(
    objects: ObjectStore,
    worktree: WorkingTree,
    current: Commit,
    given: Commit,
) -> List[str]:
    """Files untracked by current that exist in the tree with content other than given's version."""
    blocked = []
    for name, blob_id in given.files.items():
        if current.tracks(name) or not worktree.exists(name):
            continue
        if not worktree.same_content(name, objects.blob_content(blob_id)):
            blocked.append(name)
    return sorted(blocked)
