"""Repository: ties the working tree, storage, object store, branches and staging together."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import write_default_config
from .constants import DEFAULT_BRANCH, HEAD_KEY, INDEX_KEY, REF_HEADS_PREFIX, REPO_DIR
from .errors import NotARepositoryError, RepositoryExistsError
from .index import StagingArea
from .objects import Commit
from .objectstore import ObjectStore
from .reflog import ZEROS, append_reflog, flush_reflog, reflog_key
from .refs import BranchTable
from .storage import FileStorage, MemoryStorage, Storage
from .util import timestamp_from_env, timestamp_with_tz
from .worktree import FileWorkingTree, MemoryWorkingTree, WorkingTree


class Repository:
    """Repository state for one command: loaded once, saved once on success."""

    def __init__(self, worktree: WorkingTree, storage: Storage) -> None:
        self.worktree = worktree
        self.storage = storage
        self.objects = ObjectStore(storage)
        self.branches: Optional[BranchTable] = None
        self.staging = StagingArea()
        self.pending_reflog: List[Tuple[str, str]] = []

    @classmethod
    def at(cls, path: str | Path = ".") -> "Repository":
        """Repository whose working tree is path and whose state lives in path/.pylet."""
        root = Path(path).resolve()
        return cls(FileWorkingTree(root), FileStorage(root / REPO_DIR))

    @classmethod
    def in_memory(cls, files: Optional[Dict[str, bytes]] = None) -> "Repository":
        return cls(MemoryWorkingTree(files), MemoryStorage())

    def is_initialized(self) -> bool:
        return self.storage.is_initialized()

    def require_repo(self) -> None:
        """Raise NotARepositoryError if there is no repository; load its state on first use."""
        if not self.is_initialized():
            raise NotARepositoryError()
        if self.branches is None:
            self.load()

    def init(self) -> str:
        """Create the repository with the initial commit on master. Returns the initial commit id."""
        if self.is_initialized():
            raise RepositoryExistsError()
        self.storage.create()
        initial = Commit.initial()
        self.objects.put(initial)
        self.branches = BranchTable({DEFAULT_BRANCH: initial.id}, DEFAULT_BRANCH)
        self.staging = StagingArea()
        write_default_config(self)
        self.record_head_move(DEFAULT_BRANCH, ZEROS, initial.id, "commit (initial): " + initial.message)
        self.save()
        return initial.id

    def load(self) -> "Repository":
        """Read branches and staging area from storage."""
        if not self.is_initialized() or self.storage.load(HEAD_KEY) is None:
            raise NotARepositoryError()
        self.branches = BranchTable.load(self.storage)
        self.staging = StagingArea.from_bytes(self.storage.load(INDEX_KEY))
        self.pending_reflog = []
        return self

    def save(self) -> None:
        """Write new objects, branches, staging area and queued reflog lines."""
        self.require_repo()
        self.objects.flush()
        for name in self.branches.removed_names():
            self.storage.delete(reflog_key(REF_HEADS_PREFIX + name))
        self.branches.save(self.storage)
        self.storage.save(INDEX_KEY, self.staging.to_bytes())
        flush_reflog(self)

    @property
    def current_branch(self) -> str:
        self.require_repo()
        return self.branches.current

    def head_id(self) -> str:
        self.require_repo()
        return self.branches.head()

    def head(self) -> Commit:
        """Head commit of the current branch."""
        return self.objects.get_commit(self.head_id())

    def record_head_move(self, branch: str, old: str, new: str, message: str) -> None:
        """Queue reflog lines for branch, and for HEAD when branch is current."""
        ts, tz = timestamp_from_env() or timestamp_with_tz(None)
        refname = REF_HEADS_PREFIX + branch
        if branch == self.branches.current:
            append_reflog(self, "HEAD", old, new, message, timestamp=ts, tz=tz)
        append_reflog(self, refname, old, new, message, timestamp=ts, tz=tz)

    def move_branch(self, branch: str, new: str, message: str) -> None:
        """Point branch at commit new and record the move."""
        old = self.branches.get(branch) or ZEROS
        self.branches.set(branch, new)
        self.record_head_move(branch, old, new, message)
