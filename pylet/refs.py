"""Branch table: branch heads under refs/heads/ and the current branch in HEAD."""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from .constants import HEAD_KEY, REF_HEADS_PREFIX, SHA1_HEX_LEN
from .errors import (
    BranchExistsError,
    CannotRemoveCurrentBranchError,
    InvalidBranchNameError,
    NoSuchBranchError,
    StateCorruptError,
)
from .storage import Storage

# Characters disallowed in branch names (git refname rules, no nesting)
_BRANCH_FORBIDDEN = set(" ~^:?*[]\\/\t\n")


def _is_hex_sha(s: str) -> bool:
    return len(s) == SHA1_HEX_LEN and bool(re.fullmatch(r"[0-9a-fA-F]{40}", s))


def validate_branch_name(name: str) -> None:
    """Raise InvalidBranchNameError if name is empty, has '..', a leading '.', or ~^:?*[]\\/ or spaces."""
    if not name or name.startswith(".") or name.endswith(".lock"):
        raise InvalidBranchNameError(f"Invalid branch name: {name!r}")
    if ".." in name or any(c in _BRANCH_FORBIDDEN for c in name):
        raise InvalidBranchNameError(f"Invalid branch name: {name!r}")


def parse_head(raw: Optional[bytes]) -> str:
    """HEAD content 'ref: refs/heads/<name>' -> branch name."""
    if raw is None:
        raise StateCorruptError("HEAD is missing")
    text = raw.decode("utf-8").strip()
    if not text.startswith("ref: " + REF_HEADS_PREFIX):
        raise StateCorruptError(f"HEAD does not name a branch: {text!r}")
    return text[len("ref: " + REF_HEADS_PREFIX) :]


class BranchTable:
    """Branch name -> head commit id, plus the current branch.

    The current branch always has an entry.
    """

    def __init__(self, heads: Dict[str, str], current: str) -> None:
        if current not in heads:
            raise StateCorruptError(f"current branch {current!r} has no head")
        self.heads: Dict[str, str] = dict(heads)
        self.current = current
        self._deleted: set[str] = set()

    @classmethod
    def load(cls, storage: Storage) -> "BranchTable":
        current = parse_head(storage.load(HEAD_KEY))
        heads: Dict[str, str] = {}
        for key in storage.list_keys(REF_HEADS_PREFIX):
            raw = storage.load(key)
            if raw is None:
                continue
            sha = raw.decode("utf-8").strip()
            if not _is_hex_sha(sha):
                raise StateCorruptError(f"ref {key} does not hold a commit id")
            heads[key[len(REF_HEADS_PREFIX) :]] = sha.lower()
        return cls(heads, current)

    def save(self, storage: Storage) -> None:
        for name in self._deleted:
            if name not in self.heads:
                storage.delete(REF_HEADS_PREFIX + name)
        self._deleted.clear()
        for name, sha in self.heads.items():
            storage.save(REF_HEADS_PREFIX + name, (sha + "\n").encode())
        storage.save(HEAD_KEY, f"ref: {REF_HEADS_PREFIX}{self.current}\n".encode())

    def removed_names(self) -> List[str]:
        """Branches deleted since the last save."""
        return sorted(n for n in self._deleted if n not in self.heads)

    def __contains__(self, name: str) -> bool:
        return name in self.heads

    def names(self) -> List[str]:
        return sorted(self.heads)

    def get(self, name: str) -> Optional[str]:
        return self.heads.get(name)

    def head(self) -> str:
        """Head commit id of the current branch."""
        return self.heads[self.current]

    def require(self, name: str, message: Optional[str] = None) -> str:
        """Head of name, or NoSuchBranchError."""
        sha = self.heads.get(name)
        if sha is None:
            raise NoSuchBranchError(message) if message else NoSuchBranchError()
        return sha

    def set(self, name: str, sha: str) -> None:
        """Point name at sha (creating it if needed)."""
        if not _is_hex_sha(sha):
            raise ValueError(f"invalid hash: {sha}")
        self.heads[name] = sha.lower()

    def create(self, name: str, sha: str) -> None:
        validate_branch_name(name)
        if name in self.heads:
            raise BranchExistsError()
        self.set(name, sha)

    def delete(self, name: str) -> None:
        if name not in self.heads:
            raise NoSuchBranchError()
        if name == self.current:
            raise CannotRemoveCurrentBranchError()
        del self.heads[name]
        self._deleted.add(name)

    def switch(self, name: str) -> None:
        if name not in self.heads:
            raise NoSuchBranchError("No such branch exists.")
        self.current = name
