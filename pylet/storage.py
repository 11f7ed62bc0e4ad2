"""Persistence: keyed byte storage for repository state.

Keys are logical, '/'-separated names (HEAD, index, refs/heads/master,
objects/ab/cdef...). FileStorage maps them to files under the repository
directory; MemoryStorage keeps them in a dict for tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from .util import read_bytes_safe, write_bytes_atomic


class Storage:
    """Interface: load/save/delete bytes by key, list keys by prefix."""

    def load(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def save(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def list_keys(self, prefix: str = "") -> List[str]:
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        return self.load(key) is not None

    def is_initialized(self) -> bool:
        raise NotImplementedError

    def create(self) -> None:
        """Create the (empty) backing store."""
        raise NotImplementedError


class FileStorage(Storage):
    """Storage rooted at a directory (e.g. <worktree>/.pylet). Writes are atomic per key."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        parts = [p for p in key.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise ValueError(f"invalid storage key: {key!r}")
        return self.root.joinpath(*parts)

    def is_initialized(self) -> bool:
        return self.root.is_dir()

    def create(self) -> None:
        self.root.mkdir(parents=True)

    def load(self, key: str) -> Optional[bytes]:
        return read_bytes_safe(self._path(key))

    def save(self, key: str, data: bytes) -> None:
        write_bytes_atomic(self._path(key), data)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def list_keys(self, prefix: str = "") -> List[str]:
        """All keys starting with prefix, sorted. Temp files are skipped."""
        if not self.root.is_dir():
            return []
        keys = []
        for p in self.root.rglob("*"):
            if not p.is_file() or p.name.startswith(".tmp_"):
                continue
            key = p.relative_to(self.root).as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return sorted(keys)


class MemoryStorage(Storage):
    """In-memory storage; nothing touches disk."""

    def __init__(self) -> None:
        self.data: Dict[str, bytes] = {}
        self._created = False

    def is_initialized(self) -> bool:
        return self._created

    def create(self) -> None:
        self._created = True

    def load(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    def save(self, key: str, data: bytes) -> None:
        self.data[key] = bytes(data)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def list_keys(self, prefix: str = "") -> List[str]:
        return sorted(k for k in self.data if k.startswith(prefix))
