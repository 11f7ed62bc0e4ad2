"""Working tree: the user's files, read and written by checkout, add, rm and merge."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from .constants import REPO_DIR
from .util import normalize_path, write_bytes_atomic


class WorkingTree:
    """Interface over the working directory. Names are paths relative to its root."""

    def exists(self, name: str) -> bool:
        raise NotImplementedError

    def read(self, name: str) -> bytes:
        """Return file content. Raises FileNotFoundError if missing."""
        raise NotImplementedError

    def write(self, name: str, data: bytes) -> None:
        """Create or overwrite."""
        raise NotImplementedError

    def delete(self, name: str) -> None:
        """Remove the file if present."""
        raise NotImplementedError

    def list_files(self) -> List[str]:
        """Plain files at the top level (unordered)."""
        raise NotImplementedError

    def same_content(self, name: str, content: bytes) -> bool:
        """True if name exists in the tree with exactly this content."""
        if not self.exists(name):
            return False
        return self.read(name) == content


class FileWorkingTree(WorkingTree):
    """Working tree backed by a directory on disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).resolve()

    def _path(self, name: str) -> Path:
        p = normalize_path(self.root, name)
        if p == self.root or REPO_DIR in p.relative_to(self.root).parts:
            raise ValueError(f"not a working-tree file: {name}")
        return p

    def exists(self, name: str) -> bool:
        try:
            return self._path(name).is_file()
        except ValueError:
            return False

    def read(self, name: str) -> bytes:
        p = self._path(name)
        if not p.is_file():
            raise FileNotFoundError(f"{name} not found in working tree")
        return p.read_bytes()

    def write(self, name: str, data: bytes) -> None:
        write_bytes_atomic(self._path(name), data)

    def delete(self, name: str) -> None:
        p = self._path(name)
        if p.is_file():
            p.unlink()

    def list_files(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return [p.name for p in self.root.iterdir() if p.is_file()]


class MemoryWorkingTree(WorkingTree):
    """Dict-backed working tree for engine-level tests."""

    def __init__(self, files: Dict[str, bytes] | None = None) -> None:
        self.files: Dict[str, bytes] = dict(files or {})

    def exists(self, name: str) -> bool:
        return name in self.files

    def read(self, name: str) -> bytes:
        try:
            return self.files[name]
        except KeyError:
            raise FileNotFoundError(f"{name} not found in working tree") from None

    def write(self, name: str, data: bytes) -> None:
        self.files[name] = bytes(data)

    def delete(self, name: str) -> None:
        self.files.pop(name, None)

    def list_files(self) -> List[str]:
        return list(self.files)
