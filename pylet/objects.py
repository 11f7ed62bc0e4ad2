"""Stored objects: StoredObject, Blob, Commit with serialization/parsing."""

from __future__ import annotations

import zlib
from typing import Dict, Mapping, Optional

from .constants import (
    INITIAL_COMMIT_MESSAGE,
    INITIAL_TIMESTAMP,
    INITIAL_TZ,
    OBJ_BLOB,
    OBJ_COMMIT,
)
from .errors import StateCorruptError
from .util import sha1_hash


def _object_header(obj_type: str, content: bytes) -> bytes:
    """Header: '<type> <size>\\0'."""
    return f"{obj_type} {len(content)}\0".encode()


class StoredObject:
    """Base stored object (blob or commit)."""

    def __init__(self, obj_type: str, content: bytes) -> None:
        self.type = obj_type
        self.content = content

    def hash_id(self) -> str:
        """SHA-1 of uncompressed representation: header + content."""
        header = _object_header(self.type, self.content)
        return sha1_hash(header + self.content)

    def serialize(self) -> bytes:
        """Compressed bytes for storage: zlib(header + content)."""
        header = _object_header(self.type, self.content)
        return zlib.compress(header + self.content)

    @classmethod
    def deserialize(cls, data: bytes) -> "StoredObject":
        """Parse compressed object bytes into a Blob or Commit."""
        try:
            raw = zlib.decompress(data)
        except zlib.error as e:
            raise StateCorruptError(f"invalid object: {e}") from e
        null_idx = raw.find(b"\0")
        if null_idx == -1:
            raise StateCorruptError("invalid object: no null byte in header")
        try:
            header = raw[:null_idx].decode()
        except UnicodeDecodeError as e:
            raise StateCorruptError(f"invalid object header: {e}") from e
        content = raw[null_idx + 1 :]
        parts = header.split(" ", 1)
        if len(parts) != 2 or not parts[1].isdigit() or int(parts[1]) != len(content):
            raise StateCorruptError("invalid object header")
        obj_type = parts[0]
        if obj_type == OBJ_BLOB:
            return Blob(content)
        if obj_type == OBJ_COMMIT:
            return Commit.from_content(content)
        raise StateCorruptError(f"unknown object type: {obj_type}")


class Blob(StoredObject):
    """Blob object: raw file content. Identity is its content hash."""

    def __init__(self, content: bytes) -> None:
        super().__init__(OBJ_BLOB, bytes(content))

    @property
    def id(self) -> str:
        return self.hash_id()


class Commit(StoredObject):
    """Commit object: full filename -> blob id snapshot plus parent links.

    The content (and so the id) is computed once, in the constructor, from the
    completed snapshot. Parent links are ids into the object store.
    """

    def __init__(
        self,
        message: str,
        files: Mapping[str, str],
        parent: Optional[str] = None,
        merge_parent: Optional[str] = None,
        timestamp: int = INITIAL_TIMESTAMP,
        tz_offset: str = INITIAL_TZ,
    ) -> None:
        self.message = message
        self.files: Dict[str, str] = dict(sorted(files.items()))
        self.parent = parent
        self.merge_parent = merge_parent
        self.timestamp = timestamp
        self.tz_offset = tz_offset
        super().__init__(OBJ_COMMIT, self._serialize_commit())
        self._id = self.hash_id()

    @classmethod
    def initial(cls) -> "Commit":
        """The parentless, empty commit every repository starts from."""
        return cls(INITIAL_COMMIT_MESSAGE, {})

    @property
    def id(self) -> str:
        return self._id

    @property
    def parents(self) -> list[str]:
        """Parent ids: primary first, then merge parent."""
        return [p for p in (self.parent, self.merge_parent) if p]

    def is_merge(self) -> bool:
        return self.merge_parent is not None

    def tracks(self, name: str) -> bool:
        return name in self.files

    def blob_id(self, name: str) -> Optional[str]:
        return self.files.get(name)

    def _serialize_commit(self) -> bytes:
        lines = []
        if self.parent:
            lines.append(f"parent {self.parent}")
        if self.merge_parent:
            lines.append(f"merge {self.merge_parent}")
        lines.append(f"date {self.timestamp} {self.tz_offset}")
        for name, blob_id in self.files.items():
            lines.append(f"file {blob_id} {name}")
        lines.append("")
        lines.append(self.message)
        return "\n".join(lines).encode()

    @classmethod
    def from_content(cls, content: bytes) -> "Commit":
        """Parse commit content; the rebuilt commit must hash to the same id."""
        try:
            text = content.decode()
        except UnicodeDecodeError as e:
            raise StateCorruptError(f"invalid commit encoding: {e}") from e
        lines = text.split("\n")
        parent: Optional[str] = None
        merge_parent: Optional[str] = None
        timestamp = INITIAL_TIMESTAMP
        tz_offset = INITIAL_TZ
        files: Dict[str, str] = {}
        message_start = len(lines)
        for i, line in enumerate(lines):
            if line == "":
                message_start = i + 1
                break
            key, _, rest = line.partition(" ")
            if key == "parent":
                parent = rest
            elif key == "merge":
                merge_parent = rest
            elif key == "date":
                ts, _, tz = rest.partition(" ")
                try:
                    timestamp = int(ts)
                except ValueError:
                    raise StateCorruptError(f"invalid commit date: {rest!r}") from None
                tz_offset = tz or INITIAL_TZ
            elif key == "file":
                blob_id, _, name = rest.partition(" ")
                files[name] = blob_id
            else:
                raise StateCorruptError(f"invalid commit header line: {line!r}")
        message = "\n".join(lines[message_start:])
        commit = cls(message, files, parent, merge_parent, timestamp, tz_offset)
        if commit.content != content:
            raise StateCorruptError("commit content is not in canonical form")
        return commit
