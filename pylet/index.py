"""Staging area: pending additions and removals, persisted as a binary index.

Index layout (big-endian):
    "STAG" | u32 version | u32 count | entries... | 20-byte SHA-1 of everything before
Entry:
    u8 kind ('A' add, 'R' remove) | u16 name length | name (utf-8)
    'A': u32 content length | content      'R': 20-byte blob id
Entries are sorted by name; a name appears at most once.
"""

from __future__ import annotations

import hashlib
import struct
from typing import Dict, Optional

from .errors import IndexChecksumError, IndexCorruptError
from .objects import Blob

INDEX_SIGNATURE = b"STAG"
INDEX_VERSION = 1
INDEX_CHECKSUM_LEN = 20
KIND_ADD = ord("A")
KIND_REMOVE = ord("R")


class StagingArea:
    """Two maps: add (name -> Blob) and remove (name -> blob id)."""

    def __init__(self) -> None:
        self.add: Dict[str, Blob] = {}
        self.remove: Dict[str, str] = {}

    def stage_add(self, name: str, blob: Blob) -> None:
        """Stage blob for name, replacing any staged version and any pending removal."""
        self.remove.pop(name, None)
        self.add[name] = blob

    def stage_remove(self, name: str, blob_id: str) -> None:
        self.add.pop(name, None)
        self.remove[name] = blob_id

    def unstage(self, name: str) -> None:
        self.add.pop(name, None)

    def cancel_removal(self, name: str) -> None:
        self.remove.pop(name, None)

    def clear(self) -> None:
        self.add.clear()
        self.remove.clear()

    def is_empty(self) -> bool:
        return not self.add and not self.remove

    def staged_blob(self, name: str) -> Optional[Blob]:
        return self.add.get(name)

    def is_removing(self, name: str) -> bool:
        return name in self.remove

    def to_bytes(self) -> bytes:
        names = sorted(set(self.add) | set(self.remove))
        chunks = [INDEX_SIGNATURE, struct.pack(">II", INDEX_VERSION, len(names))]
        for name in names:
            name_bytes = name.encode("utf-8")
            if name in self.add:
                content = self.add[name].content
                chunks.append(struct.pack(">BH", KIND_ADD, len(name_bytes)) + name_bytes)
                chunks.append(struct.pack(">I", len(content)) + content)
            else:
                chunks.append(struct.pack(">BH", KIND_REMOVE, len(name_bytes)) + name_bytes)
                chunks.append(bytes.fromhex(self.remove[name]))
        body = b"".join(chunks)
        return body + hashlib.sha1(body).digest()

    @classmethod
    def from_bytes(cls, data: Optional[bytes]) -> "StagingArea":
        """Parse an index. Missing or empty data is an empty staging area."""
        stage = cls()
        if not data:
            return stage
        if len(data) < 12 + INDEX_CHECKSUM_LEN or data[:4] != INDEX_SIGNATURE:
            raise IndexCorruptError("index truncated or corrupt")
        body = data[:-INDEX_CHECKSUM_LEN]
        if hashlib.sha1(body).digest() != data[-INDEX_CHECKSUM_LEN:]:
            raise IndexChecksumError("index checksum mismatch")
        version, count = struct.unpack(">II", body[4:12])
        if version != INDEX_VERSION:
            raise IndexCorruptError(f"unsupported index version {version}")
        pos = 12
        order: list[str] = []
        try:
            for _ in range(count):
                kind, name_len = struct.unpack(">BH", body[pos : pos + 3])
                pos += 3
                name = body[pos : pos + name_len].decode("utf-8")
                pos += name_len
                if kind == KIND_ADD:
                    (size,) = struct.unpack(">I", body[pos : pos + 4])
                    pos += 4
                    content = body[pos : pos + size]
                    if len(content) != size:
                        raise IndexCorruptError("index truncated or corrupt")
                    pos += size
                    stage.add[name] = Blob(content)
                elif kind == KIND_REMOVE:
                    sha_bin = body[pos : pos + 20]
                    if len(sha_bin) != 20:
                        raise IndexCorruptError("index truncated or corrupt")
                    pos += 20
                    stage.remove[name] = sha_bin.hex()
                else:
                    raise IndexCorruptError(f"unknown index entry kind {kind}")
                order.append(name)
        except (struct.error, UnicodeDecodeError) as e:
            raise IndexCorruptError("index truncated or corrupt") from e
        if pos != len(body):
            raise IndexCorruptError("trailing data in index")
        # Sorted and unique, so no name is staged both ways
        if any(a >= b for a, b in zip(order, order[1:])):
            raise IndexCorruptError("index entries not sorted by name")
        return stage
