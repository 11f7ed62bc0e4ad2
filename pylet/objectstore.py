"""Object store: append-only fingerprint -> object map over a Storage."""

from __future__ import annotations

from typing import Dict, Iterator, List

from .constants import OBJ_BLOB, OBJ_COMMIT, OBJECTS_PREFIX, SHA1_HEX_LEN
from .errors import AmbiguousCommitError, NoSuchCommitError, ObjectNotFoundError
from .objects import Blob, Commit, StoredObject
from .storage import Storage
from .util import is_hex


def _object_key(sha: str) -> str:
    """Storage key for an object: objects/<aa>/<bb...>. sha must be full 40-char hex."""
    if len(sha) != SHA1_HEX_LEN or not is_hex(sha):
        raise ValueError(f"invalid full sha: {sha}")
    sha = sha.lower()
    return f"{OBJECTS_PREFIX}{sha[:2]}/{sha[2:]}"


class ObjectStore:
    """Loose objects under objects/<aa>/<bb...>.

    New objects are buffered in memory and written by flush(); objects are
    never rewritten or removed.
    """

    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self._pending: Dict[str, StoredObject] = {}
        self._cache: Dict[str, StoredObject] = {}

    def put(self, obj: StoredObject) -> str:
        """Add object; return its id. Re-adding an existing object is a no-op."""
        sha = obj.hash_id()
        if sha not in self._cache and not self._stored(sha):
            self._pending[sha] = obj
        self._cache[sha] = obj
        return sha

    def flush(self) -> None:
        """Write buffered objects to storage."""
        for sha, obj in self._pending.items():
            self.storage.save(_object_key(sha), obj.serialize())
        self._pending.clear()

    def _stored(self, sha: str) -> bool:
        return self.storage.exists(_object_key(sha))

    def exists(self, sha: str) -> bool:
        if len(sha) != SHA1_HEX_LEN or not is_hex(sha):
            return False
        sha = sha.lower()
        return sha in self._cache or self._stored(sha)

    def load(self, sha: str) -> StoredObject:
        """Load object by full 40-char hash. Raises ObjectNotFoundError."""
        if len(sha) != SHA1_HEX_LEN or not is_hex(sha):
            raise ObjectNotFoundError(f"object {sha} not found")
        sha = sha.lower()
        obj = self._cache.get(sha)
        if obj is not None:
            return obj
        raw = self.storage.load(_object_key(sha))
        if raw is None:
            raise ObjectNotFoundError(f"object {sha} not found")
        obj = StoredObject.deserialize(raw)
        self._cache[sha] = obj
        return obj

    def get_commit(self, sha: str) -> Commit:
        obj = self.load(sha)
        if obj.type != OBJ_COMMIT or not isinstance(obj, Commit):
            raise ObjectNotFoundError(f"object {sha} is not a commit")
        return obj

    def get_blob(self, sha: str) -> Blob:
        obj = self.load(sha)
        if obj.type != OBJ_BLOB or not isinstance(obj, Blob):
            raise ObjectNotFoundError(f"object {sha} is not a blob")
        return obj

    def blob_content(self, sha: str) -> bytes:
        return self.get_blob(sha).content

    def all_ids(self) -> List[str]:
        """Every object id, stored or pending, sorted."""
        ids = set(self._pending)
        for key in self.storage.list_keys(OBJECTS_PREFIX):
            rest = key[len(OBJECTS_PREFIX) :].replace("/", "")
            if len(rest) == SHA1_HEX_LEN and is_hex(rest):
                ids.add(rest)
        return sorted(ids)

    def iter_commits(self) -> Iterator[Commit]:
        """Every commit in the store (order by id)."""
        for sha in self.all_ids():
            obj = self.load(sha)
            if isinstance(obj, Commit):
                yield obj

    def prefix_lookup(self, prefix: str) -> List[str]:
        """Return ids of commits that start with prefix."""
        prefix = prefix.lower()
        if not prefix or len(prefix) > SHA1_HEX_LEN or not is_hex(prefix):
            return []
        if len(prefix) == SHA1_HEX_LEN:
            return [prefix] if self._is_commit(prefix) else []
        candidates = [sha for sha in self.all_ids() if sha.startswith(prefix)]
        return [sha for sha in candidates if self._is_commit(sha)]

    def _is_commit(self, sha: str) -> bool:
        try:
            return isinstance(self.load(sha), Commit)
        except ObjectNotFoundError:
            return False

    def lookup_prefix(self, prefix: str) -> Commit:
        """Resolve a (possibly abbreviated) commit id. Raises NoSuchCommitError or AmbiguousCommitError."""
        matches = self.prefix_lookup(prefix.strip())
        if not matches:
            raise NoSuchCommitError()
        if len(matches) > 1:
            short = ", ".join(m[:10] for m in matches)
            raise AmbiguousCommitError(f"Commit id prefix '{prefix}' is ambiguous: {short}")
        return self.get_commit(matches[0])
