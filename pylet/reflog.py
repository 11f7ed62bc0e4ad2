"""Reflog: append-only logs of head movements for HEAD and refs/heads/*."""

from __future__ import annotations

import re
import time
from typing import TYPE_CHECKING, Optional

from .config import get_user_identity
from .constants import DEFAULT_IDENTITY, LOGS_PREFIX, SHA1_HEX_LEN
from .util import timezone_offset_utc

if TYPE_CHECKING:
    from .repo import Repository

ZEROS = "0" * SHA1_HEX_LEN

ReflogEntry = tuple[str, str, str, int, str, str]


def reflog_key(refname: str) -> str:
    """HEAD -> logs/HEAD; refs/heads/X -> logs/refs/heads/X."""
    return LOGS_PREFIX + refname


def append_reflog(
    repo: "Repository",
    refname: str,
    old: str,
    new: str,
    message: str,
    who: Optional[str] = None,
    timestamp: Optional[int] = None,
    tz: Optional[str] = None,
) -> None:
    """Queue one reflog line; written with the rest of the state. Line: old new who timestamp tz\\tmessage."""
    who = who or get_user_identity(repo) or DEFAULT_IDENTITY
    if timestamp is None:
        timestamp = int(time.time())
    if tz is None:
        tz = timezone_offset_utc()
    msg_line = message.replace("\n", " ").replace("\r", " ").strip()
    line = f"{old} {new} {who} {timestamp} {tz}\t{msg_line}\n"
    repo.pending_reflog.append((refname, line))


def flush_reflog(repo: "Repository") -> None:
    """Append queued lines to their logs."""
    for refname, line in repo.pending_reflog:
        key = reflog_key(refname)
        existing = repo.storage.load(key) or b""
        repo.storage.save(key, existing + line.encode("utf-8"))
    repo.pending_reflog.clear()


def _parse_line(raw: str) -> Optional[ReflogEntry]:
    if "\t" not in raw:
        return None
    head, msg = raw.split("\t", 1)
    parts = head.split()
    if len(parts) < 5:
        return None
    old_h, new_h = parts[0], parts[1]
    if not re.fullmatch(r"[0-9a-fA-F]{40}", old_h) or not re.fullmatch(r"[0-9a-fA-F]{40}", new_h):
        return None
    try:
        ts = int(parts[-2])
    except ValueError:
        return None
    who = " ".join(parts[2:-2])
    return (old_h.lower(), new_h.lower(), who, ts, parts[-1], msg)


def read_reflog(repo: "Repository", refname: str) -> list[ReflogEntry]:
    """Entries for refname, oldest first, including ones not yet written. Skips malformed lines."""
    raw = repo.storage.load(reflog_key(refname)) or b""
    lines = raw.decode("utf-8", errors="replace").splitlines()
    lines.extend(line.rstrip("\n") for ref, line in repo.pending_reflog if ref == refname)
    result: list[ReflogEntry] = []
    for line in lines:
        entry = _parse_line(line)
        if entry is not None:
            result.append(entry)
    return result
