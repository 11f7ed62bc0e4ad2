"""Helper functions: hashing, atomic writes, time/tz, path checks."""

from __future__ import annotations

import hashlib
import os
import tempfile
import time
from pathlib import Path
from typing import Optional

from .constants import DATE_FORMAT

_HEX_DIGITS = set("0123456789abcdef")


def sha1_hash(data: bytes) -> str:
    """Compute SHA-1 hex digest of data."""
    return hashlib.sha1(data).hexdigest()


def is_hex(s: str) -> bool:
    """True if s is non-empty lowercase/uppercase hex."""
    return bool(s) and all(c in _HEX_DIGITS for c in s.lower())


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write bytes to file atomically (temp then replace)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp_")
    try:
        os.write(fd, data)
        os.close(fd)
        os.replace(tmp, path)
    except Exception:
        try:
            os.close(fd)
        except OSError:
            pass
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def read_bytes_safe(path: Path) -> Optional[bytes]:
    """Read file as bytes; return None if it is missing or not a file."""
    try:
        return Path(path).read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


def timezone_offset_utc() -> str:
    """Return local timezone offset as string e.g. +0530 or -0800."""
    if time.daylight and time.localtime().tm_isdst > 0:
        offset_sec = -time.altzone
    else:
        offset_sec = -time.timezone
    sign = "+" if offset_sec >= 0 else "-"
    abs_sec = abs(offset_sec)
    hours = abs_sec // 3600
    minutes = (abs_sec % 3600) // 60
    return f"{sign}{hours:02d}{minutes:02d}"


def tz_offset_seconds(tz: str) -> int:
    """'+0530' -> 19800. Malformed offsets count as UTC."""
    if len(tz) != 5 or tz[0] not in "+-" or not tz[1:].isdigit():
        return 0
    secs = int(tz[1:3]) * 3600 + int(tz[3:5]) * 60
    return secs if tz[0] == "+" else -secs


def timestamp_with_tz(timestamp: Optional[int] = None) -> tuple[int, str]:
    """Return (timestamp, tz_offset). Uses current time if timestamp is None."""
    ts = int(time.time()) if timestamp is None else timestamp
    return ts, timezone_offset_utc()


def timestamp_from_env(key: str = "PYLET_DATE") -> Optional[tuple[int, str]]:
    """Read a '1234567890 +0000' timestamp from the environment. Returns (ts, tz) or None."""
    val = os.environ.get(key)
    if not val or not val.strip():
        return None
    parts = val.strip().split(None, 1)
    try:
        ts = int(parts[0])
    except ValueError:
        return None
    tz = parts[1] if len(parts) > 1 else "+0000"
    return (ts, tz)


def format_date(timestamp: int, tz: str) -> str:
    """Render a commit date in its own offset, e.g. 'Thu Jan 01 00:00:00 1970 +0000'."""
    local = time.gmtime(timestamp + tz_offset_seconds(tz))
    return f"{time.strftime(DATE_FORMAT, local)} {tz}"


def normalize_path(root: Path, path: str) -> Path:
    """Resolve path relative to root; reject paths escaping root."""
    root = root.resolve()
    resolved = (root / path).resolve()
    try:
        resolved.relative_to(root)
    except ValueError:
        raise ValueError(f"path escapes repository: {path}") from None
    return resolved
