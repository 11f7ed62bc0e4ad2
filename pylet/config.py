"""Repository configuration: INI file stored under the 'config' key."""

from __future__ import annotations

import configparser
import io
from typing import TYPE_CHECKING, Optional

from .constants import CONFIG_KEY
from .errors import InvalidConfigKeyError, StateCorruptError

if TYPE_CHECKING:
    from .repo import Repository


def _parse_key(key: str) -> tuple[str, str]:
    """Return (section, option). Raises InvalidConfigKeyError if key invalid."""
    parts = key.split(".")
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        raise InvalidConfigKeyError(f"invalid config key: {key!r} (expected section.option)")
    return parts[0].strip(), parts[1].strip()


def read_config(repo: "Repository") -> configparser.ConfigParser:
    """Read config. Return empty parser if there is none yet."""
    repo.require_repo()
    cfg = configparser.ConfigParser()
    raw = repo.storage.load(CONFIG_KEY)
    if raw:
        try:
            cfg.read_string(raw.decode("utf-8"))
        except (configparser.Error, UnicodeDecodeError) as e:
            raise StateCorruptError(f"unreadable config: {e}") from e
    return cfg


def write_config(repo: "Repository", cfg: configparser.ConfigParser) -> None:
    repo.require_repo()
    buf = io.StringIO()
    cfg.write(buf)
    repo.storage.save(CONFIG_KEY, buf.getvalue().encode("utf-8"))


def write_default_config(repo: "Repository") -> None:
    """Seed a new repository's config with the core section."""
    cfg = read_config(repo)
    if not cfg.has_section("core"):
        cfg.add_section("core")
        cfg.set("core", "repositoryformatversion", "0")
        write_config(repo, cfg)


def get_value(repo: "Repository", key: str) -> Optional[str]:
    """Get config value for key (section.option). Return None if missing."""
    section, option = _parse_key(key)
    cfg = read_config(repo)
    if cfg.has_section(section) and cfg.has_option(section, option):
        return cfg.get(section, option)
    return None


def set_value(repo: "Repository", key: str, value: str) -> None:
    """Set config value. Creates section if needed."""
    section, option = _parse_key(key)
    cfg = read_config(repo)
    if not cfg.has_section(section):
        cfg.add_section(section)
    cfg.set(section, option, value)
    write_config(repo, cfg)


def unset_value(repo: "Repository", key: str) -> bool:
    """Remove config option. Remove section if empty. Return True if something removed."""
    section, option = _parse_key(key)
    cfg = read_config(repo)
    if not cfg.has_section(section) or not cfg.has_option(section, option):
        return False
    cfg.remove_option(section, option)
    if not cfg.options(section):
        cfg.remove_section(section)
    write_config(repo, cfg)
    return True


def list_values(repo: "Repository") -> list[tuple[str, str]]:
    """Return [(key, value), ...] sorted by key (section.option)."""
    cfg = read_config(repo)
    result: list[tuple[str, str]] = []
    for section in sorted(cfg.sections()):
        for option in sorted(cfg.options(section)):
            result.append((f"{section}.{option}", cfg.get(section, option)))
    return result


def get_user_identity(repo: "Repository") -> Optional[str]:
    """Return 'Name <email>' from user.name and user.email if both set, else None."""
    name = get_value(repo, "user.name")
    email = get_value(repo, "user.email")
    if name is not None and email is not None:
        return f"{name} <{email}>"
    return None
