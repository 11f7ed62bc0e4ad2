"""Constants for pylet: default branch, storage keys, object types, merge markers."""

from __future__ import annotations

# Repository directory inside the working tree
REPO_DIR = ".pylet"

# Branch every repository starts on
DEFAULT_BRANCH = "master"

# Initial commit: identical in every repository
INITIAL_COMMIT_MESSAGE = "initial commit"
INITIAL_TIMESTAMP = 0
INITIAL_TZ = "+0000"

# Storage keys (relative to the repository directory)
HEAD_KEY = "HEAD"
INDEX_KEY = "index"
CONFIG_KEY = "config"
OBJECTS_PREFIX = "objects/"
REF_HEADS_PREFIX = "refs/heads/"
LOGS_PREFIX = "logs/"

# Object types
OBJ_BLOB = "blob"
OBJ_COMMIT = "commit"

# SHA-1 hex length
SHA1_HEX_LEN = 40

# Abbreviation used in log "Merge:" lines and reflog output
SHORT_ID_LEN = 7

# Conflict markers written by merge (exact bytes)
CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEP = b"=======\n"
CONFLICT_END = b">>>>>>>\n"

# Commit date format, e.g. "Thu Jan 01 00:00:00 1970 +0000"
DATE_FORMAT = "%a %b %d %H:%M:%S %Y"

DEFAULT_IDENTITY = "pylet user <user@pylet.local>"
