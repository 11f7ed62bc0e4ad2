"""pylet: a small local version-control system (init, add, commit, branch, checkout, merge, log, status)."""

from .repo import Repository
from .errors import PyletError, NotARepositoryError

__all__ = ["Repository", "PyletError", "NotARepositoryError"]
