"""Custom exceptions for pylet.

Every recognized failure derives from PyletError; the CLI prints the message
and exits. Messages are the user-facing text.
"""

from __future__ import annotations


class PyletError(Exception):
    """Base exception for pylet."""

    pass


class UsageError(PyletError):
    """Raised when a command gets the wrong number or shape of operands."""

    def __init__(self, message: str = "Incorrect operands.") -> None:
        super().__init__(message)


class InvalidBranchNameError(UsageError):
    """Raised when a branch name is not a valid ref name."""

    pass


class InvalidConfigKeyError(UsageError):
    """Raised when a config key is invalid (e.g. not section.option)."""

    pass


class PreconditionError(PyletError):
    """Raised when repository state does not allow the command."""

    pass


class NotARepositoryError(PreconditionError):
    """Raised when not in a pylet repository."""

    def __init__(self, message: str = "Not in an initialized pylet directory.") -> None:
        super().__init__(message)


class RepositoryExistsError(PreconditionError):
    """Raised by init when a repository already exists."""

    def __init__(
        self,
        message: str = "A pylet version-control system already exists in the current directory.",
    ) -> None:
        super().__init__(message)


class NoSuchBranchError(PreconditionError):
    """Raised when a branch name is not in the branch table."""

    def __init__(self, message: str = "A branch with that name does not exist.") -> None:
        super().__init__(message)


class BranchExistsError(PreconditionError):
    def __init__(self, message: str = "A branch with that name already exists.") -> None:
        super().__init__(message)


class NoSuchCommitError(PreconditionError):
    """Raised when a (possibly abbreviated) commit id does not resolve."""

    def __init__(self, message: str = "No commit with that id exists.") -> None:
        super().__init__(message)


class AmbiguousCommitError(PreconditionError):
    """Raised when an abbreviated commit id matches more than one commit."""

    pass


class EmptyMessageError(PreconditionError):
    def __init__(self, message: str = "Please enter a commit message.") -> None:
        super().__init__(message)


class NothingToCommitError(PreconditionError):
    def __init__(self, message: str = "No changes added to the commit.") -> None:
        super().__init__(message)


class NothingToRemoveError(PreconditionError):
    def __init__(self, message: str = "No reason to remove the file.") -> None:
        super().__init__(message)


class FileNotFoundInTreeError(PreconditionError):
    """Raised when add names a file missing from the working tree."""

    def __init__(self, message: str = "File does not exist.") -> None:
        super().__init__(message)


class InvalidFileNameError(PreconditionError):
    """Raised when add names a file that a commit record cannot hold."""

    def __init__(self, message: str = "File name cannot contain a newline.") -> None:
        super().__init__(message)


class FileNotInCommitError(PreconditionError):
    def __init__(self, message: str = "File does not exist in that commit.") -> None:
        super().__init__(message)


class AlreadyCurrentBranchError(PreconditionError):
    def __init__(self, message: str = "No need to checkout the current branch.") -> None:
        super().__init__(message)


class CannotRemoveCurrentBranchError(PreconditionError):
    def __init__(self, message: str = "Cannot remove the current branch.") -> None:
        super().__init__(message)


class UncommittedChangesError(PreconditionError):
    def __init__(self, message: str = "You have uncommitted changes.") -> None:
        super().__init__(message)


class SelfMergeError(PreconditionError):
    def __init__(self, message: str = "Cannot merge a branch with itself.") -> None:
        super().__init__(message)


class WorkingTreeConflictError(PyletError):
    """Raised when a command would clobber working-tree state it does not own."""

    pass


class UntrackedFileError(WorkingTreeConflictError):
    """Raised when an untracked working file would be overwritten."""

    def __init__(
        self,
        message: str = "There is an untracked file in the way; delete it, or add and commit it first.",
    ) -> None:
        super().__init__(message)


class ObjectNotFoundError(PyletError):
    """Raised when an object is not found in the object store."""

    pass


class StateCorruptError(PyletError):
    """Raised when persisted repository state cannot be parsed."""

    pass


class IndexChecksumError(StateCorruptError):
    """Raised when index file trailing SHA-1 checksum does not match contents."""

    pass


class IndexCorruptError(StateCorruptError):
    """Raised when index file is corrupt or entries are not sorted by name."""

    pass
