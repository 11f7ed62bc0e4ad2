"""Porcelain commands: init, add, commit, rm, log, status, checkout, branch, reset, merge."""

from __future__ import annotations

from typing import List, Optional

from .config import (
    get_value as config_get_value,
    list_values as config_list_values,
    set_value as config_set_value,
    unset_value as config_unset_value,
)
from .constants import REF_HEADS_PREFIX, SHORT_ID_LEN
from .errors import (
    AlreadyCurrentBranchError,
    EmptyMessageError,
    FileNotFoundInTreeError,
    FileNotInCommitError,
    InvalidFileNameError,
    NoSuchBranchError,
    NothingToCommitError,
    NothingToRemoveError,
    PreconditionError,
    SelfMergeError,
    StateCorruptError,
    UncommittedChangesError,
    UntrackedFileError,
)
from .graph import iter_first_parent, split_point
from .merge import (
    ALREADY_MERGED,
    CONFLICT,
    FAST_FORWARD,
    KEEP,
    MERGED,
    REMOVE,
    TAKE_GIVEN,
    MergeResult,
    conflict_content,
    plan_merge,
    untracked_in_the_way,
)
from .objects import Blob, Commit
from .reflog import ZEROS, append_reflog, read_reflog
from .repo import Repository
from .util import format_date, timestamp_from_env, timestamp_with_tz


def init(repo: Repository) -> str:
    """Create a repository. Raises RepositoryExistsError if one is already there."""
    return repo.init()


def add(repo: Repository, filename: str) -> None:
    """Stage the working-tree version of filename for the next commit."""
    repo.require_repo()
    if not repo.worktree.exists(filename):
        raise FileNotFoundInTreeError()
    if "\n" in filename:
        raise InvalidFileNameError()
    if repo.staging.is_removing(filename):
        repo.staging.cancel_removal(filename)
        return
    blob = Blob(repo.worktree.read(filename))
    if repo.head().blob_id(filename) == blob.id:
        repo.staging.unstage(filename)
        return
    repo.staging.stage_add(filename, blob)


def commit(repo: Repository, message: str, merge_parent: Optional[str] = None) -> str:
    """Create commit from head snapshot plus staged changes; advance the current branch.

    Returns the new commit id.
    """
    repo.require_repo()
    if not message:
        raise EmptyMessageError()
    if repo.staging.is_empty():
        raise NothingToCommitError()
    head = repo.head()
    files = dict(head.files)
    for name, blob in repo.staging.add.items():
        files[name] = repo.objects.put(blob)
    for name in repo.staging.remove:
        files.pop(name, None)
    ts, tz = timestamp_from_env() or timestamp_with_tz(None)
    c = Commit(message, files, parent=head.id, merge_parent=merge_parent, timestamp=ts, tz_offset=tz)
    commit_hash = repo.objects.put(c)
    first_line = message.split("\n")[0].strip()
    kind = "commit (merge)" if merge_parent else "commit"
    repo.move_branch(repo.current_branch, commit_hash, f"{kind}: {first_line}")
    repo.staging.clear()
    return commit_hash


def rm(repo: Repository, filename: str) -> None:
    """Unstage filename, or stage its removal and delete it if head tracks it."""
    repo.require_repo()
    if repo.staging.staged_blob(filename) is not None:
        repo.staging.unstage(filename)
        return
    blob_id = repo.head().blob_id(filename)
    if blob_id is None:
        raise NothingToRemoveError()
    repo.staging.stage_remove(filename, blob_id)
    repo.worktree.delete(filename)


def _print_commit(c: Commit) -> None:
    print("===")
    print(f"commit {c.id}")
    if c.is_merge():
        print(f"Merge: {c.parent[:SHORT_ID_LEN]} {c.merge_parent[:SHORT_ID_LEN]}")
    print(f"Date: {format_date(c.timestamp, c.tz_offset)}")
    print(c.message)
    print()


def log(repo: Repository) -> None:
    """Print history from head along first parents."""
    repo.require_repo()
    for c in iter_first_parent(repo.objects, repo.head_id()):
        _print_commit(c)


def global_log(repo: Repository) -> None:
    """Print every commit ever made, newest first."""
    repo.require_repo()
    commits = sorted(repo.objects.iter_commits(), key=lambda c: (-c.timestamp, c.id))
    for c in commits:
        _print_commit(c)


def find(repo: Repository, message: str) -> List[str]:
    """Print ids of all commits with exactly this message."""
    repo.require_repo()
    matches = [c.id for c in repo.objects.iter_commits() if c.message == message]
    if not matches:
        raise PreconditionError("Found no commit with that message.")
    for sha in matches:
        print(sha)
    return matches


def _unstaged_modifications(repo: Repository, head: Commit) -> List[str]:
    """'name (modified)' / 'name (deleted)' for changes not reflected in the staging area."""
    stage = repo.staging
    tree = repo.worktree
    result = []
    for name in sorted(set(head.files) | set(stage.add)):
        staged = stage.staged_blob(name)
        if staged is None and stage.is_removing(name):
            continue
        if not tree.exists(name):
            result.append(f"{name} (deleted)")
            continue
        expected = staged.id if staged is not None else head.blob_id(name)
        if Blob(tree.read(name)).id != expected:
            result.append(f"{name} (modified)")
    return result


def _untracked(repo: Repository, head: Commit) -> List[str]:
    stage = repo.staging
    return sorted(
        name
        for name in repo.worktree.list_files()
        if stage.staged_blob(name) is None
        and (not head.tracks(name) or stage.is_removing(name))
    )


def status(repo: Repository) -> None:
    """Print branches, staged and removed files, unstaged modifications and untracked files."""
    repo.require_repo()
    head = repo.head()
    sections = [
        ("Branches", [("*" + n if n == repo.current_branch else n) for n in repo.branches.names()]),
        ("Staged Files", sorted(repo.staging.add)),
        ("Removed Files", sorted(repo.staging.remove)),
        ("Modifications Not Staged For Commit", _unstaged_modifications(repo, head)),
        ("Untracked Files", _untracked(repo, head)),
    ]
    for title, lines in sections:
        print(f"=== {title} ===")
        for line in lines:
            print(line)
        print()


def checkout_file(repo: Repository, filename: str, commit_id: Optional[str] = None) -> None:
    """Write filename as of commit_id (default head) into the working tree. Nothing is staged."""
    repo.require_repo()
    c = repo.head() if commit_id is None else repo.objects.lookup_prefix(commit_id)
    blob_id = c.blob_id(filename)
    if blob_id is None:
        raise FileNotInCommitError()
    repo.worktree.write(filename, repo.objects.blob_content(blob_id))


def _checkout_commit(repo: Repository, target: Commit) -> None:
    """Make the working tree match target. Untracked files in the way abort before any write."""
    current = repo.head()
    blocked = [
        name
        for name in target.files
        if not current.tracks(name) and repo.worktree.exists(name)
    ]
    if blocked:
        raise UntrackedFileError()
    for name, blob_id in target.files.items():
        repo.worktree.write(name, repo.objects.blob_content(blob_id))
    for name in current.files:
        if not target.tracks(name):
            repo.worktree.delete(name)
    repo.staging.clear()


def checkout_branch(repo: Repository, name: str) -> None:
    """Switch to branch name, checking out its head."""
    repo.require_repo()
    if name not in repo.branches:
        raise NoSuchBranchError("No such branch exists.")
    old_branch = repo.current_branch
    if name == old_branch:
        raise AlreadyCurrentBranchError()
    old_head = repo.head_id()
    target = repo.objects.get_commit(repo.branches.require(name))
    _checkout_commit(repo, target)
    repo.branches.switch(name)
    ts, tz = timestamp_from_env() or timestamp_with_tz(None)
    append_reflog(
        repo, "HEAD", old_head, target.id, f"checkout: moving from {old_branch} to {name}", timestamp=ts, tz=tz
    )


def branch_create(repo: Repository, name: str) -> None:
    """Create branch name at head. Does not switch to it."""
    repo.require_repo()
    head = repo.head_id()
    repo.branches.create(name, head)
    repo.record_head_move(name, ZEROS, head, f"branch: Created from {repo.current_branch}")


def branch_delete(repo: Repository, name: str) -> None:
    """Delete the branch pointer only; its commits stay."""
    repo.require_repo()
    repo.branches.delete(name)


def reset(repo: Repository, commit_id: str) -> None:
    """Check out commit_id and move the current branch to it."""
    repo.require_repo()
    target = repo.objects.lookup_prefix(commit_id)
    _checkout_commit(repo, target)
    repo.move_branch(repo.current_branch, target.id, f"reset: moving to {target.id}")


def merge(repo: Repository, name: str) -> MergeResult:
    """Merge branch name into the current branch.

    Already-merged and fast-forward cases create no commit. Otherwise every file is
    reconciled three ways against the split point and the result is committed with
    the given head as merge parent; conflicts are written with markers and committed.
    """
    repo.require_repo()
    if not repo.staging.is_empty():
        raise UncommittedChangesError()
    given_id = repo.branches.require(name)
    current_branch = repo.current_branch
    if name == current_branch:
        raise SelfMergeError()
    current = repo.head()
    given = repo.objects.get_commit(given_id)
    split_id = split_point(repo.objects, current.id, given_id)
    if split_id is None:
        raise StateCorruptError(f"{current_branch} and {name} share no history")

    if split_id == given_id:
        print("Given branch is an ancestor of the current branch.")
        return MergeResult(ALREADY_MERGED, split_id)

    if split_id == current.id:
        _checkout_commit(repo, given)
        repo.move_branch(current_branch, given_id, f"merge {name}: Fast-forward")
        print("Current branch fast-forwarded.")
        return MergeResult(
            FAST_FORWARD,
            split_id,
            updated_paths=sorted(given.files),
            deleted_paths=sorted(set(current.files) - set(given.files)),
            commit_id=given_id,
        )

    split = repo.objects.get_commit(split_id)
    plan = [f for f in plan_merge(split, current, given) if f.action != KEEP]
    if untracked_in_the_way(repo.objects, repo.worktree, current, given):
        raise UntrackedFileError()
    if not plan:
        raise NothingToCommitError()

    result = MergeResult(MERGED, split_id)
    for f in plan:
        if f.action == TAKE_GIVEN:
            content = repo.objects.blob_content(f.given_id)
            repo.worktree.write(f.name, content)
            repo.staging.stage_add(f.name, Blob(content))
            result.updated_paths.append(f.name)
        elif f.action == REMOVE:
            repo.staging.stage_remove(f.name, f.current_id)
            repo.worktree.delete(f.name)
            result.deleted_paths.append(f.name)
        elif f.action == CONFLICT:
            ours = repo.objects.blob_content(f.current_id) if f.current_id else None
            theirs = repo.objects.blob_content(f.given_id) if f.given_id else None
            content = conflict_content(ours, theirs)
            repo.worktree.write(f.name, content)
            repo.staging.stage_add(f.name, Blob(content))
            result.conflicts.append(f.name)
            print("Encountered a merge conflict.")
    result.commit_id = commit(repo, f"Merged {name} into {current_branch}.", merge_parent=given_id)
    return result


def config_get(repo: Repository, key: str) -> None:
    """Print config value for key. Raises PreconditionError if key not found."""
    repo.require_repo()
    val = config_get_value(repo, key)
    if val is None:
        raise PreconditionError(f"Key not found: {key}")
    print(val)


def config_set(repo: Repository, key: str, value: str) -> None:
    repo.require_repo()
    config_set_value(repo, key, value)


def config_unset(repo: Repository, key: str) -> None:
    """Unset config key. Raises PreconditionError if key not found."""
    repo.require_repo()
    if not config_unset_value(repo, key):
        raise PreconditionError(f"Key not found: {key}")


def config_list(repo: Repository) -> None:
    """Print key=value lines sorted by key."""
    repo.require_repo()
    for k, v in config_list_values(repo):
        print(f"{k}={v}")


def reflog_show(repo: Repository, ref: Optional[str] = None, max_count: Optional[int] = None) -> None:
    """Print reflog entries for HEAD or a branch, most recent first."""
    repo.require_repo()
    if ref is None or ref == "HEAD":
        refname = display_ref = "HEAD"
    else:
        repo.branches.require(ref)
        refname = f"{REF_HEADS_PREFIX}{ref}"
        display_ref = ref
    shown = list(reversed(read_reflog(repo, refname)))
    if max_count is not None:
        shown = shown[:max_count]
    for idx, (_, new, _, _, _, msg) in enumerate(shown):
        print(f"{new[:SHORT_ID_LEN]} {display_ref}@{{{idx}}}: {msg}")
