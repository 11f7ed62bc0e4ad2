"""CLI: argparse and command dispatch."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .errors import PyletError, UsageError
from .porcelain import (
    add,
    branch_create,
    branch_delete,
    checkout_branch,
    checkout_file,
    commit,
    config_get,
    config_list,
    config_set,
    config_unset,
    find,
    global_log,
    init,
    log,
    merge,
    reflog_show,
    reset,
    rm,
    status,
)
from .repo import Repository


class _ArgumentParser(argparse.ArgumentParser):
    """Parser that reports bad operands as UsageError instead of exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        if "invalid choice" in message:
            raise UsageError("No command with that name exists.")
        raise UsageError()


# Every operand of these commands is positional, even one starting with "-"
_POSITIONAL_COMMANDS = {
    "init",
    "add",
    "commit",
    "rm",
    "log",
    "global-log",
    "find",
    "status",
    "branch",
    "rm-branch",
    "reset",
    "merge",
}


def _repo() -> Repository:
    return Repository.at(Path.cwd())


def _open_repo() -> Repository:
    """Repository in the current directory with its state loaded."""
    repo = _repo()
    repo.require_repo()
    return repo


def cmd_init(_: argparse.Namespace) -> int:
    init(_repo())
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    repo = _open_repo()
    add(repo, args.filename)
    repo.save()
    return 0


def cmd_commit(args: argparse.Namespace) -> int:
    repo = _open_repo()
    commit(repo, args.message)
    repo.save()
    return 0


def cmd_rm(args: argparse.Namespace) -> int:
    repo = _open_repo()
    rm(repo, args.filename)
    repo.save()
    return 0


def cmd_log(_: argparse.Namespace) -> int:
    log(_open_repo())
    return 0


def cmd_global_log(_: argparse.Namespace) -> int:
    global_log(_open_repo())
    return 0


def cmd_find(args: argparse.Namespace) -> int:
    find(_open_repo(), args.message)
    return 0


def cmd_status(_: argparse.Namespace) -> int:
    status(_open_repo())
    return 0


def cmd_checkout(args: argparse.Namespace) -> int:
    ops = args.operands
    if len(ops) == 1 and ops[0] != "--":
        repo = _open_repo()
        checkout_branch(repo, ops[0])
    elif len(ops) == 2 and ops[0] == "--":
        repo = _open_repo()
        checkout_file(repo, ops[1])
    elif len(ops) == 3 and ops[1] == "--":
        repo = _open_repo()
        checkout_file(repo, ops[2], ops[0])
    else:
        raise UsageError()
    repo.save()
    return 0


def cmd_branch(args: argparse.Namespace) -> int:
    repo = _open_repo()
    branch_create(repo, args.name)
    repo.save()
    return 0


def cmd_rm_branch(args: argparse.Namespace) -> int:
    repo = _open_repo()
    branch_delete(repo, args.name)
    repo.save()
    return 0


def cmd_reset(args: argparse.Namespace) -> int:
    repo = _open_repo()
    reset(repo, args.commit)
    repo.save()
    return 0


def cmd_merge(args: argparse.Namespace) -> int:
    repo = _open_repo()
    merge(repo, args.branch)
    repo.save()
    return 0


def cmd_reflog(args: argparse.Namespace) -> int:
    reflog_show(_open_repo(), ref=args.branch, max_count=args.max_count)
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    count = sum([args.get, args.config_set, args.unset, args.list])
    if count != 1:
        raise UsageError("exactly one of --get, --set, --unset, --list required")
    if args.get:
        if not args.key or args.value is not None:
            raise UsageError("--get requires <key>")
        config_get(_open_repo(), args.key)
    elif args.config_set:
        if not args.key or args.value is None:
            raise UsageError("--set requires <key> <value>")
        config_set(_open_repo(), args.key, args.value)
    elif args.unset:
        if not args.key or args.value is not None:
            raise UsageError("--unset requires <key>")
        config_unset(_open_repo(), args.key)
    else:
        if args.key:
            raise UsageError()
        config_list(_open_repo())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="pylet",
        description="A small local version-control system (init, add, commit, branch, checkout, merge, log, status).",
    )
    sub = parser.add_subparsers(dest="command", help="Commands")

    sub.add_parser("init", help="Initialize a new repository")

    p_add = sub.add_parser("add", help="Stage a file")
    p_add.add_argument("filename")

    p_commit = sub.add_parser("commit", help="Commit staged changes")
    p_commit.add_argument("message")

    p_rm = sub.add_parser("rm", help="Unstage a file or stage its removal")
    p_rm.add_argument("filename")

    sub.add_parser("log", help="Show history of the current branch")
    sub.add_parser("global-log", help="Show every commit")

    p_find = sub.add_parser("find", help="Print ids of commits with the given message")
    p_find.add_argument("message")

    sub.add_parser("status", help="Show branches, staged files and working tree status")

    # checkout is dispatched by hand: argparse drops the "--" separator
    sub.add_parser("checkout", help="checkout -- <file> | <commit> -- <file> | <branch>")

    p_branch = sub.add_parser("branch", help="Create a branch at the current head")
    p_branch.add_argument("name")

    p_rm_branch = sub.add_parser("rm-branch", help="Delete a branch pointer")
    p_rm_branch.add_argument("name")

    p_reset = sub.add_parser("reset", help="Check out a commit and move the current branch to it")
    p_reset.add_argument("commit")

    p_merge = sub.add_parser("merge", help="Merge a branch into the current branch")
    p_merge.add_argument("branch")

    p_reflog = sub.add_parser("reflog", help="Show head movements for HEAD or a branch")
    p_reflog.add_argument("branch", nargs="?", default=None, help="Branch (default: HEAD)")
    p_reflog.add_argument("-n", "--max-count", type=int, default=None, help="Limit entries")

    p_config = sub.add_parser("config", help="Read or write config (.pylet/config)")
    p_config.add_argument("--get", action="store_true", help="Get value for key")
    p_config.add_argument("--set", dest="config_set", action="store_true", help="Set key to value")
    p_config.add_argument("--unset", action="store_true", help="Unset key")
    p_config.add_argument("--list", action="store_true", help="List all key=value")
    p_config.add_argument("key", nargs="?", default=None, help="Config key (section.option)")
    p_config.add_argument("value", nargs="?", default=None, help="Value (for --set)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        print("Please enter a command.")
        return 0

    handlers = {
        "init": cmd_init,
        "add": cmd_add,
        "commit": cmd_commit,
        "rm": cmd_rm,
        "log": cmd_log,
        "global-log": cmd_global_log,
        "find": cmd_find,
        "status": cmd_status,
        "checkout": cmd_checkout,
        "branch": cmd_branch,
        "rm-branch": cmd_rm_branch,
        "reset": cmd_reset,
        "merge": cmd_merge,
        "reflog": cmd_reflog,
        "config": cmd_config,
    }
    try:
        if argv[0] == "checkout":
            args = argparse.Namespace(command="checkout", operands=list(argv[1:]))
        elif argv[0] in _POSITIONAL_COMMANDS and len(argv) > 1:
            args = build_parser().parse_args([argv[0], "--", *argv[1:]])
        else:
            args = build_parser().parse_args(argv)
        handler = handlers.get(args.command)
        if not handler:
            raise UsageError("No command with that name exists.")
        return handler(args) or 0
    except PyletError as e:
        print(e)
        return 0


if __name__ == "__main__":
    sys.exit(main())
