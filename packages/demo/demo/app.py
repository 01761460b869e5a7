import argparse
import json
import logging
import shlex
import sys
from typing import TextIO

from object_plane.base import Commit, ObjectStore
from object_plane.impl.memory import DEFAULT_BRANCH, create_memory_object_store
from object_plane.outcome import Outcome, Success, ValueOutcome, invalid, not_found

USAGE = """Commands:
  add NAME JSON        stage an object
  rm NAME              stage the removal of a committed object
  commit MESSAGE       commit staged changes
  checkout COMMIT_ID   restore a commit of the current branch
  log                  show history of the current branch
  head                 show the latest commit
  get NAME             show a committed object
  status               show the current branch and staged changes
  branch [list]        list branches
  branch create NAME   create a branch from the current one
  branch switch NAME   switch the current branch
  branch remove NAME   remove a branch
  help                 show this text
  quit                 leave the shell"""


def debug_print(msg: str):
    print(f"[APP] {msg}", file=sys.stderr)


def status(store: ObjectStore) -> Outcome:
    branch = store.branch().current
    lines = [f"On branch {branch.name}"]
    if not store.is_dirty():
        lines.append("Nothing staged.")
    else:
        for name in sorted(branch.staged_additions):
            lines.append(f"\tadded:   {name}")
        for name in sorted(branch.staged_removals):
            lines.append(f"\tremoved: {name}")
    return Success("\n".join(lines))


def branch_command(store: ObjectStore, args: list[str]) -> Outcome:
    registry = store.branch()
    if not args or args == ["list"]:
        return registry.list()
    if len(args) != 2:
        return invalid("Usage: branch [list|create|switch|remove] [NAME]")

    action, name = args
    if action == "create":
        return registry.create(name)
    if action == "switch":
        return registry.checkout(name)
    if action == "remove":
        return registry.remove(name)
    return invalid(f"Unknown branch action '{action}'.")


def execute(store: ObjectStore, line: str) -> Outcome | None:
    """
    Run a single shell command against the store.

    Returns None when the shell should stop.
    """
    try:
        words = shlex.split(line)
    except ValueError as e:
        return invalid(f"Cannot parse command: {e}")
    if not words:
        return Success("")

    command, args = words[0], words[1:]

    if command in ("quit", "exit"):
        return None
    if command == "help":
        return Success(USAGE)
    if command == "add" and len(args) == 2:
        try:
            value = json.loads(args[1])
        except json.JSONDecodeError as e:
            return invalid(f"Object {args[0]} is not valid JSON: {e}")
        return store.add(args[0], value)
    if command == "rm" and len(args) == 1:
        return store.remove(args[0])
    if command == "commit" and args:
        return store.commit(" ".join(args))
    if command == "checkout" and len(args) == 1:
        return store.checkout(args[0])
    if command == "log" and not args:
        return store.log()
    if command == "head" and not args:
        return store.head()
    if command == "get" and len(args) == 1:
        return store.get(args[0])
    if command == "status" and not args:
        return status(store)
    if command == "branch":
        return branch_command(store, args)

    if command in ("add", "rm", "commit", "checkout", "log", "head", "get", "status"):
        return invalid(f"Wrong arguments for '{command}'. Type 'help' for usage.")
    return not_found(f"Unknown command '{command}'. Type 'help' for usage.")


def print_outcome(outcome: Outcome, out: TextIO, err: TextIO) -> None:
    if outcome.error:
        print(f"[ERROR] {outcome.message}", file=err)
        return

    if outcome.message:
        print(outcome.message, file=out)
    if isinstance(outcome, ValueOutcome) and not isinstance(outcome.payload, Commit):
        print(json.dumps(outcome.payload, default=repr), file=out)


def run_shell(store: ObjectStore, lines: TextIO, out: TextIO, err: TextIO) -> int:
    failures = 0
    for line in lines:
        outcome = execute(store, line)
        if outcome is None:
            break
        if outcome.error:
            failures += 1
        print_outcome(outcome, out, err)
    return failures


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Object store shell")
    parser.add_argument(
        "--branch", default=DEFAULT_BRANCH, help="Name of the initial branch"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any command failed",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logs")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = create_memory_object_store(default_branch=args.branch)
    debug_print(f"Shell starting on branch '{args.branch}'. Type 'help' for usage.")

    failures = run_shell(store, sys.stdin, sys.stdout, sys.stderr)
    if args.strict and failures:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
