import logging
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Mapping

from object_plane.base import (
    Branch,
    BranchRegistry,
    Commit,
    Object,
    ObjectStore,
    SnapshotData,
)
from object_plane.outcome import (
    Outcome,
    Success,
    ValueOutcome,
    conflict,
    invalid,
    no_op,
    not_found,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DEFAULT_BRANCH = "master"


def local_now() -> datetime:
    return datetime.now().astimezone()


class MemoryStage:
    """
    Pending changes of a branch that are not yet committed.

    Additions and removals are kept apart; `apply` folds additions first and
    removals second, so a name that is both staged and removed ends up gone.
    """

    def __init__(self) -> None:
        self.additions: SnapshotData = {}
        self.removals: set[str] = set()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryStage(...)")
        else:
            with p.group(4, "MemoryStage(", ")"):
                p.breakable()
                p.text(f"additions={self.additions},")
                p.breakable()
                p.text(f"removals={sorted(self.removals)},")
                p.breakable()

    def add(self, name: str, obj: Object) -> None:
        self.additions[name] = obj

    def remove(self, name: str) -> None:
        self.removals.add(name)

    def is_dirty(self) -> bool:
        return len(self.additions) > 0 or len(self.removals) > 0

    def change_count(self) -> int:
        return len(self.additions) + len(self.removals)

    def apply(self, working_set: SnapshotData) -> int:
        count = self.change_count()
        working_set.update(self.additions)
        for name in self.removals:
            working_set.pop(name, None)
        self.clear()
        return count

    def clear(self) -> None:
        self.additions.clear()
        self.removals.clear()


class MemoryBranch(Branch):
    def __init__(self, name: str, clock: Clock = local_now) -> None:
        self.name = name
        self.clock = clock
        self._working_set: SnapshotData = {}
        self.stage = MemoryStage()
        self._history: dict[str, Commit] = {}

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryBranch(...)")
        else:
            with p.group(4, "MemoryBranch(", ")"):
                p.breakable()
                p.text(f"name='{self.name}',")
                p.breakable()
                p.text(f"working_set={self._working_set},")
                p.breakable()
                p.text("stage=")
                p.pretty(self.stage)
                p.text(",")
                p.breakable()
                p.text("history=")
                p.pretty(list(self._history.values()))
                p.text(",")
                p.breakable()

    @property
    def working_set(self) -> Mapping[str, Object]:
        return MappingProxyType(self._working_set)

    @property
    def history(self) -> Mapping[str, Commit]:
        return MappingProxyType(self._history)

    @property
    def staged_additions(self) -> Mapping[str, Object]:
        return MappingProxyType(self.stage.additions)

    @property
    def staged_removals(self) -> frozenset[str]:
        return frozenset(self.stage.removals)

    def copy(self, name: str) -> "MemoryBranch":
        # Fresh containers; objects and immutable commits are shared.
        branch = MemoryBranch(name, self.clock)
        branch._working_set = dict(self._working_set)
        branch.stage.additions = dict(self.stage.additions)
        branch.stage.removals = set(self.stage.removals)
        branch._history = dict(self._history)
        return branch

    def stage_add(self, name: str, obj: Object) -> ValueOutcome[Object]:
        self.stage.add(name, obj)
        logger.debug(f"Staged {name} on branch {self.name}")
        return ValueOutcome(f"Added {name} to stage.", obj)

    def stage_remove(self, name: str) -> Outcome:
        if name not in self._working_set:
            return not_found(f"Object {name} is not committed.")

        self.stage.remove(name)
        logger.debug(f"Staged removal of {name} on branch {self.name}")
        return ValueOutcome(f"Added {name} for removal.", self._working_set[name])

    def commit(self, message: str) -> Outcome:
        if not message or not message.strip():
            return invalid("Commit message must not be empty.")
        if not self.stage.is_dirty():
            return no_op("Nothing to commit, working directory clean.")

        count = self.stage.apply(self._working_set)
        new_commit = Commit(message, self.clock(), self._working_set)
        self._history[new_commit.id] = new_commit

        logger.info(
            f"Committed {new_commit.short_id()} on branch {self.name} "
            f"({count} objects changed)"
        )
        return ValueOutcome(f"{message}\n\t{count} objects changed", new_commit)

    def checkout(self, commit_id: str) -> Outcome:
        target = self._history.get(commit_id)
        if target is None:
            return not_found(f"Commit {commit_id} does not exist.")

        self._working_set = dict(target.snapshot)
        # Commits older than the target are dropped; later ones are kept.
        self._history = {
            key: value
            for key, value in self._history.items()
            if value.created_at >= target.created_at
        }
        self.stage.clear()

        logger.info(f"Checked out {target.short_id()} on branch {self.name}")
        return ValueOutcome(f"HEAD is now at {commit_id}.", target)

    def log(self) -> Outcome:
        if not self._history:
            return not_found(f"Branch {self.name} does not have any commits yet.")

        entries = [c.format_log_entry() for c in reversed(self._history.values())]
        return Success("\n\n".join(entries))

    def head(self) -> Outcome:
        if not self._history:
            return not_found(f"Branch {self.name} does not have any commits yet.")

        last = next(reversed(self._history.values()))
        return ValueOutcome(last.message, last)

    def get(self, name: str) -> Outcome:
        if name not in self._working_set:
            return not_found(f"Object {name} is not committed.")
        return ValueOutcome(f"Found object {name}.", self._working_set[name])

    def is_dirty(self) -> bool:
        return self.stage.is_dirty()


class MemoryBranchRegistry(BranchRegistry):
    def __init__(
        self, default_branch: str = DEFAULT_BRANCH, clock: Clock = local_now
    ) -> None:
        self._current = MemoryBranch(default_branch, clock)
        self.branches: dict[str, MemoryBranch] = {default_branch: self._current}

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("MemoryBranchRegistry(...)")
        else:
            with p.group(4, "MemoryBranchRegistry(", ")"):
                p.breakable()
                p.text(f"current='{self._current.name}',")
                p.breakable()
                p.text(f"branches={self.names()},")
                p.breakable()

    @property
    def current(self) -> MemoryBranch:
        return self._current

    def get(self, branch_name: str) -> MemoryBranch | None:
        return self.branches.get(branch_name)

    def create(self, branch_name: str) -> Outcome:
        if branch_name in self.branches:
            return conflict(f"Branch {branch_name} already exists.")

        self.branches[branch_name] = self._current.copy(branch_name)
        logger.info(f"Created branch {branch_name} from {self._current.name}")
        return Success(f"Created branch {branch_name}.")

    def checkout(self, branch_name: str) -> Outcome:
        branch = self.branches.get(branch_name)
        if branch is None:
            return not_found(f"Branch {branch_name} does not exist.")

        self._current = branch
        logger.info(f"Switched to branch {branch_name}")
        return Success(f"Switched to branch {branch_name}.")

    def remove(self, branch_name: str) -> Outcome:
        branch = self.branches.get(branch_name)
        if branch is None:
            return not_found(f"Branch {branch_name} does not exist.")
        if branch is self._current:
            return conflict("Cannot remove current branch.")

        del self.branches[branch_name]
        logger.info(f"Removed branch {branch_name}")
        return Success(f"Removed branch {branch_name}.")

    def names(self) -> list[str]:
        return sorted(self.branches)

    def list(self) -> Success:
        lines = []
        for name in self.names():
            marker = "*" if self.branches[name] is self._current else " "
            lines.append(f"{marker} {name}")
        return Success("\n".join(lines))


class MemoryObjectStore(ObjectStore):
    def __init__(
        self, default_branch: str = DEFAULT_BRANCH, clock: Clock = local_now
    ) -> None:
        self.branches = MemoryBranchRegistry(default_branch, clock)

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("ObjectStore(...)")
        else:
            with p.group(4, "ObjectStore(", ")"):
                p.breakable()
                p.text("branches=")
                p.pretty(self.branches)
                p.text(",")
                p.breakable()
                p.text("current=")
                p.pretty(self.branches.current)
                p.text(",")
                p.breakable()

    def add(self, name: str, obj: Object) -> ValueOutcome[Object]:
        return self.branches.current.stage_add(name, obj)

    def remove(self, name: str) -> Outcome:
        return self.branches.current.stage_remove(name)

    def commit(self, message: str) -> Outcome:
        return self.branches.current.commit(message)

    def checkout(self, commit_id: str) -> Outcome:
        return self.branches.current.checkout(commit_id)

    def branch(self) -> MemoryBranchRegistry:
        return self.branches

    def log(self) -> Outcome:
        return self.branches.current.log()

    def head(self) -> Outcome:
        return self.branches.current.head()

    def get(self, name: str) -> Outcome:
        return self.branches.current.get(name)

    def is_dirty(self) -> bool:
        return self.branches.current.is_dirty()


def create_memory_object_store(
    setup: Callable[[ObjectStore], None] | None = None,
    *,
    default_branch: str = DEFAULT_BRANCH,
    clock: Clock | None = None,
) -> MemoryObjectStore:
    store = MemoryObjectStore(default_branch, clock or local_now)
    if setup is not None:
        setup(store)
    return store
