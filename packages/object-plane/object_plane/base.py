import hashlib
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping

from object_plane.outcome import Outcome, Success, ValueOutcome

Object = Any
SnapshotData = dict[str, Object]

LOG_DATE_FORMAT = "%a %b %d %H:%M %Y %z"


def commit_id(created_at: datetime, message: str) -> str:
    digest = hashlib.sha1(f"{created_at.isoformat()}{message}".encode("utf-8"))
    return digest.hexdigest()


class Commit:
    """
    Immutable snapshot of a branch's working set at a specific point in time.

    The name -> object mapping is copied, the objects are not: they are opaque
    to the store, so mutating an object in place also shows in every commit
    and branch that holds it.
    """

    __slots__ = ("_message", "_created_at", "_id", "_objects")

    def __init__(
        self, message: str, created_at: datetime, objects: Mapping[str, Object]
    ) -> None:
        self._message = message
        self._created_at = created_at
        self._id = commit_id(created_at, message)
        self._objects: SnapshotData = dict(objects)

    @property
    def message(self) -> str:
        return self._message

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def id(self) -> str:
        return self._id

    @property
    def snapshot(self) -> Mapping[str, Object]:
        return MappingProxyType(self._objects)

    def get(self, name: str) -> Object | None:
        return self._objects.get(name)

    def short_id(self) -> str:
        return self._id[:7]

    def format_log_entry(self) -> str:
        date = self._created_at.strftime(LOG_DATE_FORMAT)
        return f"Commit {self._id}\nDate: {date}\n\n\t{self._message}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Commit):
            return NotImplemented
        return (
            self._id == other._id
            and self._created_at == other._created_at
            and self._objects == other._objects
        )

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Commit(id={self.short_id()}, message={self._message!r})"

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Commit(...)")
        else:
            with p.group(4, "Commit(", ")"):
                p.breakable()
                p.text(f"id={self.short_id()},")
                p.breakable()
                p.text(f"message={self._message!r},")
                p.breakable()
                p.text(f"created_at={self._created_at.isoformat()},")
                p.breakable()
                p.text(f"snapshot={self._objects},")
                p.breakable()


class Branch:
    """
    Line of history with its own working set and staging area.

    The working set only reflects committed state; staged additions and
    removals become visible after `commit`.
    """

    name: str

    @property
    def working_set(self) -> Mapping[str, Object]:
        """Committed objects by name."""
        raise NotImplementedError()

    @property
    def staged_additions(self) -> Mapping[str, Object]:
        raise NotImplementedError()

    @property
    def staged_removals(self) -> frozenset[str]:
        raise NotImplementedError()

    def stage_add(self, name: str, obj: Object) -> ValueOutcome[Object]:
        """Stage an object to be added (or overwritten) on the next commit."""
        raise NotImplementedError()

    def stage_remove(self, name: str) -> Outcome:
        """Stage a committed object for removal on the next commit."""
        raise NotImplementedError()

    def commit(self, message: str) -> Outcome:
        """Fold the staged changes into the working set and record a commit."""
        raise NotImplementedError()

    def checkout(self, commit_id: str) -> Outcome:
        """Restore the working set from a commit in this branch's history."""
        raise NotImplementedError()

    def log(self) -> Outcome:
        """Describe the history, most recent commit first."""
        raise NotImplementedError()

    def head(self) -> Outcome:
        """Return the most recent commit."""
        raise NotImplementedError()

    def get(self, name: str) -> Outcome:
        """Retrieve a committed object by name."""
        raise NotImplementedError()

    def is_dirty(self) -> bool:
        """Check if there are any staged changes."""
        raise NotImplementedError()


class BranchRegistry:
    """
    Collection of branches with a single current branch.
    """

    @property
    def current(self) -> Branch:
        """The branch all store operations are delegated to."""
        raise NotImplementedError()

    def get(self, branch_name: str) -> Branch | None:
        """Look up a branch by name."""
        raise NotImplementedError()

    def create(self, branch_name: str) -> Outcome:
        """Create a branch as an independent copy of the current one."""
        raise NotImplementedError()

    def checkout(self, branch_name: str) -> Outcome:
        """Switch the current branch."""
        raise NotImplementedError()

    def remove(self, branch_name: str) -> Outcome:
        """Delete a branch other than the current one."""
        raise NotImplementedError()

    def names(self) -> list[str]:
        """List all branch names in name order."""
        raise NotImplementedError()

    def list(self) -> Success:
        """List branches in name order, marking the current one."""
        raise NotImplementedError()


class ObjectStore:
    """
    Facade over a branch registry.

    Every object operation is forwarded to the registry's current branch.
    """

    def add(self, name: str, obj: Object) -> ValueOutcome[Object]:
        """Stage an object on the current branch."""
        raise NotImplementedError()

    def remove(self, name: str) -> Outcome:
        """Stage the removal of a committed object on the current branch."""
        raise NotImplementedError()

    def commit(self, message: str) -> Outcome:
        """Commit the current branch's stage."""
        raise NotImplementedError()

    def checkout(self, commit_id: str) -> Outcome:
        """Check out a commit of the current branch."""
        raise NotImplementedError()

    def branch(self) -> BranchRegistry:
        """Access branch management."""
        raise NotImplementedError()

    def log(self) -> Outcome:
        """History of the current branch."""
        raise NotImplementedError()

    def head(self) -> Outcome:
        """Latest commit of the current branch."""
        raise NotImplementedError()

    def get(self, name: str) -> Outcome:
        """Retrieve a committed object from the current branch."""
        raise NotImplementedError()

    def is_dirty(self) -> bool:
        """Check if the current branch has uncommitted changes."""
        raise NotImplementedError()
