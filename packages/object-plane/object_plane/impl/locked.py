import threading
from typing import Any, Mapping

from object_plane.base import Branch, BranchRegistry, Object, ObjectStore
from object_plane.outcome import Outcome, Success, ValueOutcome


class LockedBranch(Branch):
    """
    Branch handle that runs every call under the lock of its store.
    """

    def __init__(self, inner: Branch, lock: threading.RLock) -> None:
        self.inner = inner
        self._lock = lock

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("LockedBranch(...)")
        else:
            with p.group(4, "LockedBranch(", ")"):
                p.breakable()
                p.pretty(self.inner)
                p.breakable()

    @property
    def name(self) -> str:
        with self._lock:
            return self.inner.name

    @property
    def working_set(self) -> Mapping[str, Object]:
        with self._lock:
            return dict(self.inner.working_set)

    @property
    def staged_additions(self) -> Mapping[str, Object]:
        with self._lock:
            return dict(self.inner.staged_additions)

    @property
    def staged_removals(self) -> frozenset[str]:
        with self._lock:
            return self.inner.staged_removals

    def stage_add(self, name: str, obj: Object) -> ValueOutcome[Object]:
        with self._lock:
            return self.inner.stage_add(name, obj)

    def stage_remove(self, name: str) -> Outcome:
        with self._lock:
            return self.inner.stage_remove(name)

    def commit(self, message: str) -> Outcome:
        with self._lock:
            return self.inner.commit(message)

    def checkout(self, commit_id: str) -> Outcome:
        with self._lock:
            return self.inner.checkout(commit_id)

    def log(self) -> Outcome:
        with self._lock:
            return self.inner.log()

    def head(self) -> Outcome:
        with self._lock:
            return self.inner.head()

    def get(self, name: str) -> Outcome:
        with self._lock:
            return self.inner.get(name)

    def is_dirty(self) -> bool:
        with self._lock:
            return self.inner.is_dirty()


class LockedBranchRegistry(BranchRegistry):
    """
    Registry handle sharing the lock of the store it was obtained from.
    """

    def __init__(self, inner: BranchRegistry, lock: threading.RLock) -> None:
        self.inner = inner
        self._lock = lock

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("LockedBranchRegistry(...)")
        else:
            with p.group(4, "LockedBranchRegistry(", ")"):
                p.breakable()
                p.pretty(self.inner)
                p.breakable()

    @property
    def current(self) -> LockedBranch:
        with self._lock:
            return LockedBranch(self.inner.current, self._lock)

    def get(self, branch_name: str) -> LockedBranch | None:
        with self._lock:
            branch = self.inner.get(branch_name)
        if branch is None:
            return None
        return LockedBranch(branch, self._lock)

    def create(self, branch_name: str) -> Outcome:
        with self._lock:
            return self.inner.create(branch_name)

    def checkout(self, branch_name: str) -> Outcome:
        with self._lock:
            return self.inner.checkout(branch_name)

    def remove(self, branch_name: str) -> Outcome:
        with self._lock:
            return self.inner.remove(branch_name)

    def names(self) -> list[str]:
        with self._lock:
            return self.inner.names()

    def list(self) -> Success:
        with self._lock:
            return self.inner.list()


class LockedObjectStore(ObjectStore):
    # commit and checkout update several fields of a branch, so readers take
    # the lock as well
    _lock: threading.RLock

    def __init__(self, inner: ObjectStore) -> None:
        self.inner = inner
        self._lock = threading.RLock()
        self.branches = LockedBranchRegistry(inner.branch(), self._lock)

    @property
    def lock(self) -> threading.RLock:
        """Held while several calls have to run as one unit."""
        return self._lock

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("LockedObjectStore(...)")
        else:
            with p.group(4, "LockedObjectStore(", ")"):
                p.breakable()
                p.pretty(self.inner)
                p.breakable()

    def add(self, name: str, obj: Object) -> ValueOutcome[Object]:
        with self._lock:
            return self.inner.add(name, obj)

    def remove(self, name: str) -> Outcome:
        with self._lock:
            return self.inner.remove(name)

    def commit(self, message: str) -> Outcome:
        with self._lock:
            return self.inner.commit(message)

    def checkout(self, commit_id: str) -> Outcome:
        with self._lock:
            return self.inner.checkout(commit_id)

    def branch(self) -> LockedBranchRegistry:
        return self.branches

    def log(self) -> Outcome:
        with self._lock:
            return self.inner.log()

    def head(self) -> Outcome:
        with self._lock:
            return self.inner.head()

    def get(self, name: str) -> Outcome:
        with self._lock:
            return self.inner.get(name)

    def is_dirty(self) -> bool:
        with self._lock:
            return self.inner.is_dirty()


def create_locked_object_store(store: ObjectStore) -> LockedObjectStore:
    return LockedObjectStore(store)
