from datetime import datetime, timedelta, timezone

import pytest

from object_plane.base import Commit, ObjectStore
from object_plane.builder import StoreBuilder
from object_plane.impl.locked import create_locked_object_store
from object_plane.impl.memory import create_memory_object_store
from object_plane.outcome import FailureKind, Success, ValueOutcome


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


class StoreProvider:
    def create(self, clock: TickingClock) -> ObjectStore:
        raise NotImplementedError()


class MemoryStoreProvider(StoreProvider):
    def create(self, clock: TickingClock) -> ObjectStore:
        return create_memory_object_store(clock=clock)


class LockedStoreProvider(StoreProvider):
    def create(self, clock: TickingClock) -> ObjectStore:
        return create_locked_object_store(create_memory_object_store(clock=clock))


class BuilderStoreProvider(StoreProvider):
    def create(self, clock: TickingClock) -> ObjectStore:
        return StoreBuilder(lambda: create_memory_object_store(clock=clock)).build()


PROVIDERS = [
    MemoryStoreProvider,
    LockedStoreProvider,
    BuilderStoreProvider,
]
PROVIDER_IDS = ["memory", "locked", "builder"]


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_store_lifecycle(clock: TickingClock, provider_cls: type[StoreProvider]):
    store = provider_cls().create(clock)

    # Test 1: Stage an object
    added = store.add("x", 1)
    assert added.success
    assert added.payload == 1
    assert store.is_dirty() is True, "Store should be dirty after add"

    # Test 2: Commit
    committed = store.commit("first")
    assert isinstance(committed, ValueOutcome)
    assert committed.message == "first\n\t1 objects changed"
    assert store.is_dirty() is False, "Store should be clean after commit"

    # Test 3: Read value
    found = store.get("x")
    assert isinstance(found, ValueOutcome)
    assert found.payload == 1

    # Test 4: Stage removal
    removed = store.remove("x")
    assert isinstance(removed, ValueOutcome)
    assert removed.payload == 1, "Removal reports the committed object"

    # Test 5: Commit again
    assert store.commit("drop x").success
    missing = store.get("x")
    assert missing.error
    assert missing.kind == FailureKind.NOT_FOUND
    assert not hasattr(missing, "payload")


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_staged_objects_are_not_visible(
    clock: TickingClock, provider_cls: type[StoreProvider]
):
    store = provider_cls().create(clock)

    store.add("x", 1)
    assert store.get("x").error

    store.commit("first")
    store.add("x", 2)
    assert store.get("x").payload == 1


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_commit_without_changes_fails(
    clock: TickingClock, provider_cls: type[StoreProvider]
):
    store = provider_cls().create(clock)

    outcome = store.commit("nothing")
    assert outcome.error
    assert outcome.kind == FailureKind.NO_OP
    assert outcome.message == "Nothing to commit, working directory clean."
    assert store.log().error, "No history entry should be created"


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_commit_rejects_empty_message(
    clock: TickingClock, provider_cls: type[StoreProvider]
):
    store = provider_cls().create(clock)
    store.add("x", 1)

    outcome = store.commit("  ")
    assert outcome.kind == FailureKind.INVALID
    assert store.is_dirty(), "Stage must survive a rejected commit"


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_remove_uncommitted_object_fails(
    clock: TickingClock, provider_cls: type[StoreProvider]
):
    store = provider_cls().create(clock)
    store.add("x", 1)

    outcome = store.remove("x")
    assert outcome.error
    assert outcome.kind == FailureKind.NOT_FOUND
    assert outcome.message == "Object x is not committed."


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_removal_wins_over_readd(clock: TickingClock, provider_cls: type[StoreProvider]):
    store = provider_cls().create(clock)
    store.add("x", 1)
    store.add("y", 2)
    store.commit("first")

    store.remove("x")
    store.add("x", 10)
    store.add("z", 3)
    outcome = store.commit("second")

    # Additions and removals are counted even when they cancel out.
    assert outcome.message == "second\n\t3 objects changed"
    assert store.get("x").error
    assert store.get("y").payload == 2
    assert store.get("z").payload == 3


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_add_overwrites_committed_object(
    clock: TickingClock, provider_cls: type[StoreProvider]
):
    store = provider_cls().create(clock)
    store.add("x", 1)
    store.commit("first")
    store.add("x", 2)
    store.commit("second")

    assert store.get("x").payload == 2
    head = store.head()
    assert isinstance(head.payload, Commit)
    assert dict(head.payload.snapshot) == {"x": 2}


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_checkout_restores_snapshot(
    clock: TickingClock, provider_cls: type[StoreProvider]
):
    store = provider_cls().create(clock)
    store.add("x", 1)
    first = store.commit("first").payload
    store.add("y", 2)
    second = store.commit("second").payload
    store.add("z", 3)
    third = store.commit("third").payload

    store.add("pending", 4)
    outcome = store.checkout(second.id)

    assert outcome.success
    assert outcome.payload is second
    assert outcome.message == f"HEAD is now at {second.id}."
    assert store.get("x").payload == 1
    assert store.get("y").payload == 2
    assert store.get("z").error
    assert store.is_dirty() is False, "Checkout discards staged changes"

    log = store.log().message
    assert first.id not in log, "Commits older than the target are dropped"
    assert second.id in log
    assert third.id in log
    assert store.head().payload is third


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_checkout_unknown_commit_changes_nothing(
    clock: TickingClock, provider_cls: type[StoreProvider]
):
    store = provider_cls().create(clock)
    store.add("x", 1)
    store.commit("first")
    store.add("y", 2)
    log_before = store.log().message

    outcome = store.checkout("deadbeef")

    assert outcome.error
    assert outcome.kind == FailureKind.NOT_FOUND
    assert outcome.message == "Commit deadbeef does not exist."
    assert store.get("x").payload == 1
    assert store.is_dirty() is True
    assert store.log().message == log_before


@pytest.mark.parametrize("provider_cls", PROVIDERS, ids=PROVIDER_IDS)
def test_log_and_head(clock: TickingClock, provider_cls: type[StoreProvider]):
    store = provider_cls().create(clock)

    empty = store.log()
    assert empty.error
    assert empty.message == "Branch master does not have any commits yet."
    assert store.head().error

    store.add("x", 1)
    first = store.commit("first").payload
    store.add("y", 2)
    second = store.commit("second").payload

    outcome = store.log()
    assert isinstance(outcome, Success)
    assert outcome.message == (
        f"Commit {second.id}\nDate: Mon Jan 01 12:00 2024 +0000\n\n\tsecond\n\n"
        f"Commit {first.id}\nDate: Mon Jan 01 12:00 2024 +0000\n\n\tfirst"
    )

    head = store.head()
    assert head.message == "second"
    assert head.payload is second
