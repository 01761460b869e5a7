"""
Explicit setup of a store from a recorded sequence of calls.

    store = (
        StoreBuilder()
        .add("config", {"debug": False})
        .commit("initial config")
        .create_branch("dev")
        .build()
    )

Each step is replayed in order against a freshly created store. A step that
fails is logged and the replay carries on with the next one.
"""

import logging
from typing import Any, Callable

from object_plane.base import Object, ObjectStore
from object_plane.impl.memory import create_memory_object_store
from object_plane.outcome import Outcome

logger = logging.getLogger(__name__)

Step = Callable[[ObjectStore], Outcome]


class StoreBuilder:
    def __init__(
        self, factory: Callable[[], ObjectStore] = create_memory_object_store
    ) -> None:
        self.factory = factory
        self.steps: list[tuple[str, Step]] = []

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("StoreBuilder(...)")
        else:
            with p.group(4, "StoreBuilder(", ")"):
                for description, _ in self.steps:
                    p.breakable()
                    p.text(f"{description},")
                p.breakable()

    def _step(self, description: str, step: Step) -> "StoreBuilder":
        self.steps.append((description, step))
        return self

    def add(self, name: str, obj: Object) -> "StoreBuilder":
        return self._step(f"add({name!r})", lambda s: s.add(name, obj))

    def remove(self, name: str) -> "StoreBuilder":
        return self._step(f"remove({name!r})", lambda s: s.remove(name))

    def commit(self, message: str) -> "StoreBuilder":
        return self._step(f"commit({message!r})", lambda s: s.commit(message))

    def checkout(self, commit_id: str) -> "StoreBuilder":
        return self._step(
            f"checkout({commit_id!r})", lambda s: s.checkout(commit_id)
        )

    def create_branch(self, branch_name: str) -> "StoreBuilder":
        return self._step(
            f"create_branch({branch_name!r})",
            lambda s: s.branch().create(branch_name),
        )

    def switch_branch(self, branch_name: str) -> "StoreBuilder":
        return self._step(
            f"switch_branch({branch_name!r})",
            lambda s: s.branch().checkout(branch_name),
        )

    def build(self) -> ObjectStore:
        store = self.factory()
        for description, step in self.steps:
            outcome = step(store)
            if outcome.error:
                logger.warning(f"Setup step {description} failed: {outcome.message}")
        return store
