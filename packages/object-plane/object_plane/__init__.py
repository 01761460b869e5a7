from .base import Branch, BranchRegistry, Commit, Object, ObjectStore
from .builder import StoreBuilder
from .impl.locked import create_locked_object_store
from .impl.memory import create_memory_object_store
from .outcome import Failure, FailureKind, Outcome, Success, ValueOutcome

__all__ = [
    "Branch",
    "BranchRegistry",
    "Commit",
    "Object",
    "ObjectStore",
    "StoreBuilder",
    "create_locked_object_store",
    "create_memory_object_store",
    "Failure",
    "FailureKind",
    "Outcome",
    "Success",
    "ValueOutcome",
]
