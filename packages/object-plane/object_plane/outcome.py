from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    NO_OP = "no_op"
    INVALID = "invalid"


class Outcome:
    """
    Result of a store operation.

    Expected failures (missing object, missing branch, empty commit...) are
    reported as a `Failure` instead of being raised. Only `ValueOutcome`
    carries a payload, so callers have to check the variant before reading it.
    """

    success: bool = False

    def __init__(self, message: str) -> None:
        self.message = message

    @property
    def error(self) -> bool:
        return not self.success

    def __bool__(self) -> bool:
        return self.success

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        name = type(self).__name__
        if cycle:
            p.text(f"{name}(...)")
        else:
            with p.group(4, f"{name}(", ")"):
                for key, value in vars(self).items():
                    p.breakable()
                    p.text(f"{key}=")
                    p.pretty(value)
                    p.text(",")
                p.breakable()


class Success(Outcome):
    success = True


class ValueOutcome(Success, Generic[T]):
    def __init__(self, message: str, payload: T) -> None:
        super().__init__(message)
        self.payload = payload


class Failure(Outcome):
    success = False

    def __init__(self, message: str, kind: FailureKind) -> None:
        super().__init__(message)
        self.kind = kind


def not_found(message: str) -> Failure:
    return Failure(message, FailureKind.NOT_FOUND)


def conflict(message: str) -> Failure:
    return Failure(message, FailureKind.CONFLICT)


def no_op(message: str) -> Failure:
    return Failure(message, FailureKind.NO_OP)


def invalid(message: str) -> Failure:
    return Failure(message, FailureKind.INVALID)
