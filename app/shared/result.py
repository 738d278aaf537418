"""Tagged results returned by collection operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from app.exceptions.base import BaseAppException

T = TypeVar("T")


class Outcome(str, Enum):
    applied = "applied"
    # Target id absent from the collection; the desired end state already holds
    not_found = "not_found"
    invalid = "invalid"
    store_failed = "store_failed"
    # Store answered after the collection was closed; nothing was applied
    discarded = "discarded"


SUCCESS_OUTCOMES = frozenset({Outcome.applied, Outcome.not_found, Outcome.discarded})


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of a collection operation plus its value or error."""

    outcome: Outcome
    value: T | None = None
    error: BaseAppException | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in SUCCESS_OUTCOMES

    def unwrap(self) -> T | None:
        """Return the value, raising the carried error for failed outcomes."""
        if not self.ok and self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def applied(cls, value: T | None = None) -> "OperationResult[T]":
        return cls(Outcome.applied, value)

    @classmethod
    def failed(cls, outcome: Outcome, error: BaseAppException) -> "OperationResult[T]":
        return cls(outcome, error=error)
