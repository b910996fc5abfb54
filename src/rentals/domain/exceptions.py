"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the calling layer (CLI, HTTP adapter) can catch them uniformly.  Only
StorageError and its subclasses are retryable; every other error means the
caller must change something before trying again.
"""

from __future__ import annotations

from dataclasses import dataclass


class DomainException(Exception):
    """Base class for all domain errors."""

    retryable = False


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class UnauthorizedError(DomainException):
    """The principal does not own the entity it tried to act on."""


class InvalidStateError(DomainException):
    """A transition was attempted from a status that does not allow it."""

    def __init__(self, message: str, current: str | None = None, action: str | None = None) -> None:
        super().__init__(message)
        self.current = current
        self.action = action


class NoPricingAvailableError(DomainException):
    """The product has no rental period tiers to price against."""


@dataclass(frozen=True)
class LineShortfall:
    product_id: str
    product_name: str
    requested: int
    available: int

    def __str__(self) -> str:
        return (
            f"{self.product_name} (need {self.requested}, "
            f"have {self.available} available)"
        )


class InsufficientAvailabilityError(DomainException):
    """One or more order lines cannot be satisfied for the rental window."""

    def __init__(self, shortfalls: list[LineShortfall]) -> None:
        self.shortfalls = list(shortfalls)
        detail = "; ".join(str(s) for s in self.shortfalls)
        super().__init__(f"Insufficient availability for {detail}")


class StorageError(DomainException):
    """The persistence layer failed transiently; the caller may retry."""

    retryable = True


class LockTimeoutError(StorageError):
    """A booking lock could not be acquired before the caller's deadline."""
