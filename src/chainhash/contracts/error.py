"""Exception hierarchy shared by the hash table and its configuration."""

from __future__ import annotations


class EnvelopeError(Exception):
    """Base exception that carries an optional hint for the caller."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class BadInputError(EnvelopeError):
    """Raised for malformed construction arguments or configuration."""


class PolicyError(EnvelopeError):
    """Raised for unsupported operations or contract violations."""


class CapacityExceededError(EnvelopeError):
    """Raised when an insertion would grow the table past its maximum capacity."""

    def __init__(self, capacity: int, size: int) -> None:
        super().__init__(
            f"Exceeding maximum capacity (capacity={capacity}, size={size})",
            hint="raise load_factor_threshold or shard entries across several tables",
        )
        self.capacity = capacity
        self.size = size


__all__ = [
    "EnvelopeError",
    "BadInputError",
    "PolicyError",
    "CapacityExceededError",
]
