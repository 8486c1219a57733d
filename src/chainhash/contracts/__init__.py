"""Contract helpers for chainhash."""

from .error import BadInputError, CapacityExceededError, EnvelopeError, PolicyError

__all__ = [
    "EnvelopeError",
    "BadInputError",
    "PolicyError",
    "CapacityExceededError",
]
