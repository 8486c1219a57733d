"""Chained hash table with power-of-two growth."""

from . import config, contracts, core
from .config import AppConfig, TablePolicy, load_app_config
from .contracts import BadInputError, CapacityExceededError, EnvelopeError, PolicyError
from .core import MAXIMUM_CAPACITY, Entry, HashTable

__all__ = [
    "config",
    "contracts",
    "core",
    "AppConfig",
    "TablePolicy",
    "load_app_config",
    "EnvelopeError",
    "BadInputError",
    "PolicyError",
    "CapacityExceededError",
    "MAXIMUM_CAPACITY",
    "Entry",
    "HashTable",
]
