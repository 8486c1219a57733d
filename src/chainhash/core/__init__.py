from .maps import (
    MAXIMUM_CAPACITY,
    Entry,
    HashTable,
    ValueSnapshot,
    collect_chain_histogram,
    spread,
)

__all__ = [
    "Entry",
    "HashTable",
    "MAXIMUM_CAPACITY",
    "ValueSnapshot",
    "collect_chain_histogram",
    "spread",
]
