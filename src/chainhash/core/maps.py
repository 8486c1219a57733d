from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Hashable, Iterable, Set as AbstractSet
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterator, List, Optional, Set, Tuple, TypeVar

from chainhash.config import (
    DEFAULT_INITIAL_CAPACITY,
    DEFAULT_LARGE_REHASH_WARN,
    DEFAULT_LOAD_FACTOR,
    TablePolicy,
)
from chainhash.contracts.error import CapacityExceededError, PolicyError

logger = logging.getLogger("chainhash")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

MAXIMUM_CAPACITY: int = 1 << 30

_MASK_32: int = 0xFFFFFFFF


def _next_power_of_two(value: int) -> int:
    if value <= 1:
        return 1
    return 1 << (value - 1).bit_length()


def spread(h: int) -> int:
    """Mix a native hash code so that entropy in its high bits reaches the low bits.

    Python hashes are 64-bit and may be negative, so the value is first folded
    down to an unsigned 32-bit word; the shifts below then match the classic
    supplemental hash used by power-of-two chained tables.
    """

    h = (h ^ (h >> 32)) & _MASK_32
    h ^= (h >> 20) ^ (h >> 12)
    return h ^ (h >> 7) ^ (h >> 4)


@dataclass(slots=True)
class _Entry:
    key: Any
    value: Any
    hash: int


@dataclass(frozen=True, slots=True)
class Entry:
    """Immutable (key, value) pair handed out by :meth:`HashTable.entry_set`.

    Hashes by key only, so entries holding unhashable values can still live
    in a set; keys are unique within a table.
    """

    key: Any
    value: Any

    def __hash__(self) -> int:
        return hash(self.key)

    def __iter__(self) -> Iterator[Any]:
        yield self.key
        yield self.value

    def __str__(self) -> str:
        return f"[{self.key}, {self.value}]"


class ValueSnapshot(AbstractSet[Any]):
    """Distinct values of a table at one instant.

    Hashable values are kept in a set; unhashable ones (lists, dicts) fall back
    to equality comparison against a list.
    """

    __slots__ = ("_hashable", "_unhashable")

    def __init__(self, values: Iterable[Any] = ()) -> None:
        self._hashable: Set[Any] = set()
        self._unhashable: List[Any] = []
        for value in values:
            if _is_hashable(value):
                self._hashable.add(value)
            elif not any(value == seen for seen in self._unhashable):
                self._unhashable.append(value)

    def __contains__(self, value: object) -> bool:
        if _is_hashable(value):
            return value in self._hashable
        return any(value == seen for seen in self._unhashable)

    def __iter__(self) -> Iterator[Any]:
        yield from self._hashable
        yield from self._unhashable

    def __len__(self) -> int:
        return len(self._hashable) + len(self._unhashable)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"


def _is_hashable(value: object) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


class HashTable(Generic[K, V]):
    """Hash map with chained buckets and load-factor driven doubling."""

    __slots__ = ("_buckets", "_capacity", "_size", "_load_factor_threshold", "_large_rehash_warn")

    MAXIMUM_CAPACITY: int = MAXIMUM_CAPACITY

    def __init__(
        self,
        initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
        load_factor_threshold: float = DEFAULT_LOAD_FACTOR,
        *,
        large_rehash_warn_threshold: int = DEFAULT_LARGE_REHASH_WARN,
    ) -> None:
        TablePolicy(initial_capacity, load_factor_threshold, large_rehash_warn_threshold).validate()
        self._capacity = min(_next_power_of_two(initial_capacity), self.MAXIMUM_CAPACITY)
        if self._capacity != initial_capacity:
            logger.debug("Rounded initial capacity from %d to %d", initial_capacity, self._capacity)
        self._load_factor_threshold = float(load_factor_threshold)
        self._large_rehash_warn = large_rehash_warn_threshold
        self._buckets: List[Optional[List[_Entry]]] = [None] * self._capacity
        self._size = 0

    @classmethod
    def from_policy(cls, policy: TablePolicy) -> "HashTable[Any, Any]":
        return cls(
            policy.initial_capacity,
            policy.load_factor_threshold,
            large_rehash_warn_threshold=policy.large_rehash_warn_threshold,
        )

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def load_factor_threshold(self) -> float:
        return self._load_factor_threshold

    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def load_factor(self) -> float:
        return self._size / self._capacity

    def max_bucket_len(self) -> int:
        longest = 0
        for bucket in self._buckets:
            if bucket:
                longest = max(longest, len(bucket))
        return longest

    # ------------------------------------------------------------------
    # Hashing and growth
    # ------------------------------------------------------------------
    def _index(self, h: int) -> int:
        return h & (self._capacity - 1)

    def _find(self, key: Any, h: int) -> Optional[_Entry]:
        bucket = self._buckets[self._index(h)]
        if bucket:
            for entry in bucket:
                if entry.hash == h and (entry.key is key or entry.key == key):
                    return entry
        return None

    def _reaches_threshold(self, size: int, capacity: int) -> bool:
        return size >= capacity * self._load_factor_threshold

    def _rehash(self, new_capacity: int) -> None:
        if self._size >= self._large_rehash_warn:
            logger.warning(
                "Large table rehash starting (size=%d, capacity %d -> %d)",
                self._size,
                self._capacity,
                new_capacity,
            )
        old = self._buckets
        old_capacity = self._capacity
        self._capacity = new_capacity
        self._buckets = [None] * new_capacity
        for bucket in old:
            if not bucket:
                continue
            for entry in bucket:
                idx = self._index(entry.hash)
                target = self._buckets[idx]
                if target is None:
                    target = self._buckets[idx] = []
                target.append(entry)
        logger.debug("Rehashed %d entries: capacity %d -> %d", self._size, old_capacity, new_capacity)
        if new_capacity == self.MAXIMUM_CAPACITY:
            logger.warning("Table reached maximum capacity (%d)", new_capacity)

    def _grow_for_insert(self) -> None:
        needed = self._size + 1
        if not self._reaches_threshold(needed, self._capacity):
            return
        if self._capacity >= self.MAXIMUM_CAPACITY:
            logger.error(
                "Refusing insert: table at maximum capacity %d with %d entries",
                self._capacity,
                self._size,
            )
            raise CapacityExceededError(self._capacity, self._size)
        new_capacity = self._capacity << 1
        while new_capacity < self.MAXIMUM_CAPACITY and self._reaches_threshold(needed, new_capacity):
            new_capacity <<= 1
        self._rehash(new_capacity)

    # ------------------------------------------------------------------
    # Mutation and lookup
    # ------------------------------------------------------------------
    def put(self, key: K, value: V) -> V:
        """Map ``key`` to ``value``.

        Returns the replaced value when ``key`` was already present, otherwise
        the newly inserted ``value``. May double the bucket array first.
        """

        if key is None:
            raise PolicyError("HashTable keys must not be None")
        h = spread(hash(key))
        entry = self._find(key, h)
        if entry is not None:
            old_value = entry.value
            entry.value = value
            return old_value

        self._grow_for_insert()
        idx = self._index(h)
        bucket = self._buckets[idx]
        if bucket is None:
            bucket = self._buckets[idx] = []
        bucket.append(_Entry(key, value, h))
        self._size += 1
        return value

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        if key is None:
            return default
        entry = self._find(key, spread(hash(key)))
        return default if entry is None else entry.value

    def contains_key(self, key: K) -> bool:
        if key is None:
            return False
        return self._find(key, spread(hash(key))) is not None

    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)  # type: ignore[arg-type]

    def contains_value(self, value: V) -> bool:
        for bucket in self._buckets:
            if not bucket:
                continue
            for entry in bucket:
                if entry.value == value:
                    return True
        return False

    def remove(self, key: K) -> bool:
        """Drop the entry for ``key``; absent keys are a no-op returning False."""

        if key is None:
            return False
        h = spread(hash(key))
        bucket = self._buckets[self._index(h)]
        if not bucket:
            return False
        for idx, entry in enumerate(bucket):
            if entry.hash == h and (entry.key is key or entry.key == key):
                del bucket[idx]
                self._size -= 1
                return True
        return False

    def clear(self) -> None:
        self._buckets = [None] * self._capacity
        self._size = 0

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def items(self) -> Iterator[Tuple[K, V]]:
        for bucket in self._buckets:
            if not bucket:
                continue
            for entry in bucket:
                yield entry.key, entry.value

    def __iter__(self) -> Iterator[K]:
        for key, _ in self.items():
            yield key

    def key_set(self) -> Set[K]:
        return {key for key, _ in self.items()}

    def values(self) -> ValueSnapshot:
        return ValueSnapshot(value for _, value in self.items())

    def entry_set(self) -> Set[Entry]:
        return {Entry(key, value) for key, value in self.items()}

    def __str__(self) -> str:
        return "[" + "".join(str(Entry(key, value)) for key, value in self.items()) + "]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={self._size}, capacity={self._capacity})"


def collect_chain_histogram(table: HashTable[Any, Any]) -> List[List[int]]:
    """Count buckets by chain length, absent buckets counting as length 0."""

    histogram: Dict[int, int] = defaultdict(int)
    for bucket in table._buckets:  # type: ignore[attr-defined]
        histogram[len(bucket) if bucket else 0] += 1
    return [[length, count] for length, count in sorted(histogram.items())]


__all__ = [
    "Entry",
    "HashTable",
    "MAXIMUM_CAPACITY",
    "ValueSnapshot",
    "collect_chain_histogram",
    "spread",
]
