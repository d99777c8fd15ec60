"""
Concurrent Sorted Map: ordered Position -> value container.

Wraps sortedcontainers.SortedDict behind a single map-level lock so that
inserts, deletes, predecessor lookups and range scans may run from many
threads. The lock is held only for one map operation at a time and never
while a caller waits on anything else.

Range scans are materialised under the lock; callers receive plain lists
that later mutation cannot disturb.

Complexity:
- put/pop: O(log n)
- lower_key/ceiling_key/last_key: O(log n)
- range scan: O(log n + k) for k results
"""

from __future__ import annotations

import threading
from typing import Generic, Hashable, Iterable, Optional, TypeVar

from sortedcontainers import SortedDict

from bucketring.core.types import Position

V = TypeVar("V", bound=Hashable)


class ConcurrentSortedMap(Generic[V]):
    """
    Thread-safe ordered map keyed by ring position.

    Usage:
        ring = ConcurrentSortedMap()
        ring.put(position, "node-1")
        prev = ring.lower_key(position)
        owned = ring.values_between(prev, position)
    """

    __slots__ = ("_data", "_lock")

    def __init__(self, items: Optional[Iterable[tuple[Position, V]]] = None) -> None:
        self._data: SortedDict = SortedDict()
        self._lock = threading.Lock()
        if items is not None:
            for key, value in items:
                self._data[key] = value

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------
    def put(self, key: Position, value: V) -> Optional[V]:
        """Insert or overwrite; returns the previous value, if any."""
        with self._lock:
            previous = self._data.get(key)
            self._data[key] = value
            return previous

    def pop(self, key: Position) -> Optional[V]:
        """Remove key if present; returns the removed value or None."""
        with self._lock:
            return self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    # -------------------------------------------------------------------------
    # Point queries
    # -------------------------------------------------------------------------
    def get(self, key: Position) -> Optional[V]:
        with self._lock:
            return self._data.get(key)

    def lower_key(self, key: Position) -> Optional[Position]:
        """Greatest key strictly less than key, or None."""
        with self._lock:
            idx = self._data.bisect_left(key)
            if idx == 0:
                return None
            return self._data.keys()[idx - 1]

    def ceiling_item(self, key: Position) -> Optional[tuple[Position, V]]:
        """Smallest entry with key >= key, or None."""
        with self._lock:
            idx = self._data.bisect_left(key)
            if idx == len(self._data):
                return None
            return self._data.peekitem(idx)

    def first_item(self) -> Optional[tuple[Position, V]]:
        with self._lock:
            if not self._data:
                return None
            return self._data.peekitem(0)

    def last_key(self) -> Optional[Position]:
        """Greatest key, or None when empty."""
        with self._lock:
            if not self._data:
                return None
            return self._data.keys()[-1]

    # -------------------------------------------------------------------------
    # Range scans
    # -------------------------------------------------------------------------
    def values_between(self, low: Position, high: Position) -> list[V]:
        """Values with low < key <= high, ascending."""
        with self._lock:
            return [
                self._data[k]
                for k in self._data.irange(low, high, inclusive=(False, True))
            ]

    def values_up_to(self, high: Position) -> list[V]:
        """Values with key <= high, ascending."""
        with self._lock:
            return [
                self._data[k]
                for k in self._data.irange(maximum=high, inclusive=(True, True))
            ]

    def values_above(self, low: Position) -> list[V]:
        """Values with key > low, ascending."""
        with self._lock:
            return [
                self._data[k]
                for k in self._data.irange(minimum=low, inclusive=(False, True))
            ]

    def values(self) -> list[V]:
        with self._lock:
            return list(self._data.values())

    def keys(self) -> list[Position]:
        with self._lock:
            return list(self._data.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __repr__(self) -> str:
        return f"ConcurrentSortedMap(size={len(self)})"
