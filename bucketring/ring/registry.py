"""
Bucket Registry: per-bucket lock and cached virtual-node positions.

Presence of an entry is the source of truth for "this bucket exists".
Entries are installed with setdefault semantics and removed with an
atomic pop, which is what splits removal into its two phases: the bucket
disappears for new readers at once, while ring cleanup waits for the
entry's write lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Generic, Hashable, Optional, TypeVar

from bucketring.core.types import Position
from bucketring.ring.rwlock import ReadWriteLock

B = TypeVar("B", bound=Hashable)


@dataclass(frozen=True, slots=True)
class BucketInfo:
    """Registry value: a bucket's lock plus its N ring positions."""
    positions: tuple[Position, ...]
    lock: ReadWriteLock = field(default_factory=ReadWriteLock, compare=False)


class BucketRegistry(Generic[B]):
    """
    Concurrent mapping from bucket identity to BucketInfo.

    Iteration order is registration order.
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: dict[B, BucketInfo] = {}
        self._lock = threading.Lock()

    def register(self, bucket: B, info: BucketInfo) -> BucketInfo:
        """Install info unless bucket already has an entry; returns the entry in effect."""
        with self._lock:
            return self._entries.setdefault(bucket, info)

    def get(self, bucket: B) -> Optional[BucketInfo]:
        with self._lock:
            return self._entries.get(bucket)

    def pop(self, bucket: B) -> Optional[BucketInfo]:
        """Atomically remove and return the entry for bucket."""
        with self._lock:
            return self._entries.pop(bucket, None)

    def is_current(self, bucket: B, info: BucketInfo) -> bool:
        """True if info is still the registered entry for bucket."""
        with self._lock:
            return self._entries.get(bucket) is info

    def buckets(self) -> list[B]:
        """Snapshot of registered buckets."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, bucket: object) -> bool:
        with self._lock:
            return bucket in self._entries
