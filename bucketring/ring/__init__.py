"""
Ring module: consistent hashing ring, registry, locking and range queries.
"""

from bucketring.ring.hasher import ConsistentHasher
from bucketring.ring.registry import BucketInfo, BucketRegistry
from bucketring.ring.rwlock import ReadWriteLock
from bucketring.ring.sorted_map import ConcurrentSortedMap

__all__ = [
    "ConsistentHasher",
    "BucketInfo",
    "BucketRegistry",
    "ReadWriteLock",
    "ConcurrentSortedMap",
]
