"""
Consistent Hasher: bucket/member placement on a circular keyspace.

Implements consistent hashing with virtual nodes:
- N virtual nodes per bucket for fair member distribution
- Minimal remapping on bucket add/remove (only the affected wedges move)
- Per-bucket reader/writer lock making "list members of B" atomic with
  respect to "remove B"

Locking:
- add_bucket, add_member, remove_member take no per-bucket lock
- members_of / all_buckets_to_members take the bucket's read lock
- remove_bucket / try_remove_bucket take the bucket's write lock

Complexity:
- add/remove bucket: O(N log n) where N = virtual nodes
- add/remove member: O(log m)
- members_of: O(N log n + k) for k owned members
"""

from __future__ import annotations

import struct
import threading
from typing import Any, Callable, Generic, Hashable, Iterable, Optional, TypeVar

from bucketring.core import constants as C
from bucketring.core.config import RingConfig
from bucketring.core.errors import InvalidArgumentError, RemovalCancelledError
from bucketring.core.types import BytesConverter, HashFunction, Position
from bucketring.hashing.functions import DEFAULT_HASH, get_hash_function
from bucketring.observability.logging import StructuredLogger
from bucketring.ring.query import owned_members
from bucketring.ring.registry import BucketInfo, BucketRegistry
from bucketring.ring.sorted_map import ConcurrentSortedMap

B = TypeVar("B", bound=Hashable)
M = TypeVar("M", bound=Hashable)

_VNODE_ID = struct.Struct(">i")  # big-endian int32 virtual-node suffix

logger = StructuredLogger("bucketring.ring")


class ConsistentHasher(Generic[B, M]):
    """
    Thread-safe consistent hashing ring of buckets and members.

    Each member belongs to the bucket whose virtual node is the first one
    clockwise from the member's position.

    Usage:
        ring = ConsistentHasher(700, str_to_bytes, str_to_bytes, sha1_hash)
        ring.add_bucket("node-1")
        ring.add_bucket("node-2")
        ring.add_member("user:42")

        ring.members_of("node-1")
        ring.try_remove_bucket("node-2", timeout=1.0)
    """

    __slots__ = (
        "_virtual_nodes", "_bucket_converter", "_member_converter",
        "_hash_function", "_bucket_ring", "_member_ring", "_registry",
    )

    def __init__(
        self,
        virtual_nodes: int,
        bucket_converter: BytesConverter[B],
        member_converter: BytesConverter[M],
        hash_function: HashFunction = DEFAULT_HASH,
    ) -> None:
        """
        Create an empty ring.

        Args:
            virtual_nodes: Positions per bucket; values below 1 fall back to 1.
                More virtual nodes give a fairer distribution.
            bucket_converter: Encodes bucket identities to bytes
            member_converter: Encodes member identities to bytes
            hash_function: Maps bytes to ring positions
        """
        _require_callable("bucket_converter", bucket_converter)
        _require_callable("member_converter", member_converter)
        _require_callable("hash_function", hash_function)

        self._virtual_nodes = (
            virtual_nodes if virtual_nodes >= C.MIN_VIRTUAL_NODES else C.MIN_VIRTUAL_NODES
        )
        self._bucket_converter = bucket_converter
        self._member_converter = member_converter
        self._hash_function = hash_function

        self._bucket_ring: ConcurrentSortedMap[B] = ConcurrentSortedMap()
        self._member_ring: ConcurrentSortedMap[M] = ConcurrentSortedMap()
        self._registry: BucketRegistry[B] = BucketRegistry()

    @classmethod
    def from_config(
        cls,
        config: RingConfig,
        bucket_converter: BytesConverter[B],
        member_converter: BytesConverter[M],
    ) -> ConsistentHasher[B, M]:
        """Build a ring from RingConfig, resolving the hash by name."""
        if config is None:
            raise InvalidArgumentError.null_argument("config")
        return cls(
            config.virtual_nodes,
            bucket_converter,
            member_converter,
            get_hash_function(config.hash_name),
        )

    # =========================================================================
    # POSITIONS
    # =========================================================================
    def _bucket_positions(self, bucket: B) -> tuple[Position, ...]:
        encoded = _as_bytes("bucket_converter", self._bucket_converter(bucket))
        return tuple(
            self._hash(encoded + _VNODE_ID.pack(vnode_id))
            for vnode_id in range(
                C.FIRST_VIRTUAL_NODE_ID,
                C.FIRST_VIRTUAL_NODE_ID + self._virtual_nodes,
            )
        )

    def _member_position(self, member: M) -> Position:
        return self._hash(_as_bytes("member_converter", self._member_converter(member)))

    def _hash(self, data: bytes) -> Position:
        return _as_bytes("hash_function", self._hash_function(data))

    # =========================================================================
    # BUCKETS
    # =========================================================================
    def add_bucket(self, bucket: B) -> None:
        """
        Place bucket's virtual nodes on the ring.

        Re-adding a present bucket rewrites identical positions and keeps
        the existing registry entry.
        """
        if bucket is None:
            raise InvalidArgumentError.null_argument("bucket")

        positions = self._bucket_positions(bucket)
        for position in positions:
            self._bucket_ring.put(position, bucket)

        info = BucketInfo(positions=positions)
        if self._registry.register(bucket, info) is info:
            logger.debug("bucket added", bucket=repr(bucket), virtual_nodes=len(positions))

    def remove_bucket(
        self,
        bucket: B,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """
        Remove bucket, waiting for in-flight listings of it to finish.

        The bucket is hidden from new readers immediately; its ring
        positions are deleted once the write lock is obtained.

        Args:
            bucket: Bucket to remove; absent buckets are a no-op
            cancel: Setting this event abandons the wait

        Raises:
            RemovalCancelledError: cancel was set before the lock was
                obtained. The ring is unchanged.
        """
        if not self._remove_bucket(bucket, timeout=None, cancel=cancel):
            raise RemovalCancelledError.cancelled(bucket)

    def try_remove_bucket(self, bucket: B, timeout: float) -> bool:
        """
        Remove bucket, waiting at most timeout seconds for its readers.

        Returns:
            True if removed or already absent, False on timeout (the
            ring is then unchanged)
        """
        if timeout is None:
            raise InvalidArgumentError.null_argument("timeout")
        if timeout < 0:
            raise InvalidArgumentError.negative_timeout(timeout)
        return self._remove_bucket(bucket, timeout=timeout, cancel=None)

    def _remove_bucket(
        self,
        bucket: B,
        timeout: Optional[float],
        cancel: Optional[threading.Event],
    ) -> bool:
        if bucket is None:
            raise InvalidArgumentError.null_argument("bucket")

        info = self._registry.pop(bucket)
        if info is None:
            return True

        try:
            acquired = info.lock.acquire_write(timeout=timeout, cancel=cancel)
        except BaseException:
            # Interrupted while waiting; positions are untouched
            self._registry.register(bucket, info)
            raise

        if not acquired:
            # Nothing was deleted; make the bucket visible again
            self._registry.register(bucket, info)
            logger.warning(
                "bucket removal abandoned",
                bucket=repr(bucket),
                reason="cancelled" if cancel is not None and cancel.is_set() else "timeout",
                timeout_s=timeout,
            )
            return False

        try:
            for position in info.positions:
                self._bucket_ring.pop(position)
        finally:
            info.lock.release_write()

        logger.debug("bucket removed", bucket=repr(bucket), virtual_nodes=len(info.positions))
        return True

    # =========================================================================
    # MEMBERS
    # =========================================================================
    def add_member(self, member: M) -> None:
        """Place member on the ring; re-adding overwrites."""
        if member is None:
            raise InvalidArgumentError.null_argument("member")
        self._member_ring.put(self._member_position(member), member)

    def remove_member(self, member: M) -> None:
        """Take member off the ring; absent members are a no-op."""
        if member is None:
            raise InvalidArgumentError.null_argument("member")
        self._member_ring.pop(self._member_position(member))

    # =========================================================================
    # QUERIES
    # =========================================================================
    def members_of(
        self,
        bucket: B,
        candidates: Optional[Iterable[M]] = None,
    ) -> list[M]:
        """
        Members owned by bucket.

        Args:
            bucket: Bucket to list
            candidates: Simulate ownership over these members instead of
                the stored ones

        Returns:
            Owned members, empty if the bucket is absent
        """
        if bucket is None:
            raise InvalidArgumentError.null_argument("bucket")

        if candidates is None:
            members = self._member_ring
        else:
            members = self._candidate_ring(candidates)

        info = self._registry.get(bucket)
        if info is None:
            return []

        with info.lock.read_locked():
            if not self._registry.is_current(bucket, info):
                return []
            return owned_members(self._bucket_ring, members, info.positions)

    def _candidate_ring(self, candidates: Iterable[M]) -> ConcurrentSortedMap[M]:
        ring: ConcurrentSortedMap[M] = ConcurrentSortedMap()
        for member in candidates:
            if member is None:
                raise InvalidArgumentError.null_argument("candidate member")
            ring.put(self._member_position(member), member)
        return ring

    def all_buckets_to_members(self) -> dict[B, list[M]]:
        """
        Members of every bucket.

        Each bucket's listing is atomic with respect to its own removal;
        the mapping as a whole is not a single snapshot.
        """
        return {bucket: self.members_of(bucket) for bucket in self._registry.buckets()}

    def bucket_for(self, member: M) -> Optional[B]:
        """
        Bucket that owns member's position, None on an empty ring.

        The member does not have to be stored.
        """
        if member is None:
            raise InvalidArgumentError.null_argument("member")
        position = self._member_position(member)
        item = self._bucket_ring.ceiling_item(position) or self._bucket_ring.first_item()
        return None if item is None else item[1]

    def all_buckets(self) -> list[B]:
        """Registered buckets in registration order."""
        return self._registry.buckets()

    def all_members(self) -> list[M]:
        """Stored members in ring order."""
        return self._member_ring.values()

    # =========================================================================
    # INTROSPECTION
    # =========================================================================
    @property
    def virtual_nodes(self) -> int:
        """Virtual nodes per bucket."""
        return self._virtual_nodes

    @property
    def bucket_count(self) -> int:
        return len(self._registry)

    @property
    def member_count(self) -> int:
        return len(self._member_ring)

    @property
    def position_count(self) -> int:
        """Bucket positions currently on the ring."""
        return len(self._bucket_ring)

    def __contains__(self, bucket: object) -> bool:
        return bucket in self._registry

    def get_stats(self) -> dict[str, Any]:
        """Get ring statistics."""
        return {
            "buckets": self.bucket_count,
            "members": self.member_count,
            "positions": self.position_count,
            "virtual_nodes": self._virtual_nodes,
        }

    def __repr__(self) -> str:
        return (
            f"ConsistentHasher(virtual_nodes={self._virtual_nodes}, "
            f"buckets={self.bucket_count}, members={self.member_count})"
        )


def _require_callable(name: str, value: Callable[..., Any]) -> None:
    if value is None:
        raise InvalidArgumentError.null_argument(name)
    if not callable(value):
        raise InvalidArgumentError.not_callable(name, value)


def _as_bytes(source: str, value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise InvalidArgumentError.not_bytes(source, value)
