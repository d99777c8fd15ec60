"""
Ring Query Engine: clockwise range scans with wraparound.

A virtual node at position p owns every member in (predecessor, p],
where predecessor is the closest bucket position below p. The virtual
node with no predecessor is the ring minimum; it owns everything up to
p plus the wedge above the ring's maximum bucket position, which wraps
back around to the start of the keyspace. The two scans are disjoint
because p <= maximum.

Across all virtual nodes these intervals partition the keyspace, so a
member lands in exactly one of them.
"""

from __future__ import annotations

from typing import Hashable, Sequence, TypeVar

from bucketring.core.types import Position
from bucketring.ring.sorted_map import ConcurrentSortedMap

M = TypeVar("M", bound=Hashable)


def owned_range(
    bucket_ring: ConcurrentSortedMap,
    members: ConcurrentSortedMap[M],
    position: Position,
) -> list[M]:
    """Members owned by the single virtual node at position."""
    predecessor = bucket_ring.lower_key(position)
    if predecessor is not None:
        return members.values_between(predecessor, position)

    # Ring minimum: wrap around. When position is also the maximum (a
    # single-position ring) the wedge above it still belongs to it.
    owned = members.values_up_to(position)
    last = bucket_ring.last_key()
    if last is not None:
        owned.extend(members.values_above(last))
    return owned


def owned_members(
    bucket_ring: ConcurrentSortedMap,
    members: ConcurrentSortedMap[M],
    positions: Sequence[Position],
) -> list[M]:
    """
    Members owned by a bucket, given its virtual-node positions.

    Results are concatenated in the order of positions; each virtual
    node's slice is in ascending member position.
    """
    result: list[M] = []
    for position in positions:
        result.extend(owned_range(bucket_ring, members, position))
    return result
