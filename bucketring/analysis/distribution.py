"""
Distribution Analyzer: fairness of member placement vs. virtual nodes.

For every virtual-node count in a sweep, builds an isolated ring, adds
all buckets then all members, and records which members each bucket
owns. Derived views report per-bucket counts, percentages and summary
statistics, which is how a virtual-node count is chosen offline.

With a single virtual node a bucket can own most of the keyspace; by
around 700 virtual nodes the split is close to even.

Usage:
    summary = distribution_summary(
        1, 800, int_to_bytes, int_to_bytes, sha1_hash, buckets, members, step=50,
    )
    n = best_virtual_nodes(summary)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Optional, Sequence, TypeVar

import numpy as np

from bucketring.core.errors import InvalidArgumentError
from bucketring.core.types import BytesConverter, HashFunction
from bucketring.observability.logging import StructuredLogger
from bucketring.ring.hasher import ConsistentHasher

B = TypeVar("B", bound=Hashable)
M = TypeVar("M", bound=Hashable)

logger = StructuredLogger("bucketring.analysis")


@dataclass(frozen=True, slots=True)
class DistributionStats:
    """Fairness statistics for one virtual-node count."""
    virtual_nodes: int
    counts: dict
    max_percentage: float
    min_percentage: float
    mean_percentage: float
    std_percentage: float
    imbalance: float  # most-loaded / least-loaded, 1.0 = perfectly balanced

    def to_dict(self) -> dict:
        return {
            "virtual_nodes": self.virtual_nodes,
            "max_percentage": self.max_percentage,
            "min_percentage": self.min_percentage,
            "mean_percentage": self.mean_percentage,
            "std_percentage": self.std_percentage,
            "imbalance": self.imbalance,
        }


def distribution(
    start: int,
    end: int,
    bucket_converter: BytesConverter[B],
    member_converter: BytesConverter[M],
    hash_function: HashFunction,
    buckets: Sequence[B],
    members: Sequence[M],
    step: int = 1,
) -> dict[int, dict[B, list[M]]]:
    """
    Bucket -> members mapping for each virtual-node count in [start, end].

    Returns:
        {virtual_nodes: {bucket: [members]}}, ascending by virtual_nodes
    """
    _check_sweep(start, end, step, buckets, members)
    _check_collaborators(bucket_converter, member_converter, hash_function)

    sweep_logger = logger.with_extra(start=start, end=end, step=step)
    result: dict[int, dict[B, list[M]]] = {}
    for virtual_nodes in range(start, end + 1, step):
        ring: ConsistentHasher[B, M] = ConsistentHasher(
            virtual_nodes, bucket_converter, member_converter, hash_function,
        )
        for bucket in buckets:
            ring.add_bucket(bucket)
        for member in members:
            ring.add_member(member)
        result[virtual_nodes] = ring.all_buckets_to_members()
        sweep_logger.debug("ring measured", virtual_nodes=virtual_nodes)

    sweep_logger.info(
        "distribution sweep complete",
        buckets=len(buckets),
        members=len(members),
    )
    return result


def distribution_count(
    start: int,
    end: int,
    bucket_converter: BytesConverter[B],
    member_converter: BytesConverter[M],
    hash_function: HashFunction,
    buckets: Sequence[B],
    members: Sequence[M],
    step: int = 1,
) -> dict[int, dict[int, B]]:
    """
    Owned-member count -> bucket for each virtual-node count.

    Inner mappings are keyed in ascending count order. Buckets with equal
    counts collapse onto one key; the last one wins.
    """
    sweep = distribution(
        start, end, bucket_converter, member_converter, hash_function,
        buckets, members, step,
    )
    return {
        virtual_nodes: dict(sorted(
            ((len(owned), bucket) for bucket, owned in mapping.items()),
            key=_first,
        ))
        for virtual_nodes, mapping in sweep.items()
    }


def distribution_percentage(
    start: int,
    end: int,
    bucket_converter: BytesConverter[B],
    member_converter: BytesConverter[M],
    hash_function: HashFunction,
    buckets: Sequence[B],
    members: Sequence[M],
    step: int = 1,
) -> dict[int, dict[float, B]]:
    """
    Percentage of all members -> bucket for each virtual-node count.

    Same key-collapsing rule as distribution_count.
    """
    sweep = distribution(
        start, end, bucket_converter, member_converter, hash_function,
        buckets, members, step,
    )
    total = len(members)
    return {
        virtual_nodes: dict(sorted(
            ((_percentage(len(owned), total), bucket) for bucket, owned in mapping.items()),
            key=_first,
        ))
        for virtual_nodes, mapping in sweep.items()
    }


def distribution_summary(
    start: int,
    end: int,
    bucket_converter: BytesConverter[B],
    member_converter: BytesConverter[M],
    hash_function: HashFunction,
    buckets: Sequence[B],
    members: Sequence[M],
    step: int = 1,
) -> dict[int, DistributionStats]:
    """Fairness statistics for each virtual-node count."""
    sweep = distribution(
        start, end, bucket_converter, member_converter, hash_function,
        buckets, members, step,
    )
    return {
        virtual_nodes: summarize(virtual_nodes, mapping, len(members))
        for virtual_nodes, mapping in sweep.items()
    }


def summarize(virtual_nodes: int, mapping: dict[B, list[M]], total_members: int) -> DistributionStats:
    """Reduce one bucket -> members mapping to fairness statistics."""
    counts = {bucket: len(owned) for bucket, owned in mapping.items()}
    values = np.fromiter(counts.values(), dtype=np.float64, count=len(counts))

    if values.size == 0:
        return DistributionStats(virtual_nodes, counts, 0.0, 0.0, 0.0, 0.0, 1.0)

    if total_members:
        percentages = values / total_members * 100.0
    else:
        percentages = np.zeros_like(values)

    if values.size < 2:
        imbalance = 1.0
    elif values.min() == 0:
        imbalance = float("inf") if values.max() > 0 else 1.0
    else:
        imbalance = float(values.max() / values.min())

    return DistributionStats(
        virtual_nodes=virtual_nodes,
        counts=counts,
        max_percentage=float(percentages.max()),
        min_percentage=float(percentages.min()),
        mean_percentage=float(percentages.mean()),
        std_percentage=float(percentages.std()),
        imbalance=imbalance,
    )


def best_virtual_nodes(summary: dict[int, DistributionStats]) -> Optional[int]:
    """Virtual-node count with the lowest percentage spread (smallest on ties)."""
    if not summary:
        return None
    return min(summary, key=lambda n: (summary[n].std_percentage, n))


def _first(pair: tuple) -> float:
    return pair[0]


def _percentage(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return count / total * 100.0


def _check_sweep(
    start: int,
    end: int,
    step: int,
    buckets: Optional[Sequence],
    members: Optional[Sequence],
) -> None:
    if start is None:
        raise InvalidArgumentError.null_argument("start")
    if end is None:
        raise InvalidArgumentError.null_argument("end")
    if step is None:
        raise InvalidArgumentError.null_argument("step")
    if step < 1:
        raise InvalidArgumentError.out_of_range("step", step, 1)
    if buckets is None:
        raise InvalidArgumentError.null_argument("buckets")
    if members is None:
        raise InvalidArgumentError.null_argument("members")


def _check_collaborators(
    bucket_converter: BytesConverter,
    member_converter: BytesConverter,
    hash_function: HashFunction,
) -> None:
    for name, value in (
        ("bucket_converter", bucket_converter),
        ("member_converter", member_converter),
        ("hash_function", hash_function),
    ):
        if value is None:
            raise InvalidArgumentError.null_argument(name)
        if not callable(value):
            raise InvalidArgumentError.not_callable(name, value)
