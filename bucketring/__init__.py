"""
Bucket Ring: Consistent Hashing with Virtual Nodes

Assigns an open set of members (keys, tasks, clients) to an open set of
buckets (nodes, shards) so that adding or removing a bucket remaps only
the members in the affected wedges of the ring.

- Virtual nodes per bucket for fair distribution
- Clockwise range queries with wraparound
- Per-bucket reader/writer locks: listing a bucket's members is atomic
  with respect to removing that bucket
- Distribution analyzer for choosing a virtual-node count

In-memory and single-process; the embedding application owns cluster
membership.
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from bucketring.core.types import (
    Result,
    Ok,
    Err,
    Position,
    BytesConverter,
    HashFunction,
)
from bucketring.core.errors import (
    ErrorCode,
    BucketRingError,
    InvalidArgumentError,
    RemovalCancelledError,
    ConfigurationError,
)
from bucketring.core.config import BucketRingConfig, RingConfig, AnalyzerConfig

# Hashing exports
from bucketring.hashing import (
    sha1_hash,
    md5_hash,
    sha256_hash,
    identity_hash,
    get_hash_function,
    str_to_bytes,
    int_to_bytes,
    bytes_to_bytes,
    uuid_to_bytes,
)

# Ring exports
from bucketring.ring import ConsistentHasher, ReadWriteLock

# Analysis exports
from bucketring.analysis import (
    DistributionStats,
    distribution,
    distribution_count,
    distribution_percentage,
    distribution_summary,
    best_virtual_nodes,
)

__all__ = [
    # Version
    "__version__",
    # Result monad
    "Result",
    "Ok",
    "Err",
    # Types
    "Position",
    "BytesConverter",
    "HashFunction",
    # Errors
    "ErrorCode",
    "BucketRingError",
    "InvalidArgumentError",
    "RemovalCancelledError",
    "ConfigurationError",
    # Config
    "BucketRingConfig",
    "RingConfig",
    "AnalyzerConfig",
    # Hashing
    "sha1_hash",
    "md5_hash",
    "sha256_hash",
    "identity_hash",
    "get_hash_function",
    "str_to_bytes",
    "int_to_bytes",
    "bytes_to_bytes",
    "uuid_to_bytes",
    # Ring
    "ConsistentHasher",
    "ReadWriteLock",
    # Analysis
    "DistributionStats",
    "distribution",
    "distribution_count",
    "distribution_percentage",
    "distribution_summary",
    "best_virtual_nodes",
]
