"""
Hashing module: stock hash functions and identity-to-bytes converters.
"""

from bucketring.hashing.functions import (
    sha1_hash,
    md5_hash,
    sha256_hash,
    identity_hash,
    get_hash_function,
    HASH_FUNCTIONS,
    DEFAULT_HASH,
)
from bucketring.hashing.converters import (
    str_to_bytes,
    int_to_bytes,
    bytes_to_bytes,
    uuid_to_bytes,
)

__all__ = [
    "sha1_hash",
    "md5_hash",
    "sha256_hash",
    "identity_hash",
    "get_hash_function",
    "HASH_FUNCTIONS",
    "DEFAULT_HASH",
    "str_to_bytes",
    "int_to_bytes",
    "bytes_to_bytes",
    "uuid_to_bytes",
]
