"""
Keyspace Hash Adapters

Stock implementations of the HashFunction protocol. The ring only
compares digests, so any deterministic bytes -> bytes function works;
digest length fixes the keyspace width.

SHA-1 is the default (20-byte positions). Security is not required for
placement, only good dispersion.
"""

from __future__ import annotations

import hashlib
from typing import Final

from bucketring.core.types import HashFunction
from bucketring.core.errors import InvalidArgumentError


def sha1_hash(data: bytes) -> bytes:
    """SHA-1 digest (20 bytes)."""
    if data is None:
        raise InvalidArgumentError.null_argument("data")
    return hashlib.sha1(data, usedforsecurity=False).digest()


def md5_hash(data: bytes) -> bytes:
    """MD5 digest (16 bytes)."""
    if data is None:
        raise InvalidArgumentError.null_argument("data")
    return hashlib.md5(data, usedforsecurity=False).digest()


def sha256_hash(data: bytes) -> bytes:
    """SHA-256 digest (32 bytes)."""
    if data is None:
        raise InvalidArgumentError.null_argument("data")
    return hashlib.sha256(data).digest()


def identity_hash(data: bytes) -> bytes:
    """
    Return the input unchanged.

    Positions then follow the converters' byte order directly, which
    makes ownership predictable in tests and simulations.
    """
    if data is None:
        raise InvalidArgumentError.null_argument("data")
    return bytes(data)


HASH_FUNCTIONS: Final[dict[str, HashFunction]] = {
    "sha1": sha1_hash,
    "md5": md5_hash,
    "sha256": sha256_hash,
    "identity": identity_hash,
}

DEFAULT_HASH: Final[HashFunction] = sha1_hash


def get_hash_function(name: str) -> HashFunction:
    """Look up a stock hash adapter by name (case-insensitive)."""
    if name is None:
        raise InvalidArgumentError.null_argument("name")
    try:
        return HASH_FUNCTIONS[name.lower()]
    except KeyError:
        raise InvalidArgumentError.unknown_hash(name, sorted(HASH_FUNCTIONS)) from None
