"""
Bytes Converters for bucket and member identities.

Each converter is a plain function satisfying the BytesConverter
protocol. Integers use the 4-byte big-endian two's-complement layout,
so positive values sort in numeric order under the identity hash.
"""

from __future__ import annotations

import struct
from uuid import UUID

from bucketring.core.errors import InvalidArgumentError

_INT32 = struct.Struct(">i")


def str_to_bytes(value: str) -> bytes:
    """UTF-8 encode a string identity."""
    if value is None:
        raise InvalidArgumentError.null_argument("value")
    return value.encode("utf-8")


def int_to_bytes(value: int) -> bytes:
    """
    Encode an int32 identity as 4 big-endian bytes.

    Raises:
        struct.error: value does not fit in a signed 32-bit integer
    """
    if value is None:
        raise InvalidArgumentError.null_argument("value")
    return _INT32.pack(value)


def bytes_to_bytes(value: bytes) -> bytes:
    if value is None:
        raise InvalidArgumentError.null_argument("value")
    return bytes(value)


def uuid_to_bytes(value: UUID) -> bytes:
    """16-byte big-endian UUID encoding."""
    if value is None:
        raise InvalidArgumentError.null_argument("value")
    return value.bytes
