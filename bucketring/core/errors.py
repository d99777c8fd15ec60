"""
Errors raised by the bucket ring.

Only misuse and caller-requested aborts raise. Removing an absent bucket
or member succeeds silently, and a bounded removal that runs out of time
returns False.

All errors share BucketRingError: a numeric ErrorCode, a message, a
correlation id and timestamp for matching against logs, and a context
dict suitable for StructuredLogger keyword fields.

Usage:
    try:
        ring.remove_bucket(node, cancel=shutdown_event)
    except RemovalCancelledError as e:
        log.warning("removal abandoned", **e.context)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


# =============================================================================
# ERROR CODES
# =============================================================================
class ErrorCode(Enum):
    """
    Stable numeric codes, by subsystem.

    - 1xxx: ring operations
    - 9xxx: configuration
    """

    RING_INVALID_ARGUMENT = 1001
    RING_REMOVAL_CANCELLED = 1002

    CONFIG_INVALID = 9001


# =============================================================================
# BASE
# =============================================================================
@dataclass
class BucketRingError(Exception):
    """Root of the bucketring exception hierarchy."""

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp_nanos: int = field(default_factory=time.time_ns)
    cause: Optional[Exception] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def with_context(self, **fields: Any) -> BucketRingError:
        """Copy of this error (same id and type) with extra context fields."""
        return replace(self, context={**self.context, **fields})

    def to_dict(self) -> dict[str, Any]:
        """Log-friendly view."""
        data = {
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "error_id": self.error_id,
            "timestamp_nanos": self.timestamp_nanos,
            "context": self.context,
        }
        if self.cause is not None:
            data["cause"] = repr(self.cause)
        return data

    def __str__(self) -> str:
        return f"{self.message} ({self.code.name}, id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.name}, {self.message!r}, error_id={self.error_id!r})"


# =============================================================================
# RING ERRORS
# =============================================================================
@dataclass
class InvalidArgumentError(BucketRingError, ValueError):
    """
    A public ring operation received an unusable argument.

    Raised before any ring state is touched.
    """

    @classmethod
    def null_argument(cls, name: str) -> InvalidArgumentError:
        """Required argument was None."""
        return cls(
            code=ErrorCode.RING_INVALID_ARGUMENT,
            message=f"{name} can not be None",
            context={"argument": name},
        )

    @classmethod
    def negative_timeout(cls, timeout: float) -> InvalidArgumentError:
        """Bounded wait was given a negative timeout."""
        return cls(
            code=ErrorCode.RING_INVALID_ARGUMENT,
            message=f"timeout must be >= 0, got {timeout}",
            context={"argument": "timeout", "value": timeout},
        )

    @classmethod
    def out_of_range(cls, name: str, value: Any, minimum: Any) -> InvalidArgumentError:
        """Numeric argument below its allowed minimum."""
        return cls(
            code=ErrorCode.RING_INVALID_ARGUMENT,
            message=f"{name} must be >= {minimum}, got {value}",
            context={"argument": name, "value": value, "minimum": minimum},
        )

    @classmethod
    def not_bytes(cls, source: str, value: Any) -> InvalidArgumentError:
        """Converter or hash function produced something other than bytes."""
        return cls(
            code=ErrorCode.RING_INVALID_ARGUMENT,
            message=f"{source} must return bytes, got {type(value).__name__}",
            context={"source": source, "type": type(value).__name__},
        )

    @classmethod
    def not_callable(cls, name: str, value: Any) -> InvalidArgumentError:
        """Collaborator is not callable."""
        return cls(
            code=ErrorCode.RING_INVALID_ARGUMENT,
            message=f"{name} must be callable, got {type(value).__name__}",
            context={"argument": name},
        )

    @classmethod
    def unknown_hash(cls, name: str, known: list[str]) -> InvalidArgumentError:
        """No hash adapter registered under this name."""
        return cls(
            code=ErrorCode.RING_INVALID_ARGUMENT,
            message=f"Unknown hash function '{name}'",
            context={"hash": name, "known": known},
        )


@dataclass
class RemovalCancelledError(BucketRingError):
    """
    A blocking bucket removal was abandoned before it took the write lock.

    The ring is left exactly as it was before the call.
    """

    @classmethod
    def cancelled(cls, bucket: Any) -> RemovalCancelledError:
        """Caller cancelled the wait for the bucket's write lock."""
        return cls(
            code=ErrorCode.RING_REMOVAL_CANCELLED,
            message=f"Removal of bucket {bucket!r} cancelled while waiting for readers",
            context={"bucket": repr(bucket)},
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================
@dataclass
class ConfigurationError(BucketRingError):
    """Configuration failed validation."""

    @classmethod
    def invalid(cls, reason: str) -> ConfigurationError:
        return cls(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Invalid configuration: {reason}",
            context={"reason": reason},
        )
