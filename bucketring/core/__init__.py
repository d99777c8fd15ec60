"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundational abstractions for the ring:
- Result/Either monads for configuration loading
- Collaborator protocols (hash function, bytes converter)
- Error hierarchy with factory constructors
- Configuration management with validation
"""

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
from bucketring.core.config import (
    BucketRingConfig,
    RingConfig,
    AnalyzerConfig,
    ObservabilityConfig,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Position",
    "BytesConverter",
    "HashFunction",
    "ErrorCode",
    "BucketRingError",
    "InvalidArgumentError",
    "RemovalCancelledError",
    "ConfigurationError",
    "BucketRingConfig",
    "RingConfig",
    "AnalyzerConfig",
    "ObservabilityConfig",
]
