"""
Observability module: structured logging.
"""

from bucketring.observability.logging import (
    StructuredLogger,
    JsonFormatter,
    LogLevel,
    setup_logging,
)

__all__ = [
    "StructuredLogger",
    "JsonFormatter",
    "LogLevel",
    "setup_logging",
]
