"""
Configuration Management for the Bucket Ring

Provides validated configuration with sensible defaults.
Supports environment variable overrides.

Design:
- Immutable after validation
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from bucketring.core.types import Result, Ok, Err
from bucketring.core.errors import ConfigurationError
from bucketring.core import constants as C


_TRUTHY = frozenset({"1", "true", "yes", "on"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class RingConfig:
    """Ring placement configuration."""

    virtual_nodes: int = C.VIRTUAL_NODES
    hash_name: str = C.DEFAULT_HASH


@dataclass(frozen=True)
class AnalyzerConfig:
    """Distribution analyzer sweep configuration."""

    start: int = C.ANALYZER_START
    end: int = C.ANALYZER_END
    step: int = C.ANALYZER_STEP

    @property
    def virtual_node_counts(self) -> range:
        """Virtual-node counts visited by a sweep (end inclusive)."""
        return range(self.start, self.end + 1, self.step)


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration."""

    log_level: str = "INFO"
    log_json: bool = True


@dataclass(frozen=True)
class BucketRingConfig:
    """Root configuration."""

    ring: RingConfig = field(default_factory=RingConfig)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> Result[BucketRingConfig, str]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with BUCKETRING_.
        Example: BUCKETRING_VIRTUAL_NODES, BUCKETRING_ANALYZER_END
        """
        try:
            ring = RingConfig(
                virtual_nodes=int(os.getenv("BUCKETRING_VIRTUAL_NODES", str(C.VIRTUAL_NODES))),
                hash_name=os.getenv("BUCKETRING_HASH", C.DEFAULT_HASH).lower(),
            )

            analyzer = AnalyzerConfig(
                start=int(os.getenv("BUCKETRING_ANALYZER_START", str(C.ANALYZER_START))),
                end=int(os.getenv("BUCKETRING_ANALYZER_END", str(C.ANALYZER_END))),
                step=int(os.getenv("BUCKETRING_ANALYZER_STEP", str(C.ANALYZER_STEP))),
            )

            observability = ObservabilityConfig(
                log_level=os.getenv("BUCKETRING_LOG_LEVEL", "INFO").upper(),
                log_json=os.getenv("BUCKETRING_LOG_JSON", "true").lower() in _TRUTHY,
            )

            return Ok(cls(ring=ring, analyzer=analyzer, observability=observability))
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        # Imported here: hashing depends on core, not the other way round
        from bucketring.hashing.functions import HASH_FUNCTIONS

        if self.ring.virtual_nodes < C.MIN_VIRTUAL_NODES:
            return Err(f"virtual_nodes must be >= {C.MIN_VIRTUAL_NODES}")
        if self.ring.hash_name not in HASH_FUNCTIONS:
            return Err(f"Unknown hash function '{self.ring.hash_name}'")
        if self.analyzer.start < C.MIN_VIRTUAL_NODES:
            return Err(f"Analyzer start must be >= {C.MIN_VIRTUAL_NODES}")
        if self.analyzer.end < self.analyzer.start:
            return Err("Analyzer end cannot be below start")
        if self.analyzer.step < 1:
            return Err("Analyzer step must be >= 1")
        if self.observability.log_level not in _LOG_LEVELS:
            return Err(f"Unknown log level '{self.observability.log_level}'")
        return Ok(None)

    def require_valid(self) -> BucketRingConfig:
        """Return self, raising ConfigurationError if validation fails."""
        result = self.validate()
        if result.is_err():
            raise ConfigurationError.invalid(result.error)
        return self
