"""
Structured Logging Tests

Tests:
    - JSON output with keyword and context fields
    - Level filtering
    - Ring operations emit structured events
    - The distribution sweep tags its events with the sweep bounds
"""

import io
import json
import logging
import sys

import pytest

from bucketring.analysis.distribution import distribution
from bucketring.hashing.converters import int_to_bytes
from bucketring.hashing.functions import identity_hash
from bucketring.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    setup_logging,
)
from bucketring.tests.conftest import make_int_ring


@pytest.fixture
def json_stream(restore_root_logger):
    """Root logger writing JSON into a buffer."""
    stream = io.StringIO()
    setup_logging(LogLevel.DEBUG, json_output=True, stream=stream)
    return stream


def _records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestStructuredLogger:
    """Tests for StructuredLogger and JsonFormatter."""

    def test_json_fields(self, json_stream):
        StructuredLogger("bucketring.test").info("hello", bucket="node-1", count=3)

        (record,) = _records(json_stream)
        assert record["message"] == "hello"
        assert record["level"] == "INFO"
        assert record["logger"] == "bucketring.test"
        assert record["bucket"] == "node-1"
        assert record["count"] == 3
        assert "@timestamp" in record
        assert "thread" in record

    def test_context_fields(self, json_stream):
        logger = StructuredLogger("bucketring.test")
        with logger.context(ring="orders"):
            logger.warning("inside")
        logger.warning("outside")

        inside, outside = _records(json_stream)
        assert inside["ring"] == "orders"
        assert "ring" not in outside

    def test_with_extra(self, json_stream):
        logger = StructuredLogger("bucketring.test").with_extra(component="analyzer")
        logger.error("failed")

        (record,) = _records(json_stream)
        assert record["component"] == "analyzer"
        assert logger.name == "bucketring.test"

    def test_level_filtering(self, json_stream):
        logger = StructuredLogger("bucketring.test.quiet", level=LogLevel.WARNING)
        logger.debug("hidden")
        logger.info("hidden")
        logger.warning("shown")

        assert [r["message"] for r in _records(json_stream)] == ["shown"]

    def test_exception_included(self):
        formatter = JsonFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord(
                "bucketring.test", logging.ERROR, __file__, 1, "oops", None, sys.exc_info(),
            )

        data = json.loads(formatter.format(record))
        assert "ValueError: boom" in data["exception"]

    def test_level_from_name(self):
        assert LogLevel.from_name("warning") is LogLevel.WARNING


class TestRingEvents:
    """Ring operations log through bucketring.ring."""

    def test_add_and_remove_logged(self, json_stream):
        ring = make_int_ring()
        ring.add_bucket(5)
        ring.add_bucket(5)
        ring.remove_bucket(5)

        events = [(r["logger"], r["message"]) for r in _records(json_stream)]
        assert events == [
            ("bucketring.ring", "bucket added"),
            ("bucketring.ring", "bucket removed"),
        ]

    def test_abandoned_removal_warns(self, json_stream):
        ring = make_int_ring()
        ring.add_bucket(5)
        info = ring._registry.get(5)

        with info.lock.read_locked():
            assert ring.try_remove_bucket(5, timeout=0.01) is False

        (record,) = [r for r in _records(json_stream) if r["level"] == "WARNING"]
        assert record["message"] == "bucket removal abandoned"
        assert record["reason"] == "timeout"
        assert record["bucket"] == "5"


class TestAnalyzerEvents:
    """The distribution sweep logs through bucketring.analysis."""

    def test_sweep_fields_on_every_event(self, json_stream):
        distribution(1, 2, int_to_bytes, int_to_bytes, identity_hash, [5, 10], [1, 2, 3])

        records = [r for r in _records(json_stream) if r["logger"] == "bucketring.analysis"]
        assert [r["message"] for r in records] == [
            "ring measured",
            "ring measured",
            "distribution sweep complete",
        ]
        assert all((r["start"], r["end"], r["step"]) == (1, 2, 1) for r in records)
        assert [r["virtual_nodes"] for r in records[:2]] == [1, 2]
        assert records[-1]["buckets"] == 2
        assert records[-1]["members"] == 3
