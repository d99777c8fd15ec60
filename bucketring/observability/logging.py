"""
Structured Logging for ring operations.

Every event carries keyword fields (bucket, virtual_nodes, timeout_s...)
rendered as one JSON object per line. Ring calls run on the caller's
threads, so the thread name is always included; fields bound with
StructuredLogger.context() follow the calling thread or task.

The library never installs handlers on import. Embedding applications
route the "bucketring.*" loggers as they like, or call setup_logging().
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Iterator, Optional, TextIO


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_name(cls, name: str) -> LogLevel:
        return cls[name.upper()]


# Fields bound for the current thread/task by StructuredLogger.context()
_bound_fields: ContextVar[dict[str, Any]] = ContextVar("bucketring_log_fields", default={})

# Attributes every logging.LogRecord has; anything else came in via extra=
_STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record: fixed envelope plus keyword fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "@timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        payload.update(_bound_fields.get())
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


class StructuredLogger:
    """
    Thin wrapper over logging.Logger taking keyword fields.

    Usage:
        logger = StructuredLogger("bucketring.ring")
        logger.debug("bucket added", bucket="node-1", virtual_nodes=700)

        with logger.context(ring="orders"):
            ring.remove_bucket("node-1")
    """

    __slots__ = ("_logger", "_fields")

    def __init__(self, name: str, level: Optional[LogLevel] = None) -> None:
        self._logger = logging.getLogger(name)
        if level is not None:
            self._logger.setLevel(level)
        self._fields: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.ERROR, message, fields)

    def _emit(self, level: LogLevel, message: str, fields: dict[str, Any]) -> None:
        # Ring hot paths log at DEBUG; skip building extras when filtered
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, extra={**self._fields, **fields})

    def with_extra(self, **fields: Any) -> StructuredLogger:
        """Logger on the same channel that adds fields to every event."""
        child = StructuredLogger(self._logger.name)
        child._fields = {**self._fields, **fields}
        return child

    @staticmethod
    @contextmanager
    def context(**fields: Any) -> Iterator[None]:
        """Bind fields to every event logged in this thread/task until exit."""
        token = _bound_fields.set({**_bound_fields.get(), **fields})
        try:
            yield
        finally:
            _bound_fields.reset(token)


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Replace the root logger's handlers with a single stream handler.

    Args:
        level: Minimum log level
        json_output: JSON lines if True, plain text otherwise
        stream: Output stream (default: stderr)
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_TEXT_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)
