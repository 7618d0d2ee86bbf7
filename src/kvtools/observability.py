"""Structured logging and metric hooks for the store.

Every kvtools logger sits under the ``kvtools`` logger, which
:func:`configure_logging` points at stdout as one JSON object per line.
Commands and batches report their duration and outcome to the registered
metric callbacks.
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

PACKAGE_LOGGER = "kvtools"


class LogLevel(str, Enum):
    """Log levels matching Python's logging module."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StructuredFormatter(logging.Formatter):
    """Renders a record with its context, error and duration as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "logger": record.name,
        }
        context = getattr(record, "context", None)
        if context:
            data["context"] = context
        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            data["error"] = {"type": type(error).__name__, "message": str(error)}
        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            data["duration_ms"] = duration_ms
        return json.dumps(data, default=str)


class StructuredLogger:
    """Logger that attaches a context dict and a duration to its records.

    Example:
        logger = get_logger(__name__)
        logger.debug("Command executed", context={"command": "GET"}, duration_ms=0.4)
        logger.warning("Transaction failed", context={"commands": 3}, error=e)
    """

    def __init__(self, name: str) -> None:
        self.logger = logging.getLogger(name)

    def debug(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(message, extra=_extra(context, duration_ms))

    def warning(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: BaseException | None = None,
    ) -> None:
        exc_info = (type(error), error, error.__traceback__) if error else None
        self.logger.warning(message, exc_info=exc_info, extra=_extra(context, None))


def _extra(context: dict[str, Any] | None, duration_ms: float | None) -> dict[str, Any]:
    extra: dict[str, Any] = {}
    if context:
        extra["context"] = context
    if duration_ms is not None:
        extra["duration_ms"] = duration_ms
    return extra


class Timer:
    """Context manager measuring wall time in milliseconds."""

    def __init__(self) -> None:
        self.start_time: float = 0
        self.end_time: float = 0

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time) * 1000

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end_time = time.perf_counter()


# Called as callback(name, value, labels)
MetricCallback = Callable[[str, float, dict[str, Any]], None]

_metric_callbacks: list[MetricCallback] = []


def register_metric_callback(callback: MetricCallback) -> None:
    """Receive every counter and timer the store emits."""
    _metric_callbacks.append(callback)


def unregister_metric_callback(callback: MetricCallback) -> None:
    """Remove a previously registered metric callback. No-op if unknown."""
    if callback in _metric_callbacks:
        _metric_callbacks.remove(callback)


def _emit(name: str, value: float, labels: dict[str, Any] | None) -> None:
    labels = labels or {}
    for callback in list(_metric_callbacks):
        try:
            callback(name, value, labels)
        except Exception:
            logging.getLogger(__name__).debug("Metric callback failed", exc_info=True)


def emit_counter(name: str, labels: dict[str, Any] | None = None) -> None:
    """Emit a counter increment of 1."""
    _emit(name, 1.0, labels)


def emit_timer(name: str, duration_ms: float, labels: dict[str, Any] | None = None) -> None:
    _emit(name, duration_ms, labels)


def configure_logging(level: LogLevel = LogLevel.INFO, format: str = "json") -> None:
    """Send kvtools log records to stdout.

    Args:
        level: Minimum log level
        format: "json" for StructuredFormatter output, "text" for plain lines
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level.value)
    package_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
    package_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)
