"""
Structured Logging
==================

JSON log records for the ownership core.

Provides:
- One JSON object per record, with structured ``extra`` fields kept as keys
- ``correlation_id`` carrying the incident ID, so an incident can be followed
  from assignment through every escalation
- Timing helper for sweeps and other batch work

Usage:
    from incident_ownership.shared.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Assignment created", extra={"assignment_id": "..."})
"""

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from pythonjsonlogger import jsonlogger

REDACTED = "***REDACTED***"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter stamping every record with:
    - an ISO-8601 UTC ``timestamp``
    - ``correlation_id`` when the record carries one
    - the deployment ``environment``

    Values under keys mentioning ``email`` are redacted.
    """

    def __init__(self, *args: Any, environment: str = "unknown", **kwargs: Any):
        self._environment = environment
        super().__init__(*args, **kwargs)

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record.setdefault("timestamp", datetime.now(timezone.utc).isoformat())

        correlation_id = getattr(record, "correlation_id", None) or message_dict.get("correlation_id")
        if correlation_id:
            log_record["correlation_id"] = correlation_id

        log_record["environment"] = getattr(record, "environment", self._environment)

        for key, value in list(log_record.items()):
            if isinstance(value, str) and "email" in key.lower():
                log_record[key] = REDACTED


def setup_logging(level: str = "INFO", environment: str = "development") -> None:
    """
    Route all records to stdout as JSON.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.

    Args:
        level: Root level name, case-insensitive
        environment: Stamped on every record
    """
    numeric_level = getattr(logging, level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(CustomJsonFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        environment=environment,
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # APScheduler logs every job run at INFO
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; pass ``__name__``."""
    return logging.getLogger(name)


class CorrelationAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges its context into each call's ``extra``."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_context_logger(
    name: str, correlation_id: str | None = None
) -> logging.Logger | CorrelationAdapter:
    """
    Logger whose records all carry ``correlation_id``.

    The ownership engines pass the incident ID here.
    """
    logger = get_logger(name)
    if correlation_id:
        return CorrelationAdapter(logger, {"correlation_id": correlation_id})
    return logger


@contextmanager
def log_latency(logger: logging.Logger, operation: str, **extra_context: Any):
    """
    Log how long the wrapped block took, in milliseconds.

    Usage:
        with log_latency(logger, "escalation_sweep"):
            monitor.run_once()
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.info(
            f"{operation} completed",
            extra={
                "operation": operation,
                "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                **extra_context,
            },
        )
