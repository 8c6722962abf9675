"""Structured JSON Logger for Hoarder Social Relay.

Every log line is a single JSON object so webhook traffic can be traced
per bookmark: the event logger stamps bookmark_id and operation on each
record emitted while an event is being handled.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON objects.

    Output format:
        {
            "ts": "2026-01-23T10:30:00.123456+00:00",
            "level": "INFO",
            "msg": "Published to bluesky",
            "logger": "src.core.dispatcher",
            "bookmark_id": "abc123",
            "operation": "ai tagged"
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="microseconds"),
            "level": record.levelname,
            "msg": record.getMessage(),
        }

        if record.name and record.name != "root":
            log_entry["logger"] = record.name

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class EventLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds the webhook event context to every message.

    Usage:
        log = get_event_logger(__name__, "abc123", "crawled")
        log.info("Fetched bookmark")  # carries bookmark_id and operation
    """

    def __init__(self, logger: logging.Logger, bookmark_id: str, operation: str | None = None):
        context: dict[str, Any] = {"bookmark_id": bookmark_id}
        if operation is not None:
            context["operation"] = operation
        super().__init__(logger, context)

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(level: str = "INFO", stream: Any = None) -> None:
    """Configure the root logger with JSON formatting.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        stream: Output stream (defaults to sys.stderr).
    """
    if stream is None:
        stream = sys.stderr

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    # httpx logs every request at INFO; keep it quiet unless debugging
    if root_logger.level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a logger instance (root logger when name is None)."""
    return logging.getLogger(name)


def get_event_logger(
    name: str, bookmark_id: str, operation: str | None = None
) -> EventLoggerAdapter:
    """Get a logger adapter bound to one webhook event.

    Args:
        name: Logger name (typically __name__).
        bookmark_id: The bookmark the event refers to.
        operation: The webhook operation, if known.

    Returns:
        An EventLoggerAdapter that includes the event context.

    Example:
        log = get_event_logger(__name__, "abc123", "ai tagged")
        log.info("Publishing")
        # {"ts": "...", "level": "INFO", "msg": "Publishing",
        #  "bookmark_id": "abc123", "operation": "ai tagged"}
    """
    return EventLoggerAdapter(get_logger(name), bookmark_id, operation)


def reset_logging() -> None:
    """Remove all handlers from the root logger.

    Useful for testing to ensure clean state between tests.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
