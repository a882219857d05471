"""
Logging helpers for timeline components.

Components log through ``logging.getLogger(__name__)``. Hosts that ship
logs to a collector can install ``StructuredJsonFormatter`` with
``configure_structured_logging``; the controller stamps its records with
``TimelineLoggerAdapter`` so lines from several timelines can be told apart.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import IO, Any

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _jsonable(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class StructuredJsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Keys: ``timestamp`` (record creation time, ISO 8601 UTC), ``level``,
    ``logger``, ``message``, ``exception`` when present, then every extra
    field attached to the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, _jsonable(value))
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        return json.dumps(entry, default=str)


def configure_structured_logging(
    level: int = logging.INFO,
    logger_name: str | None = "journal_timeline",
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Route a logger's output through ``StructuredJsonFormatter``.

    Handlers already attached to the logger are replaced.

    Args:
        level: Threshold for the logger
        logger_name: Logger to configure; None for the root logger
        stream: Destination (stdout by default)

    Returns:
        The configured logger
    """
    target = logging.getLogger(logger_name)
    for existing in list(target.handlers):
        target.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    target.addHandler(handler)
    target.setLevel(level)
    return target


def get_timeline_logger(name: str) -> logging.Logger:
    """Logger named ``journal_timeline.<name>``."""
    return logging.getLogger(f"journal_timeline.{name}")


class TimelineLoggerAdapter(logging.LoggerAdapter):
    """
    Adds the owning timeline's context to every record.

    The context dict is live: the controller updates ``zoom`` in place when
    the user switches granularity. Per-call ``extra`` keys are kept, with
    the adapter's context taking precedence on collisions.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs
