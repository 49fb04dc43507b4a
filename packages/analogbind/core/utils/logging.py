"""Logging configuration utilities for analogbind.

Provides centralized logging configuration with:
- Flexible output (stdout or file)
- Customizable format strings
- Structured logging support (JSON format)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

_STANDARD_ATTRS = frozenset(
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
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
    }
)


class StructuredJSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per log record.

    Format:
    {
        "level": "INFO",
        "message": "...",
        "timestamp": "2026-01-29T12:00:00.000000+00:00",
        "context": {
            "logger_name": "...",
            "module": "...",
            "function": "...",
            "line": 42,
            ...extra fields...
        }
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON.

        Args:
            record: LogRecord to format

        Returns:
            JSON-formatted log string
        """
        context: dict[str, Any] = {
            "logger_name": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            context["error_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            context["error_message"] = str(record.exc_info[1]) if record.exc_info[1] else None
            context["stack_trace"] = record.exc_text or self.formatException(record.exc_info)

        # Fields passed through `extra=` land on the record itself
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                context[key] = value

        log_entry = {
            "level": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "context": context,
        }

        return json.dumps(log_entry, default=str)


NOISY_LOGGERS: dict[str, int] = {"asyncio": logging.WARNING}


def _supress_noisy_loggers() -> None:
    """Supress noisy loggers."""
    for name, level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    filename: str | None = None,
    structured: bool = False,
) -> None:
    """Configure application-wide logging.

    Can be called multiple times to reconfigure logging (uses force=True).

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Case-insensitive.
        format_string: Custom format string for log messages.
                      Ignored if structured=True.
        filename: Path to log file. If None, logs to stdout.
        structured: If True, use structured JSON logging format.

    Examples:
        >>> configure_logging(level="INFO")
        >>> configure_logging(level="DEBUG", structured=True, filename="analogbind.jsonl")
    """
    handler: logging.Handler
    if filename:
        handler = logging.FileHandler(filename)
    else:
        handler = logging.StreamHandler(sys.stdout)

    formatter: logging.Formatter
    if structured:
        formatter = StructuredJSONFormatter()
    else:
        if format_string is None:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )

    _supress_noisy_loggers()


def get_logger(name: str, **kwargs: Any) -> logging.Logger | logging.LoggerAdapter:
    """Get a logger, wrapped in a LoggerAdapter when context kwargs are given.

    Args:
        name: Logger name (usually __name__ from the calling module)
        **kwargs: Context to attach to every message (e.g., profile_id)

    Returns:
        Logger instance, or LoggerAdapter if context provided
    """
    base = logging.getLogger(name)
    if kwargs:
        return logging.LoggerAdapter(base, kwargs)
    return base
