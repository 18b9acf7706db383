"""Structured logging configuration for the CRM credential proxy."""

import copy
import logging
import os
import sys
from datetime import datetime, timezone

from crm_proxy.utils.security import SanitizingFormatter

_RESERVED_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "timestamp",
    ]
)


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured logging with sanitization."""

    def __init__(self) -> None:
        super().__init__()
        self._sanitizer = SanitizingFormatter("%(message)s")

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured data."""
        sanitized = copy.copy(record)
        if record.args:
            sanitized.args = copy.copy(record.args)
        # Apply sanitization side effects.
        self._sanitizer.format(sanitized)

        sanitized.timestamp = datetime.now(timezone.utc).isoformat()

        structured_data = {
            "timestamp": sanitized.timestamp,
            "level": sanitized.levelname,
            "logger": sanitized.name,
            "message": sanitized.getMessage(),
        }

        if sanitized.exc_info:
            structured_data["exception"] = self._sanitizer.redact(
                self.formatException(sanitized.exc_info)
            )

        for key, value in sanitized.__dict__.items():
            if key not in _RESERVED_ATTRS:
                structured_data[key] = value

        return f"{structured_data}"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Set up structured, sanitized logging on stderr.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        The ``crm_proxy`` package logger
    """
    logger = logging.getLogger("crm_proxy")
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level.upper()))
    console_handler.setFormatter(StructuredFormatter())
    logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(f"crm_proxy.{name}")


# Default logger setup - use LOG_LEVEL env var or default to INFO
default_logger = setup_logging(level=os.getenv("LOG_LEVEL", "INFO"))
