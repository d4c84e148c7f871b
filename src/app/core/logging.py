"""
Planetary Hours Structured JSON Logging

Provides structured logging with JSON output for production environments.
Device coordinates are treated as personal data and truncated in log text.
"""

import json
import logging
import re
import sys

from typing import Any

_COORD_PARAM = re.compile(r"(?i)\b(lat|lng|lon|latitude|longitude)=(-?\d+\.\d{2})\d*")
_AUTH_HEADER = re.compile(r"(?i)(authorization:\s*bearer\s+)[^\s\"]+")

# Attributes every LogRecord carries; anything else came in via extra={...}
_RESERVED_ATTRS = frozenset(
    {
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
    }
)


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging output"""

    def _redact(self, text: str) -> str:
        """Truncate coordinate query values to 2 decimals and mask bearer tokens.

        - lat=51.507412 -> lat=51.50
        - Authorization: Bearer ... -> Authorization: Bearer [REDACTED]
        """
        text = _COORD_PARAM.sub(r"\1=\2", text)
        return _AUTH_HEADER.sub(r"\1[REDACTED]", text)

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON

        Args:
            record: Python logging record

        Returns:
            JSON-formatted log string
        """
        base = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": self._redact(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                base[key] = value

        return json.dumps(base, default=str)


def setup_logging(level: str = "INFO", format_json: bool = True) -> None:
    """
    Setup structured logging for the service

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Whether to use JSON formatting
    """
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if format_json:
        handler.setFormatter(JsonFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)

    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper()))


def get_logger(name: str, extra_fields: dict[str, Any] | None = None) -> logging.Logger:
    """
    Get logger with optional extra fields

    Args:
        name: Logger name (usually __name__)
        extra_fields: Additional fields to include in all log messages

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if extra_fields:
        return logging.LoggerAdapter(logger, extra_fields)

    return logger


def get_engine_logger(module: str) -> logging.Logger:
    """Get logger for planetary hours engine and service modules"""
    return get_logger(f"planetary.engine.{module}", {"layer": "engine"})


def get_api_logger(endpoint: str) -> logging.Logger:
    """Get logger for API endpoints"""
    return get_logger(f"planetary.api.{endpoint}", {"layer": "api", "type": "endpoint"})


def get_adapter_logger(adapter_name: str) -> logging.Logger:
    """Get logger for EphemerisSource implementations"""
    return get_logger(
        f"planetary.adapter.{adapter_name}",
        {"layer": "adapter", "pattern": "EphemerisSource"},
    )
