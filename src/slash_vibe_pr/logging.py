"""Structured logging configuration.

Uses standard library logging with a JSON formatter.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

_RESERVED_LOG_RECORD_ATTRS: set[str] = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}

# Config files written for the earlier service spell warning as WARN.
_LEVEL_ALIASES: dict[str, str] = {"WARN": "WARNING"}


class JsonFormatter(logging.Formatter):
    """A minimal JSON formatter for logging records."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_LOG_RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def resolve_level(level: str) -> tuple[int, bool]:
    """Map a configured level name to a logging level.

    Returns:
        The numeric level and whether the name was recognised. Unknown names
        resolve to INFO.
    """

    name = level.strip().upper()
    name = _LEVEL_ALIASES.get(name, name)
    if name in {"DEBUG", "INFO", "WARNING", "ERROR"}:
        return logging.getLevelName(name), True
    return logging.INFO, False


def configure_logging(level: str) -> None:
    """Configure root logging with structured JSON output."""

    root = logging.getLogger()

    # Remove any existing handlers to avoid duplicate logs when re-configuring.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonFormatter())

    numeric, known = resolve_level(level)
    root.addHandler(handler)
    root.setLevel(numeric)

    if not known:
        logging.getLogger(__name__).warning(
            "Unknown log level, defaulting to INFO", extra={"configured_level": level}
        )

    # Keep third-party loggers reasonably quiet unless explicitly configured.
    for name in ("redis", "urllib3"):
        logging.getLogger(name).setLevel(max(root.level, logging.INFO))
