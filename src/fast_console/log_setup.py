"""Logging setup: JSON lines for stderr, compact rows for the scrollback."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

# Engine context passed through `extra=` on log calls.
CONTEXT_FIELDS = ("fps", "width", "height", "template")


class JsonConsoleFormatter(logging.Formatter):
    """Render each record as one JSON object.

    Context fields from `CONTEXT_FIELDS` are copied in when a log call
    supplied them.
    """

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = value
        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(event, default=str)


class ScrollbackFormatter(logging.Formatter):
    """`LEVEL message` on one row; an exception adds its type and text only."""

    def format(self, record: logging.LogRecord) -> str:
        text = f"{record.levelname} {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            text = f"{text} ({type(exc).__name__}: {exc})"
        return text


def setup_logger(
    name: str = "fast_console",
    level: int | str = logging.INFO,
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the package logger once; later calls only change the level.

    Records are written to `stream` (stderr by default) and do not
    propagate to the root logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
