"""Adapters that route stdout and logging into the engine's scrollback."""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

from .log_setup import ScrollbackFormatter

if TYPE_CHECKING:
    from .engine import FastConsole


class EngineWriter(io.TextIOBase):
    """Text stream whose writes land in the scrollback instead of the terminal."""

    def __init__(self, engine: FastConsole, *, encoding: str = "utf-8") -> None:
        super().__init__()
        self._engine = engine
        self._encoding = encoding

    @property
    def encoding(self) -> str:  # type: ignore[override]
        return self._encoding

    def writable(self) -> bool:
        return True

    def isatty(self) -> bool:
        return False

    def write(self, text: str) -> int:
        if not isinstance(text, str):
            raise TypeError(f"write() argument must be str, not {type(text).__name__}")
        self._engine.write(text)
        return len(text)


class EngineLogHandler(logging.Handler):
    """Route logger output into the scrollback while the engine owns the screen."""

    def __init__(self, engine: FastConsole, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.engine = engine
        self.setFormatter(ScrollbackFormatter())

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.engine.write_line(self.format(record))
        except Exception:
            self.handleError(record)
