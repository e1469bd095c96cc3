"""Bounded, line-wrapping scrollback shared by producer threads."""

from __future__ import annotations

import threading

from .models import OutputLine


def wrap_text(text: str, width: int) -> list[str]:
    """Cut `text` into segments of at most `width` characters.

    Always returns at least one segment; an empty string yields `[""]`.
    """
    if width <= 0:
        raise ValueError("wrap width must be > 0")
    return [text[start : start + width] for start in range(0, len(text), width)] or [""]


class OutputLog:
    """Keep the most recent output rows, wrapped to the screen width.

    Every public method takes the log lock, so `write` and `write_line`
    are safe to call from any number of producer threads while the
    render thread reads `visible()`.
    """

    def __init__(self, *, width: int = 80, capacity: int = 20) -> None:
        self._lock = threading.Lock()
        self._lines: list[OutputLine] = []
        self._width = width
        self._capacity = max(1, capacity)

    @property
    def segment_width(self) -> int:
        """Longest row the log produces; one column stays free as a wrap marker."""
        return max(1, self._width - 1)

    @property
    def capacity(self) -> int:
        return self._capacity

    def configure(self, *, width: int, capacity: int) -> None:
        """Update geometry from the latest frame.

        Retained rows are not evicted here; shrinking capacity only limits
        what `visible()` returns until the next write trims the log.
        """
        with self._lock:
            self._width = width
            self._capacity = max(1, capacity)

    def write(self, text: str) -> None:
        """Append text to the open row; line breaks inside `text` close it."""
        pieces = text.replace("\r", "").split("\n")
        with self._lock:
            for piece in pieces[:-1]:
                self._append(piece, close=True)
            if pieces[-1]:
                self._append(pieces[-1], close=False)

    def write_line(self, text: str = "") -> None:
        """Append text and close the row so the next write starts a new one."""
        pieces = text.replace("\r", "").split("\n")
        with self._lock:
            for piece in pieces:
                self._append(piece, close=True)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()

    def visible(self) -> list[OutputLine]:
        """Return copies of the newest `capacity` rows, oldest first."""
        with self._lock:
            window = self._lines[-self._capacity :]
            return [
                OutputLine(text=line.text, terminated=line.terminated, wrapped=line.wrapped)
                for line in window
            ]

    def snapshot(self) -> list[OutputLine]:
        """Return copies of every retained row."""
        with self._lock:
            return [
                OutputLine(text=line.text, terminated=line.terminated, wrapped=line.wrapped)
                for line in self._lines
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def _append(self, text: str, *, close: bool) -> None:
        # Caller holds the lock.
        if self._lines and not self._lines[-1].terminated:
            text = self._lines.pop().text + text

        segments = wrap_text(text, self.segment_width)
        for segment in segments[:-1]:
            self._lines.append(OutputLine(text=segment, terminated=True, wrapped=True))
        self._lines.append(OutputLine(text=segments[-1], terminated=close))

        overflow = len(self._lines) - self._capacity
        if overflow > 0:
            del self._lines[:overflow]
