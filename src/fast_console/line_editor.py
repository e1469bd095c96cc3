"""Single-line input editor with history browsing and cursor blink."""

from __future__ import annotations

from collections import deque

from .models import InputState, KeyEvent

DEFAULT_HISTORY_SIZE = 20
DEFAULT_BLINK_INTERVAL = 0.53


class LineEditor:
    """Apply key events to an input line.

    The editor performs no terminal I/O. `handle_key` returns the submitted
    text when Enter is pressed and None otherwise; the caller decides where
    submitted lines go.
    """

    def __init__(
        self,
        *,
        history_size: int = DEFAULT_HISTORY_SIZE,
        blink_interval: float = DEFAULT_BLINK_INTERVAL,
    ) -> None:
        if history_size <= 0:
            raise ValueError("history_size must be > 0")
        self.state = InputState()
        self.history: deque[str] = deque(maxlen=history_size)
        self.history_cursor = 0
        self.blink_interval = blink_interval
        self._last_blink: float | None = None

    @property
    def buffer(self) -> str:
        return self.state.buffer

    @property
    def cursor(self) -> int:
        return self.state.cursor

    def reset(self) -> None:
        """Drop the current line and all history."""
        self.state = InputState()
        self.history.clear()
        self.history_cursor = 0
        self._last_blink = None

    def handle_key(self, event: KeyEvent) -> str | None:
        state = self.state
        name = event.name

        if name == "char" and event.char is not None:
            state.buffer = state.buffer[: state.cursor] + event.char + state.buffer[state.cursor :]
            state.cursor += 1
        elif name == "backspace":
            if state.cursor > 0:
                state.buffer = state.buffer[: state.cursor - 1] + state.buffer[state.cursor :]
                state.cursor -= 1
        elif name == "delete":
            if state.cursor < len(state.buffer):
                state.buffer = state.buffer[: state.cursor] + state.buffer[state.cursor + 1 :]
        elif name == "left":
            state.cursor = max(0, state.cursor - 1)
        elif name == "right":
            state.cursor = min(len(state.buffer), state.cursor + 1)
        elif name == "home":
            state.cursor = 0
        elif name == "end":
            state.cursor = len(state.buffer)
        elif name == "up":
            if self.history_cursor < len(self.history):
                self.history_cursor += 1
                self._recall()
        elif name == "down":
            # At the newest entry this is a no-op; the line is kept, not cleared.
            if self.history_cursor > 1:
                self.history_cursor -= 1
                self._recall()
        elif name == "enter":
            return self._submit()
        return None

    def tick_blink(self, now: float) -> bool:
        """Advance the blink clock to `now` (seconds) and return visibility."""
        if self._last_blink is None:
            self._last_blink = now
        elif now - self._last_blink >= self.blink_interval:
            self.state.cursor_visible = not self.state.cursor_visible
            self._last_blink = now
        return self.state.cursor_visible

    def view(self, width: int) -> tuple[str, int]:
        """Return the slice of the line that fits `width` and the cursor column.

        The slice scrolls horizontally so the cursor cell stays on screen.
        """
        if width <= 0:
            return "", 0
        state = self.state
        offset = max(0, state.cursor - width + 1)
        return state.buffer[offset : offset + width], state.cursor - offset

    def _recall(self) -> None:
        self.state.buffer = self.history[len(self.history) - self.history_cursor]
        self.state.cursor = len(self.state.buffer)

    def _submit(self) -> str:
        submitted = self.state.buffer
        self.history.append(submitted)
        self.state.buffer = ""
        self.state.cursor = 0
        self.history_cursor = 0
        return submitted
