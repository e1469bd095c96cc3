"""Terminal surface: the only layer that touches the real terminal.

`Terminal` is the capability interface the render loop draws through.
`RichTerminal` implements it with a rich `Console` for output and raw
keyboard reads from stdin (cbreak mode on POSIX, `msvcrt` on Windows).
"""

from __future__ import annotations

import codecs
import os
import sys
from collections import deque
from typing import Any, Protocol, TextIO

from rich.console import Console
from rich.control import Control

from .exceptions import TerminalError
from .models import KeyEvent, KeyName

_IS_WINDOWS = os.name == "nt"

if _IS_WINDOWS:  # pragma: no cover - exercised on Windows only
    import msvcrt
else:
    import select
    import termios
    import tty

CURSOR_STYLE = "white on dark_red"

_ESCAPE_SEQUENCES: dict[str, KeyName] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[7~": "home",
    "\x1b[4~": "end",
    "\x1b[8~": "end",
    "\x1b[3~": "delete",
}

_WINDOWS_SCAN_CODES: dict[str, KeyName] = {
    "H": "up",
    "P": "down",
    "K": "left",
    "M": "right",
    "G": "home",
    "O": "end",
    "S": "delete",
}


class Terminal(Protocol):
    """Interface for the terminal operations the engine needs."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def read_key(self) -> KeyEvent | None: ...

    def size(self) -> tuple[int, int]: ...

    def set_cursor_visible(self, visible: bool) -> None: ...

    def move_cursor(self, x: int, y: int) -> None: ...

    def clear(self) -> None: ...

    def write_row(self, text: str) -> None: ...

    def flush(self) -> None: ...

    def set_title(self, title: str) -> None: ...

    def draw_cursor(self, x: int, y: int, char: str) -> None: ...


def decode_keys(data: str) -> list[KeyEvent]:
    """Translate raw terminal input into key events."""
    events: list[KeyEvent] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == "\x1b":
            i, event = _decode_escape(data, i)
            events.append(event)
            continue
        if ch == "\r":
            events.append(KeyEvent(name="enter"))
            i += 2 if data[i + 1 : i + 2] == "\n" else 1
            continue
        if ch == "\n":
            events.append(KeyEvent(name="enter"))
        elif ch in ("\x7f", "\x08"):
            events.append(KeyEvent(name="backspace"))
        elif ch == "\t":
            events.append(KeyEvent(name="tab"))
        elif ord(ch) < 32:
            events.append(KeyEvent(name="unknown"))
        else:
            events.append(KeyEvent.printable(ch))
        i += 1
    return events


def _decode_escape(data: str, start: int) -> tuple[int, KeyEvent]:
    for length in (4, 3):
        name = _ESCAPE_SEQUENCES.get(data[start : start + length])
        if name is not None:
            return start + length, KeyEvent(name=name)

    introducer = data[start + 1 : start + 2]
    if introducer not in ("[", "O"):
        return start + 1, KeyEvent(name="escape")

    # Skip an unrecognised CSI/SS3 sequence up to its final byte.
    end = start + 2
    while end < len(data) and not ("@" <= data[end] <= "~"):
        end += 1
    return min(end + 1, len(data)), KeyEvent(name="unknown")


class RichTerminal:
    """Terminal surface backed by a rich `Console` and raw stdin reads.

    Frame output is queued by `move_cursor`/`write_row` and written in one
    buffered pass by `flush`.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        stdin: TextIO | None = None,
    ) -> None:
        # Bind the current stdout now so later stdout capture cannot loop back.
        self.console = console or Console(
            file=sys.stdout,
            highlight=False,
            markup=False,
            emoji=False,
        )
        self._stdin = stdin if stdin is not None else sys.stdin
        self._pending: list[Control | str] = []
        self._keys: deque[KeyEvent] = deque()
        self._original_termios: list[Any] | None = None
        self._decoder = codecs.getincrementaldecoder("utf-8")("replace")
        self._raw = False
        self._active = False

    def start(self) -> None:
        """Switch stdin to unbuffered key reads when it is a terminal."""
        self._active = True
        if self._raw or _IS_WINDOWS:
            self._raw = True
            return
        try:
            fd = self._stdin.fileno()
        except (AttributeError, OSError, ValueError):
            return
        if not os.isatty(fd):
            return
        try:
            self._original_termios = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        except termios.error as exc:
            raise TerminalError(f"Failed to enter cbreak mode: {exc}") from exc
        self._raw = True

    def stop(self) -> None:
        """Restore line-buffered input and a visible cursor."""
        self._pending.clear()
        self._keys.clear()
        if self._original_termios is not None:
            termios.tcsetattr(self._stdin.fileno(), termios.TCSADRAIN, self._original_termios)
            self._original_termios = None
        self._raw = False
        self.console.show_cursor(True)
        if self._active:
            # Leave the shell prompt below the last frame.
            self.console.out("")
            self._active = False

    def read_key(self) -> KeyEvent | None:
        if not self._keys and self._raw:
            self._keys.extend(decode_keys(self._read_available()))
        return self._keys.popleft() if self._keys else None

    def size(self) -> tuple[int, int]:
        width, height = self.console.size
        return width, height

    def set_cursor_visible(self, visible: bool) -> None:
        self.console.show_cursor(visible)

    def move_cursor(self, x: int, y: int) -> None:
        self._pending.append(Control.move_to(x, y))

    def clear(self) -> None:
        self.console.clear()

    def write_row(self, text: str) -> None:
        self._pending.append(text)

    def flush(self) -> None:
        pending, self._pending = self._pending, []
        self._active = True
        with self.console:
            for item in pending:
                if isinstance(item, Control):
                    self.console.control(item)
                else:
                    self.console.out(item, highlight=False)
        self.console.file.flush()

    def set_title(self, title: str) -> None:
        self.console.set_window_title(title)

    def draw_cursor(self, x: int, y: int, char: str) -> None:
        with self.console:
            self.console.control(Control.move_to(x, y))
            self.console.out(char or " ", style=CURSOR_STYLE, end="", highlight=False)
        self.console.file.flush()

    def _read_available(self) -> str:
        if _IS_WINDOWS:  # pragma: no cover - exercised on Windows only
            return self._read_available_windows()
        fd = self._stdin.fileno()
        chunks: list[str] = []
        while select.select([fd], [], [], 0)[0]:
            data = os.read(fd, 1024)
            if not data:
                break
            chunks.append(self._decoder.decode(data))
        return "".join(chunks)

    def _read_available_windows(self) -> str:  # pragma: no cover - Windows only
        chunks: list[str] = []
        while msvcrt.kbhit():
            ch = msvcrt.getwch()
            if ch in ("\x00", "\xe0"):
                name = _WINDOWS_SCAN_CODES.get(msvcrt.getwch())
                self._keys.append(KeyEvent(name=name or "unknown"))
                continue
            chunks.append(ch)
        return "".join(chunks)
