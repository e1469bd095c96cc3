"""Typed state models shared by the log, editor and terminal layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

KeyName = Literal[
    "char",
    "enter",
    "backspace",
    "delete",
    "left",
    "right",
    "up",
    "down",
    "home",
    "end",
    "tab",
    "escape",
    "unknown",
]


@dataclass(slots=True)
class OutputLine:
    """One scrollback row; open for appends until terminated."""

    text: str
    terminated: bool = False
    wrapped: bool = False


@dataclass(frozen=True, slots=True)
class KeyEvent:
    """A decoded key press. `char` is set only for printable input."""

    name: KeyName
    char: str | None = None

    def __post_init__(self) -> None:
        if self.name == "char" and (self.char is None or len(self.char) != 1):
            raise ValueError("char key events need exactly one character")

    @classmethod
    def printable(cls, char: str) -> KeyEvent:
        return cls(name="char", char=char)


@dataclass(slots=True)
class InputState:
    """In-progress input line and its cursor."""

    buffer: str = ""
    cursor: int = 0
    cursor_visible: bool = False
