"""Fixed-size character grid holding the next frame."""

from __future__ import annotations

BLANK = " "


def _printable(text: str) -> str:
    return text.replace("\r", "").replace("\n", "").replace("\t", " ")


class ScreenBuffer:
    """Row-major `height x width` grid, always padded with blanks.

    `draw_line` fills rows top-down from an internal row pointer that
    `clear` resets; `draw_at` writes one row without moving it.
    """

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self._width = 0
        self._height = 0
        self._cells: list[list[str]] = []
        self._next_row = 0
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def next_row(self) -> int:
        return self._next_row

    def resize(self, width: int, height: int) -> bool:
        """Reallocate for new dimensions; return True if they changed."""
        width = max(0, width)
        height = max(0, height)
        if (width, height) == (self._width, self._height) and self._cells:
            return False
        changed = (width, height) != (self._width, self._height)
        self._width = width
        self._height = height
        self._cells = [[BLANK] * width for _ in range(height)]
        self._next_row = 0
        return changed

    def clear(self) -> None:
        for row in self._cells:
            row[:] = [BLANK] * self._width
        self._next_row = 0

    def draw_line(self, text: str) -> int:
        """Draw `text` from the next free row, continuing onto further rows.

        Returns the number of rows used. Text past the bottom is dropped.
        """
        text = _printable(text)
        used = 0
        start = 0
        while True:
            if self._next_row >= self._height:
                return used
            self._put(self._next_row, text[start : start + self._width])
            self._next_row += 1
            used += 1
            start += self._width
            if start >= len(text) or self._width == 0:
                return used

    def draw_at(self, row: int, text: str) -> None:
        """Draw `text` on `row`, truncated to the width."""
        if 0 <= row < self._height:
            self._put(row, _printable(text)[: self._width])

    def rows(self) -> list[str]:
        return ["".join(row) for row in self._cells]

    def _put(self, row: int, text: str) -> None:
        cells = self._cells[row]
        cells[:] = [BLANK] * self._width
        cells[: len(text)] = list(text)
