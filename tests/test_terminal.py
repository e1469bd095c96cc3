"""Tests for key decoding and the rich-backed terminal surface."""

from __future__ import annotations

import io

from rich.console import Console

from fast_console.models import KeyEvent
from fast_console.terminal import RichTerminal, decode_keys


def _names(data: str) -> list[str]:
    return [event.name for event in decode_keys(data)]


def _terminal(width: int = 30, height: int = 8) -> tuple[RichTerminal, io.StringIO]:
    out = io.StringIO()
    console = Console(file=out, width=width, height=height, force_terminal=True, color_system="standard")
    return RichTerminal(console, stdin=io.StringIO()), out


def test_printable_characters_decode_to_char_events() -> None:
    assert decode_keys("hé!") == [
        KeyEvent.printable("h"),
        KeyEvent.printable("é"),
        KeyEvent.printable("!"),
    ]


def test_arrow_home_end_and_delete_sequences() -> None:
    data = "\x1b[A\x1b[B\x1b[C\x1b[D\x1bOA\x1b[H\x1b[F\x1b[1~\x1b[4~\x1b[3~"
    assert _names(data) == [
        "up",
        "down",
        "right",
        "left",
        "up",
        "home",
        "end",
        "home",
        "end",
        "delete",
    ]


def test_line_endings_decode_to_single_enter() -> None:
    assert _names("\r\n") == ["enter"]
    assert _names("\r\r") == ["enter", "enter"]
    assert _names("\n") == ["enter"]


def test_editing_control_keys() -> None:
    assert _names("\x7f\x08\t\x01") == ["backspace", "backspace", "tab", "unknown"]


def test_lone_escape_and_unknown_sequences() -> None:
    assert _names("\x1b") == ["escape"]
    assert _names("\x1ba") == ["escape", "char"]
    assert _names("\x1b[15~x") == ["unknown", "char"]
    assert _names("\x1b[") == ["unknown"]


def test_size_comes_from_console_dimensions() -> None:
    terminal, _ = _terminal(width=42, height=11)
    assert terminal.size() == (42, 11)


def test_non_tty_stdin_yields_no_keys() -> None:
    terminal, _ = _terminal()
    terminal.start()
    assert terminal.read_key() is None
    terminal.stop()


def test_flush_writes_queued_rows_in_one_pass() -> None:
    terminal, out = _terminal()
    terminal.move_cursor(0, 0)
    terminal.write_row("first row")
    terminal.write_row("second row")
    assert out.getvalue() == ""

    terminal.flush()
    written = out.getvalue()
    assert "\x1b[1;1H" in written
    assert written.index("first row") < written.index("second row")


def test_title_cursor_glyph_and_stop_sequences() -> None:
    terminal, out = _terminal()
    terminal.set_title("FastConsole FPS: 20")
    terminal.draw_cursor(3, 5, "x")
    terminal.stop()
    written = out.getvalue()
    assert "FastConsole FPS: 20" in written
    assert "\x1b[6;4H" in written
    assert "x" in written
    assert "\x1b[?25h" in written


def test_stop_without_start_prints_no_blank_line() -> None:
    terminal, out = _terminal()
    terminal.stop()
    terminal.stop()
    assert "\n" not in out.getvalue()
    assert "\x1b[?25h" in out.getvalue()


def test_stop_after_start_ends_frame_with_one_newline() -> None:
    terminal, out = _terminal()
    terminal.start()
    terminal.stop()
    terminal.stop()
    assert out.getvalue().count("\n") == 1
