"""Tests for the frame grid."""

from __future__ import annotations

from fast_console.screen_buffer import ScreenBuffer


def test_new_buffer_is_blank_and_padded() -> None:
    screen = ScreenBuffer(5, 3)
    assert screen.rows() == ["     "] * 3
    assert screen.next_row == 0


def test_draw_line_advances_row_pointer() -> None:
    screen = ScreenBuffer(6, 3)
    assert screen.draw_line("ab") == 1
    assert screen.draw_line("cd") == 1
    assert screen.rows() == ["ab    ", "cd    ", "      "]
    assert screen.next_row == 2


def test_long_line_continues_on_next_rows() -> None:
    screen = ScreenBuffer(4, 3)
    assert screen.draw_line("abcdefghij") == 3
    assert screen.rows() == ["abcd", "efgh", "ij  "]


def test_drawing_past_bottom_is_dropped() -> None:
    screen = ScreenBuffer(4, 2)
    screen.draw_line("one")
    screen.draw_line("two")
    assert screen.draw_line("three") == 0
    assert screen.rows() == ["one ", "two "]


def test_draw_at_truncates_and_keeps_pointer() -> None:
    screen = ScreenBuffer(4, 3)
    screen.draw_at(2, "prompt text")
    assert screen.rows()[2] == "prom"
    assert screen.next_row == 0
    screen.draw_at(7, "ignored")
    assert len(screen.rows()) == 3


def test_control_characters_do_not_reach_the_grid() -> None:
    screen = ScreenBuffer(6, 1)
    screen.draw_line("a\tb\r\n")
    assert screen.rows() == ["a b   "]


def test_clear_blanks_rows_and_resets_pointer() -> None:
    screen = ScreenBuffer(3, 2)
    screen.draw_line("xyz")
    screen.clear()
    assert screen.rows() == ["   ", "   "]
    assert screen.next_row == 0


def test_resize_reports_changes() -> None:
    screen = ScreenBuffer(3, 2)
    assert screen.resize(3, 2) is False
    assert screen.resize(5, 4) is True
    assert (screen.width, screen.height) == (5, 4)
    assert screen.rows() == ["     "] * 4


def test_zero_width_grid_does_not_loop() -> None:
    screen = ScreenBuffer(0, 2)
    assert screen.draw_line("abc") == 1
    assert screen.rows() == ["", ""]
