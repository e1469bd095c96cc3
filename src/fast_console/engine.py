"""Fixed-rate render loop and the thread-safe console API around it."""

from __future__ import annotations

import logging
import queue
import sys
import threading
import time
from collections.abc import Callable, Sequence
from typing import Any, TextIO

from .config import Settings, load_settings
from .constant_lines import ConstantLineRegistry
from .exceptions import ConfigError, InputUnderflowError
from .line_editor import LineEditor
from .models import KeyEvent
from .output_log import OutputLog
from .screen_buffer import ScreenBuffer
from .streams import EngineLogHandler, EngineWriter
from .terminal import RichTerminal, Terminal


def _validate_fps(fps: Any) -> int:
    if isinstance(fps, bool) or not isinstance(fps, int):
        raise ConfigError(f"fps must be an integer, got {type(fps).__name__}.")
    if fps <= 0:
        raise ConfigError(f"fps must be > 0, got {fps}.")
    return fps


class FastConsole:
    """Flicker-free console: producers write lines, one thread paints frames.

    Only the render thread touches the terminal while the engine runs.
    Other threads interact through `write`/`write_line` (locked scrollback)
    and `read_line` (FIFO of submitted input). `stop()` blocks until the
    render thread has exited; a terminal call that never returns blocks it
    forever.
    """

    def __init__(
        self,
        terminal: Terminal | None = None,
        *,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings if settings is not None else load_settings()
        self.terminal: Terminal = terminal if terminal is not None else RichTerminal()
        self.logger = logger or logging.getLogger("fast_console")

        self.screen = ScreenBuffer()
        self.output = OutputLog()
        self.constants = ConstantLineRegistry(logger=self.logger)
        self.editor = self._new_editor()
        self._pending_input: queue.Queue[str] = queue.Queue()

        self._title_formatted = self.settings.title_format
        self._screen_fps = self.settings.screen_fps
        self._interval = 1.0 / self._screen_fps
        self._title_dirty = False
        self._frame_time_ms = 0.0
        self._render_failing = False

        self._lifecycle_lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

        self._saved_stdout: TextIO | None = None
        self._stdout_writer: EngineWriter | None = None
        self._attached_logger: logging.Logger | None = None
        self._original_handlers: list[logging.Handler] = []

    # -- lifecycle ---------------------------------------------------------

    def start(
        self,
        fps: int | None = None,
        cursor_visible: bool | None = None,
        *,
        capture_stdout: bool | None = None,
    ) -> None:
        """Start (or restart) the render loop on a dedicated thread."""
        fps = _validate_fps(self.settings.screen_fps if fps is None else fps)
        if cursor_visible is None:
            cursor_visible = self.settings.cursor_visible
        if capture_stdout is None:
            capture_stdout = self.settings.capture_stdout

        if self._on_render_thread():
            raise RuntimeError("start() cannot be called from the render thread.")

        with self._lifecycle_lock:
            if self._thread is not None:
                self._stop_locked()

            self.screen = ScreenBuffer()
            self.output = OutputLog()
            self.editor = self._new_editor()
            self._drain_pending_input()
            self._render_failing = False
            self._screen_fps = fps
            self._interval = 1.0 / fps
            self._title_dirty = False

            self.terminal.start()
            self.terminal.set_cursor_visible(cursor_visible)
            self.terminal.set_title(self._format_title())
            columns, rows = self.terminal.size()
            self.output.configure(
                width=max(0, columns - 1),
                capacity=self._capacity(max(0, rows - 1)),
            )
            if capture_stdout:
                self._capture_stdout()

            self._stop_event.clear()
            self._running = True
            self._thread = threading.Thread(
                target=self._run,
                name="FastConsoleRender",
                daemon=True,
            )
            self._thread.start()
        self.logger.info(
            "Render loop started: fps=%s cursor_visible=%s capture_stdout=%s",
            fps,
            cursor_visible,
            capture_stdout,
            extra={"fps": fps},
        )

    def stop(self) -> None:
        """Stop the render loop, wait for it, and hand the terminal back.

        On an idle engine this only restores terminal pass-through; registered
        constant lines and other state are left alone. Called from the render
        thread itself (a provider or log handler), it ends the loop after the
        current tick and returns; the remaining teardown runs on the next
        `stop()` or `start()` from another thread.
        """
        if self._on_render_thread():
            self._request_stop()
            return
        with self._lifecycle_lock:
            had_loop = self._thread is not None
            if had_loop:
                self._stop_locked()
            else:
                self._restore_stdout()
                self.terminal.stop()
        if had_loop:
            self.logger.info("Render loop stopped.")

    def __enter__(self) -> FastConsole:
        if not self._running:
            self.start()
        return self

    def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
        self.stop()

    @property
    def enabled(self) -> bool:
        return self._running

    # -- producer / consumer API ------------------------------------------

    def write(self, text: str = "") -> None:
        if self._running:
            self.output.write(text)

    def write_line(self, text: str = "") -> None:
        if self._running:
            self.output.write_line(text)

    def read_line(self) -> str:
        """Pop the oldest submitted line without waiting.

        Returns "" when the engine is stopped and raises InputUnderflowError
        when it is running but nothing has been submitted.
        """
        if not self._running:
            return ""
        try:
            return self._pending_input.get_nowait()
        except queue.Empty as exc:
            raise InputUnderflowError("No completed input line is pending.") from exc

    @property
    def input_available(self) -> bool:
        return self._running and not self._pending_input.empty()

    def clear_output(self) -> None:
        if self._running:
            self.output.clear()

    def constant_add_line(
        self,
        template: str,
        provider: Callable[[], Sequence[Any]],
    ) -> bool:
        return self.constants.add_line(template, provider)

    def constant_clear_lines(self) -> None:
        self.constants.clear()

    # -- title / frame rate ------------------------------------------------

    @property
    def title_formatted(self) -> str:
        return self._title_formatted

    @title_formatted.setter
    def title_formatted(self, template: str) -> None:
        try:
            template.format(self._screen_fps)
        except (IndexError, KeyError, ValueError) as exc:
            raise ConfigError(f"Title template cannot format the FPS: {exc}") from exc
        self._title_formatted = template
        self._update_title()

    @property
    def screen_fps(self) -> int:
        return self._screen_fps

    def set_screen_fps(self, fps: int) -> None:
        """Change the frame rate.

        Recomputes the tick interval and updates the window title. While the
        loop runs the title is applied by the render thread on its next tick.
        """
        fps = _validate_fps(fps)
        self._screen_fps = fps
        self._interval = 1.0 / fps
        self._update_title()
        self.logger.debug("Frame rate set to %s fps.", fps, extra={"fps": fps})

    @property
    def frame_time_ms(self) -> float:
        """Duration of the last rendered frame in milliseconds."""
        return self._frame_time_ms

    # -- logging / stdout routing -----------------------------------------

    def attach_logger(self, logger: logging.Logger) -> None:
        """Replace the logger's handlers with one that writes to the scrollback."""
        self.detach_logger()
        self._attached_logger = logger
        self._original_handlers = list(logger.handlers)
        logger.handlers = [EngineLogHandler(self)]

    def detach_logger(self) -> None:
        """Restore original logger handlers."""
        if self._attached_logger is None:
            return
        self._attached_logger.handlers = self._original_handlers
        self._attached_logger = None
        self._original_handlers = []

    # -- rendering ---------------------------------------------------------

    def render_frame(self) -> None:
        """Recompute the screen and flush it to the terminal once."""
        started = time.perf_counter()

        if self._title_dirty:
            self._title_dirty = False
            self.terminal.set_title(self._format_title())

        columns, rows = self.terminal.size()
        width = max(0, columns - 1)
        height = max(0, rows - 1)
        if self.screen.resize(width, height):
            self.logger.debug(
                "Screen buffer resized to %sx%s.",
                width,
                height,
                extra={"width": width, "height": height},
            )
            self.terminal.clear()
        self.screen.clear()

        for text in self.constants.render():
            self.screen.draw_line(text)

        self.output.configure(width=width, capacity=self._capacity(height))
        for line in self.output.visible():
            self.screen.draw_line(line.text)

        event = self.terminal.read_key()
        if event is not None:
            self._handle_key(event)

        cursor_on = self.editor.tick_blink(time.monotonic())
        text, column = self.editor.view(width)
        input_row = height - 1
        self.screen.draw_at(input_row, text)

        self.terminal.move_cursor(0, 0)
        for row in self.screen.rows():
            self.terminal.write_row(row)
        self.terminal.flush()
        if cursor_on and input_row >= 0 and width > 0:
            glyph = text[column] if column < len(text) else " "
            self.terminal.draw_cursor(column, input_row, glyph)

        self._frame_time_ms = (time.perf_counter() - started) * 1000.0

    def _run(self) -> None:
        while not self._stop_event.is_set():
            started = time.perf_counter()
            try:
                self.render_frame()
            except Exception:
                if not self._render_failing:
                    self._render_failing = True
                    self.logger.exception("Frame render failed; keeping the last frame.")
            else:
                if self._render_failing:
                    self._render_failing = False
                    self.logger.info("Frame rendering recovered.")
            elapsed = time.perf_counter() - started
            self._stop_event.wait(max(0.0, self._interval - elapsed))

    def _handle_key(self, event: KeyEvent) -> None:
        submitted = self.editor.handle_key(event)
        if submitted is None:
            return
        self.write_line(submitted)
        self._pending_input.put(submitted)

    # -- internals ---------------------------------------------------------

    def _request_stop(self) -> None:
        self._running = False
        self._stop_event.set()

    def _on_render_thread(self) -> bool:
        thread = self._thread
        return thread is not None and thread is threading.current_thread()

    def _stop_locked(self) -> None:
        # Never runs on the render thread, which takes no lock to stop itself.
        self._request_stop()
        thread = self._thread
        if thread is not None:
            thread.join()
        self._thread = None

        self._restore_stdout()
        self.output.clear()
        self._drain_pending_input()
        self.editor.reset()
        self.constants.clear()
        self.terminal.stop()

    def _new_editor(self) -> LineEditor:
        return LineEditor(
            history_size=self.settings.history_size,
            blink_interval=self.settings.cursor_blink_ms / 1000.0,
        )

    def _capacity(self, height: int) -> int:
        return max(1, height - len(self.constants) - self.settings.reserved_rows)

    def _format_title(self) -> str:
        return self._title_formatted.format(self._screen_fps)

    def _update_title(self) -> None:
        if self._running and not self._on_render_thread():
            self._title_dirty = True
        else:
            self.terminal.set_title(self._format_title())

    def _drain_pending_input(self) -> None:
        while True:
            try:
                self._pending_input.get_nowait()
            except queue.Empty:
                return

    def _capture_stdout(self) -> None:
        self._saved_stdout = sys.stdout
        self._stdout_writer = EngineWriter(self)
        sys.stdout = self._stdout_writer

    def _restore_stdout(self) -> None:
        if self._stdout_writer is None:
            return
        if sys.stdout is self._stdout_writer and self._saved_stdout is not None:
            sys.stdout = self._saved_stdout
        self._saved_stdout = None
        self._stdout_writer = None
