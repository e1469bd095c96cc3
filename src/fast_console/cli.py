"""Demo CLI: run the engine with a clock line and echo typed input."""

from __future__ import annotations

import argparse
import sys
import time
from datetime import datetime

from .config import load_settings
from .engine import FastConsole
from .exceptions import ConfigError
from .log_setup import setup_logger

POLL_INTERVAL_SECONDS = 0.05


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Interactive fast console demo: type lines, /fps N, /clear or /quit.",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=None,
        help="Override the frame rate from config.",
    )
    parser.add_argument(
        "--cursor-visible",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Show the terminal's own cursor while running.",
    )
    parser.add_argument(
        "--capture-stdout",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Route print() output into the scrollback.",
    )
    return parser.parse_args(argv)


def handle_command(console: FastConsole, line: str) -> bool:
    """Apply one submitted line; return False when the demo should exit."""
    command, _, argument = line.strip().partition(" ")
    if command in {"/quit", "/exit"}:
        return False
    if command == "/clear":
        console.clear_output()
    elif command == "/fps":
        try:
            console.set_screen_fps(int(argument))
        except (ValueError, ConfigError) as exc:
            console.write_line(f"fps not changed: {exc}")
    elif line:
        console.write_line(f"echo: {line}")
    return True


def main(argv: list[str] | None = None) -> int:
    """Run the interactive demo until /quit or Ctrl-C."""
    args = parse_args(argv)
    logger = setup_logger()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger.setLevel(settings.log_level)
    logger.debug("Loaded settings: %s", settings.safe_summary())

    console = FastConsole(settings=settings, logger=logger)
    console.constant_add_line("{0:%H:%M:%S}  fast console demo", lambda: (datetime.now(),))
    console.constant_add_line(
        "frame {0:.1f} ms @ {1} fps",
        lambda: (console.frame_time_ms, console.screen_fps),
    )

    exit_code = 0
    console.attach_logger(logger)
    try:
        console.start(
            fps=args.fps,
            cursor_visible=args.cursor_visible,
            capture_stdout=args.capture_stdout,
        )
    except ConfigError as exc:
        console.detach_logger()
        logger.error("Configuration failure: %s", exc)
        return 2

    try:
        running = True
        while running and console.enabled:
            while running and console.input_available:
                running = handle_command(console, console.read_line())
            time.sleep(POLL_INTERVAL_SECONDS)
    except KeyboardInterrupt:
        exit_code = 130
    finally:
        console.detach_logger()
        console.stop()

    if exit_code == 130:
        logger.info("Interrupted.")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
