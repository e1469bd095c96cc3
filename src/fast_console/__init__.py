"""Flicker-free terminal output engine with a concurrent input line."""

from .config import Settings, load_settings
from .constant_lines import ConstantLineRegistry
from .engine import FastConsole
from .exceptions import ConfigError, InputUnderflowError, TerminalError
from .line_editor import LineEditor
from .models import InputState, KeyEvent, OutputLine
from .output_log import OutputLog, wrap_text
from .screen_buffer import ScreenBuffer
from .terminal import RichTerminal, Terminal, decode_keys

__all__ = [
    "ConfigError",
    "ConstantLineRegistry",
    "FastConsole",
    "InputState",
    "InputUnderflowError",
    "KeyEvent",
    "LineEditor",
    "OutputLine",
    "OutputLog",
    "RichTerminal",
    "ScreenBuffer",
    "Settings",
    "Terminal",
    "TerminalError",
    "decode_keys",
    "load_settings",
    "wrap_text",
]
