"""Typed settings loader for the fast console engine."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Engine settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    screen_fps: int = Field(default=20, alias="FAST_CONSOLE_FPS")
    cursor_visible: bool = Field(default=False, alias="FAST_CONSOLE_CURSOR_VISIBLE")
    title_format: str = Field(
        default="FastConsole FPS: {0}",
        alias="FAST_CONSOLE_TITLE_FORMAT",
    )
    history_size: int = Field(default=20, alias="FAST_CONSOLE_HISTORY_SIZE")
    cursor_blink_ms: int = Field(default=530, alias="FAST_CONSOLE_CURSOR_BLINK_MS")
    reserved_rows: int = Field(default=2, alias="FAST_CONSOLE_RESERVED_ROWS")
    capture_stdout: bool = Field(default=False, alias="FAST_CONSOLE_CAPTURE_STDOUT")
    log_level: LogLevel = Field(default="INFO", alias="FAST_CONSOLE_LOG_LEVEL")

    @model_validator(mode="after")
    def validate_ranges(self) -> Settings:
        """Reject values the render loop cannot run with."""
        if self.screen_fps <= 0:
            raise ValueError("FAST_CONSOLE_FPS must be > 0.")
        if self.history_size <= 0:
            raise ValueError("FAST_CONSOLE_HISTORY_SIZE must be > 0.")
        if self.cursor_blink_ms <= 0:
            raise ValueError("FAST_CONSOLE_CURSOR_BLINK_MS must be > 0.")
        if self.reserved_rows < 0:
            raise ValueError("FAST_CONSOLE_RESERVED_ROWS must be >= 0.")
        try:
            self.title_format.format(self.screen_fps)
        except (IndexError, KeyError, ValueError) as exc:
            raise ValueError(
                "FAST_CONSOLE_TITLE_FORMAT must accept the FPS as its only "
                f"positional argument: {exc}"
            ) from exc
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return a config summary suitable for a startup log line."""
        return {
            "screen_fps": self.screen_fps,
            "cursor_visible": self.cursor_visible,
            "title_format": self.title_format,
            "history_size": self.history_size,
            "cursor_blink_ms": self.cursor_blink_ms,
            "reserved_rows": self.reserved_rows,
            "capture_stdout": self.capture_stdout,
            "log_level": self.log_level,
        }


def load_settings(**overrides: Any) -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
