"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class InputUnderflowError(IndexError):
    """Raised when reading input while no completed line is pending."""


class TerminalError(Exception):
    """Raised when the terminal surface cannot be prepared for raw I/O."""
