"""
Colored console logging for device location and toggle runs.

Provides a small Logger on top of colorama with level filtering, key=value
context suffixes, section banners and progress markers. Discovery
components only emit plain level calls; banners and progress markers are
used by the command line layer.
"""

import sys
from datetime import datetime
from enum import Enum
from typing import Optional
from colorama import Fore, Style, init

init(autoreset=True)


class LogLevel(Enum):
    """Enumeration for different log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_LEVEL_ORDER = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARNING: 2,
    LogLevel.ERROR: 3,
}

# Shared threshold so set_log_level() affects every logger handed out
_global_min_level = LogLevel.INFO


class Logger:
    """
    Console logger with colored level tags.

    A logger created without an explicit ``min_level`` follows the global
    level set through :func:`set_log_level`.
    """

    LEVEL_COLORS = {
        LogLevel.DEBUG: Fore.CYAN,
        LogLevel.INFO: Fore.GREEN,
        LogLevel.WARNING: Fore.YELLOW,
        LogLevel.ERROR: Fore.RED,
    }

    def __init__(self, name: str = "TapoLocator", min_level: Optional[LogLevel] = None):
        """
        Initialize the Logger.

        Args:
            name: Name of the logger, shown in debug output
            min_level: Fixed minimum level; None follows the global level
        """
        self.name = name
        self._min_level = min_level
        self._progress_active = False

    @property
    def min_level(self) -> LogLevel:
        return self._min_level or _global_min_level

    @min_level.setter
    def min_level(self, level: LogLevel) -> None:
        self._min_level = level

    def is_enabled_for(self, level: LogLevel) -> bool:
        return _LEVEL_ORDER[level] >= _LEVEL_ORDER[self.min_level]

    def _timestamp(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _emit(self, tag: str, color: str, message: str, stream, **kwargs) -> None:
        line = (
            f"{Style.DIM}[{self._timestamp()}]{Style.RESET_ALL} "
            f"{color}{tag:<7}{Style.RESET_ALL} "
            f"{message}"
        )
        if kwargs:
            details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
            line += f" {Style.DIM}({details}){Style.RESET_ALL}"
        print(line, file=stream)

    def _log(self, level: LogLevel, message: str, **kwargs) -> None:
        if not self.is_enabled_for(level):
            return
        if level == LogLevel.DEBUG:
            message = f"{self.name}: {message}"
        stream = sys.stderr if level == LogLevel.ERROR else sys.stdout
        self._emit(level.value, self.LEVEL_COLORS[level], message, stream, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        """Log a debug message."""
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs) -> None:
        """Log an info message."""
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log a warning message."""
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs) -> None:
        """
        Log an error message.

        Args:
            message: Error message
            exception: Optional exception whose type and text are appended
            **kwargs: Additional context information
        """
        if exception:
            kwargs["exception"] = f"{type(exception).__name__}: {exception}"
        self._log(LogLevel.ERROR, message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        """Log a success message (INFO level, highlighted)."""
        if not self.is_enabled_for(LogLevel.INFO):
            return
        self._emit("SUCCESS", Fore.GREEN, f"{Style.BRIGHT}{message}{Style.RESET_ALL}",
                   sys.stdout, **kwargs)

    def section(self, title: str) -> None:
        """Print a section banner."""
        if not self.is_enabled_for(LogLevel.INFO):
            return
        separator = "=" * 60
        print(f"\n{Fore.BLUE}{Style.BRIGHT}{separator}")
        print(f"  {title.upper()}")
        print(f"{separator}{Style.RESET_ALL}\n")

    def progress_start(self, message: str) -> None:
        """Announce the start of a long-running step."""
        if not self.is_enabled_for(LogLevel.INFO):
            return
        self._emit("...", Fore.BLUE, f"{message}...", sys.stdout)
        self._progress_active = True

    def progress_end(self, final_message: Optional[str] = None) -> None:
        """Close the current progress step, optionally with a success line."""
        if not self._progress_active:
            return
        self._progress_active = False
        if final_message:
            self.success(final_message)


# Global logger instance
logger = Logger()


def set_log_level(level: LogLevel) -> None:
    """
    Set the global log level.

    Args:
        level: Minimum log level to display
    """
    global _global_min_level
    _global_min_level = level


def get_logger(name: str = "TapoLocator") -> Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance following the global log level
    """
    return Logger(name)
