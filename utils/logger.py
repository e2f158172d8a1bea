# utils/logger.py
# This file is part of Sightline - Live Console Views
#
# Logging utility for the console view engine with configurable levels

import logging
import sys
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """Log levels for console view monitoring."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


class ConsoleLogger:
    """Centralized logger for the view engine with structured output."""

    def __init__(self, name: str = "sightline", level: LogLevel = LogLevel.INFO):
        """Initialize the console logger.

        Args:
            name: Logger name (typically module name)
            level: Default logging level
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level.value)

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level.value)
        console_handler.setFormatter(ConsoleFormatter())

        self.logger.addHandler(console_handler)

        # Prevent propagation to root logger
        self.logger.propagate = False

    def set_level(self, level: LogLevel):
        """Change the logging level."""
        self.logger.setLevel(level.value)
        for handler in self.logger.handlers:
            handler.setLevel(level.value)

    # Core logging methods
    def debug(self, message: str, **kwargs):
        """Log debug message (detailed internal state)."""
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message (general progress)."""
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message (unexpected but recoverable)."""
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message (serious problems)."""
        self.logger.error(message, **kwargs)

    # Specialized methods for view engine events
    def controller_rebuilt(
        self, mode: str, sort: str, group_key: Optional[str], generation: int
    ):
        """Log a rebuilt live query."""
        group_str = f", grouped by {group_key}" if group_key else ""
        self.debug(f"Live query #{generation} rebuilt: mode={mode}, sort={sort}{group_str}")

    def refresh_completed(
        self, generation: int, result_count: int, log_count: int, task_count: int
    ):
        """Log a completed refresh."""
        self.debug(
            f"Refresh #{generation}: {result_count} results "
            f"(logs={log_count}, tasks={task_count})"
        )

    def fetch_failed(self, reason: str):
        """Log a failed store fetch."""
        self.error(f"Fetch failed, keeping previous results: {reason}")

    def window_changed(self, position: str, limit: int, size: int):
        """Log a visible window recomputation."""
        self.debug(f"    Window [{position}] limit={limit} size={size}")

    def stale_update_dropped(self, generation: int, current: int):
        """Log a dropped notification from a superseded query."""
        self.debug(f"    Dropped stale update #{generation} (current #{current})")

    def criteria_emitted(self, field_class: str):
        """Log a throttled criteria emission."""
        self.debug(f"Criteria change delivered: {field_class}")


class ConsoleFormatter(logging.Formatter):
    """Custom formatter for console engine logging with clean output."""

    def format(self, record):
        # For INFO level and above, show message only (clean output)
        if record.levelno >= logging.INFO:
            return record.getMessage()

        # For DEBUG level, show with level indicator
        if record.levelno == logging.DEBUG:
            return f"[DEBUG] {record.getMessage()}"

        return f"[{record.levelname}] {record.getMessage()}"


# Global logger instance
_global_logger: Optional[ConsoleLogger] = None


def get_logger(name: str = "sightline") -> ConsoleLogger:
    """Get or create the global console logger instance.

    Args:
        name: Logger name (default: "sightline")

    Returns:
        ConsoleLogger instance
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = ConsoleLogger(name)
    return _global_logger


def set_log_level(level: LogLevel):
    """Set the global log level.

    Args:
        level: New log level
    """
    get_logger().set_level(level)


def configure_logging(verbose: bool = False, debug: bool = False):
    """Configure logging based on command line flags.

    Args:
        verbose: Enable verbose (INFO) output
        debug: Enable debug output (overrides verbose)
    """
    if debug:
        set_log_level(LogLevel.DEBUG)
    elif verbose:
        set_log_level(LogLevel.INFO)
    else:
        set_log_level(LogLevel.WARNING)
