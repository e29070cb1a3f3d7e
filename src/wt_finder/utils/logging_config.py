"""Logging configuration for the application."""

import logging
import logging.handlers
import sys

from .exceptions import PathError
from .path_manager import PathManager

GIT_LOGGER_NAME = "wt_finder.services.git_runner"


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def format(self, record):
        if not sys.stderr.isatty():
            return super().format(record)

        original = record.levelname
        if original in self.COLORS:
            record.levelname = (
                f"{self.COLORS[original]}{original}{self.COLORS['RESET']}"
            )
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _rotating_handler(
    filename: str, level: int, max_file_size: int, backup_count: int
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        PathManager.get_log_file(filename),
        maxBytes=max_file_size,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def setup_logging(
    level: str = "WARNING",
    log_to_file: bool = True,
    log_to_console: bool = True,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Set up logging configuration for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to files
        log_to_console: Whether to log to the console (stderr)
        max_file_size: Maximum size of log files before rotation
        backup_count: Number of backup log files to keep
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_to_file else numeric_level)
    root_logger.handlers.clear()

    if log_to_console:
        # stdout belongs to command output, diagnostics go to stderr
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(
            ColoredFormatter(fmt="%(levelname)s [%(name)s] %(message)s")
        )
        root_logger.addHandler(console_handler)

    if log_to_file:
        try:
            PathManager.ensure_directories()

            root_logger.addHandler(
                _rotating_handler("app.log", numeric_level, max_file_size, backup_count)
            )
            root_logger.addHandler(
                _rotating_handler(
                    "errors.log", logging.ERROR, max_file_size, backup_count
                )
            )

            # Every git invocation, regardless of the configured level
            git_logger = logging.getLogger(GIT_LOGGER_NAME)
            for handler in list(git_logger.handlers):
                git_logger.removeHandler(handler)
            git_logger.addHandler(
                _rotating_handler(
                    "git_operations.log", logging.DEBUG, max_file_size, backup_count
                )
            )
            git_logger.propagate = True

        except (OSError, PathError) as e:
            # If file logging fails, at least log to console
            logging.getLogger(__name__).error(f"Failed to set up file logging: {e}")

    logging.getLogger(__name__).debug(
        f"Logging configured - Level: {level}, "
        f"File: {log_to_file}, Console: {log_to_console}"
    )

