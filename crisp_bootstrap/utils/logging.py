"""
Logging configuration and utilities.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional, TextIO

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
CYAN = "\033[96m"
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"

STEP = "step"
SUCCESS = "success"
DETAIL = "detail"

# status -> (style, icon)
_STYLES = {
    STEP: (BOLD + CYAN, "→ "),
    SUCCESS: (BOLD + GREEN, "✓ "),
    DETAIL: (DIM, "  "),
    "warning": (BOLD + YELLOW, "⚠ "),
    "error": (BOLD + RED, "✗ "),
}

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


class StatusFormatter(logging.Formatter):
    """Console formatter with an icon and color per status."""

    def __init__(self, use_color: bool = True):
        super().__init__("%(message)s")
        self.use_color = use_color

    @staticmethod
    def status_of(record: logging.LogRecord) -> Optional[str]:
        status = getattr(record, "status", None)
        if status:
            return status
        if record.levelno >= logging.ERROR:
            return "error"
        if record.levelno >= logging.WARNING:
            return "warning"
        return None

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        status = self.status_of(record)
        if status not in _STYLES:
            return message
        style, icon = _STYLES[status]
        if not self.use_color:
            return f"{icon}{message}"
        if status == DETAIL:
            # Indent stays outside the dim span
            return f"{icon}{style}{message}{RESET}"
        return f"{style}{icon}{message}{RESET}"


class StatusStreamHandler(logging.StreamHandler):
    """Sends errors to stderr and everything else to stdout."""

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        super().__init__(stdout or sys.stdout)
        self.error_stream = stderr or sys.stderr
        # Formatter for error records; falls back to the main one
        self.error_formatter: Optional[logging.Formatter] = None

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.ERROR:
            previous_stream, previous_formatter = self.stream, self.formatter
            self.stream = self.error_stream
            if self.error_formatter is not None:
                self.formatter = self.error_formatter
            try:
                super().emit(record)
            finally:
                self.stream, self.formatter = previous_stream, previous_formatter
        else:
            super().emit(record)


class StatusLogger(logging.LoggerAdapter):
    """Logger adapter with the step/success/detail vocabulary used in console output."""

    def process(self, msg, kwargs):
        return msg, kwargs

    def step(self, msg: str, *args, **kwargs) -> None:
        self._status(logging.INFO, STEP, msg, *args, **kwargs)

    def success(self, msg: str, *args, **kwargs) -> None:
        self._status(logging.INFO, SUCCESS, msg, *args, **kwargs)

    def detail(self, msg: str, *args, **kwargs) -> None:
        self._status(logging.INFO, DETAIL, msg, *args, **kwargs)

    def _status(self, level: int, status: str, msg: str, *args, **kwargs) -> None:
        extra = dict(kwargs.pop("extra", None) or {})
        extra["status"] = status
        self.log(level, msg, *args, extra=extra, **kwargs)


def colors_enabled(stream: TextIO) -> bool:
    """Whether ANSI colors should be written to a stream."""
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def get_logger(name: str) -> StatusLogger:
    """Get a status logger instance."""
    return StatusLogger(logging.getLogger(name), {})


def setup_root_logger(log_file: Optional[Path] = None,
                      level: str = "INFO",
                      max_file_size_mb: int = 10,
                      backup_count: int = 5,
                      use_color: Optional[bool] = None):
    """
    Set up the root logger for the application.

    Args:
        log_file: Optional log file path
        level: Logging level
        max_file_size_mb: Rotate the log file at this size
        backup_count: Rotated files to keep
        use_color: Force colors on or off (default: detect a terminal)
    """
    root_logger = logging.getLogger()

    # Clear any existing handlers
    root_logger.handlers.clear()

    root_logger.setLevel(getattr(logging, level.upper()))

    # Console handler
    console_handler = StatusStreamHandler()
    if use_color is None:
        # stdout and stderr can be redirected independently
        console_handler.setFormatter(StatusFormatter(colors_enabled(console_handler.stream)))
        console_handler.error_formatter = StatusFormatter(colors_enabled(console_handler.error_stream))
    else:
        console_handler.setFormatter(StatusFormatter(use_color=use_color))
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count
        )
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)
