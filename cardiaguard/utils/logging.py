"""
Logging Configuration

One line per record: UTC timestamp, level, logger name, message.
Configured once by the app factory from Settings.
"""
import logging
import sys
from typing import Optional
from datetime import datetime, timezone

_HANDLER_TAG = "_cardiaguard"

_LEVEL_COLORS = {
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[35m',
}
_RESET = '\033[0m'


class StructuredFormatter(logging.Formatter):
    """Session log line; warnings and above are coloured on a terminal."""

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc).isoformat()
        line = f"[{timestamp}] {record.levelname:8} [{record.name}] {record.getMessage()}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"

        color = _LEVEL_COLORS.get(record.levelno) if self.color else None
        return f"{color}{line}{_RESET}" if color else line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Install the console (and optional file) handler on the root logger.

    Calling it again replaces the handlers it installed earlier; handlers
    added by anything else are left alone.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(color=sys.stdout.isatty()))
    handlers = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _HANDLER_TAG, True)
        root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
