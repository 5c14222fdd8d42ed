"""
Logging setup for the message log service
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional


class ColorFormatter(logging.Formatter):
    """Console formatter: level colour plus the emitting module and function"""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[1;31m',
    }
    RESET = '\033[0m'

    def format(self, record):
        origin = os.path.splitext(os.path.basename(record.pathname))[0]
        if record.funcName and record.funcName != "<module>":
            origin = f"{origin}.{record.funcName}"

        line = f"{super().format(record)} | {origin}"
        color = self.LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{self.RESET}" if color else line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure root logging once per process.

    Args:
        level: Root log level name (DEBUG, INFO, ...)
        log_file: Optional path for a rotating file log
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Idempotent: uvicorn reload and tests may import main more than once
    if getattr(root, "_message_log_configured", False):
        return

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ColorFormatter(
        '%(asctime)s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    ))
    root.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=1024*1024,
            backupCount=3
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s | %(levelname)-8s | %(filename)s:%(funcName)-15s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))
        root.addHandler(file_handler)

    # Reduce uvicorn noise, requests are logged by our middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root._message_log_configured = True
