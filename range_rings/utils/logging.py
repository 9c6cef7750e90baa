"""
Dual-sink logging for the range rings viewer.

Logs to stdout AND a log file.
"""

import sys
import logging
from pathlib import Path
from typing import Optional


# Log file paths (in order of preference)
LOG_FILE_PATHS = [
    "/var/log/range_rings.log",
    "/tmp/range_rings.log",
]

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _first_writable(paths) -> Optional[str]:
    for path in paths:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'a'):
                pass
            return path
        except OSError:
            continue
    return None


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None,
                  log_format: Optional[str] = None) -> logging.Logger:
    """
    Setup dual-sink logging.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
        log_file: Override log file path. If None, uses the first writable default.
        log_format: Override log format string.

    Returns:
        The range_rings package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    log_format = log_format or DEFAULT_LOG_FORMAT

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(log_format))
    handlers.append(console_handler)

    file_path = log_file or _first_writable(LOG_FILE_PATHS)
    if file_path:
        try:
            file_handler = logging.FileHandler(file_path, mode='a')
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(log_format))
            handlers.append(file_handler)
        except OSError as e:
            print(f"Warning: Could not setup file logging at {file_path}: {e}",
                  file=sys.stderr)

    logging.basicConfig(level=level, format=log_format, handlers=handlers)

    logger = logging.getLogger("range_rings")
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name (typically __name__)."""
    return logging.getLogger(name)
