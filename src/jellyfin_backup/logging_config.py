"""Logging configuration for Jellyfin Backup.

Scheduled backups run without a console, so the log file in the program
directory is the only record of what happened. The console handler is
added for --debug runs, or when the log file cannot be opened.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "jellyfin_backup.log"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"


def setup_logging(debug: bool = False, log_dir: Optional[Path] = None) -> logging.Logger:
    """Configure the jellyfin_backup logger.

    Args:
        debug: If True, also log to stdout at DEBUG level
        log_dir: Directory for the log file, defaults to the program directory

    Returns:
        The application's top-level logger
    """
    if log_dir is None:
        from .config.paths import AppPaths
        log_dir = AppPaths.program_dir()

    logger = logging.getLogger("jellyfin_backup")
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_error = None
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")
    except OSError as e:
        file_error = e
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    if debug or file_error is not None:
        console_handler = logging.StreamHandler(sys.stdout if debug else sys.stderr)
        console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    if file_error is not None:
        logger.warning(f"Cannot write log file in {log_dir}, logging to console: {file_error}")

    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger for one module, e.g. get_logger('archive_tool')."""
    return logging.getLogger(f"jellyfin_backup.{name}")
