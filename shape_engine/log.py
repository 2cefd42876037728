"""
Logging setup for the shape engine.

Components never configure logging themselves: each one takes an optional
logger in its constructor and falls back to a module-level named logger.
Applications call setup_logging() once at startup.
"""

import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "shape_engine.log"

_configured = False


def setup_logging(
    level: int | str = logging.INFO,
    log_dir: Optional[str | os.PathLike] = None,
) -> logging.Logger:
    """
    Configure console (and optionally file) logging for the package logger.

    Calling this more than once is a no-op. If the log directory cannot be
    created, logging falls back to the console only.

    Args:
        level: Logging level (int or level name)
        log_dir: Directory for the log file, or None for console only

    Returns:
        The package logger
    """
    global _configured
    logger = logging.getLogger("shape_engine")
    if _configured:
        return logger

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir is not None:
        try:
            directory = Path(log_dir)
            directory.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(directory / LOG_FILE_NAME, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning("Could not open log file in %s: %s", log_dir, e)

    _configured = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a named logger."""
    return logging.getLogger(name)
