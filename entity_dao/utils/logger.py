"""
Logger utility for consistent logging across the entity-dao package.

This module provides a standardized way to create and configure loggers,
ensuring consistent log formatting and behavior.

Features:
- Consistent log format across all modules
- Configurable log level based on environment variables
- Stream handler to stdout for easy viewing in console/terminal
- Prevents duplicate log handlers when called multiple times
"""

import os
import logging
import sys
from typing import Optional

# Default log format
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
VERBOSE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _level_from_env() -> int:
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, log_level_name, logging.INFO)


def _debug_mode() -> bool:
    return os.getenv("DEBUG", "False").lower() == "true"


def setup_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Configure global logging for applications using the package.

    Args:
        level: Logging level for the root logger. Defaults to LOG_LEVEL
            from the environment.

    Returns:
        logging.Logger: The package logger
    """
    debug_mode = _debug_mode()
    if level is None:
        level = logging.DEBUG if debug_mode else _level_from_env()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates when reloading
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        VERBOSE_FORMAT if debug_mode else DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    # SQL statements are only echoed in debug mode
    logging.getLogger('sqlalchemy.engine').setLevel(
        logging.INFO if debug_mode else logging.WARNING
    )

    logger = logging.getLogger('entity_dao')
    logger.info(f"Logging initialized with level {logging.getLevelName(level)}")

    return logger


def get_logger(name: Optional[str] = None, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger instance with consistent formatting.

    If neither the logger nor the root logger has handlers yet, a stdout
    handler is attached so messages are visible without setup_logging().

    Args:
        name: Optional name for the logger. Using __name__ creates a logger
            hierarchy that matches the module structure.
        level: The logging level to set. If None, uses LOG_LEVEL from the
            environment.

    Returns:
        logging.Logger: Configured logger instance
    """
    if level is None:
        level = _level_from_env()

    logger = logging.getLogger(name or __name__)
    logger.setLevel(level)

    root_logger = logging.getLogger()
    if not logger.handlers and not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT))
        logger.addHandler(handler)

    return logger
