"""Logging configuration for the ocr_analyzer package.

Usage:
    from ocr_analyzer.logging import get_logger
    logger = get_logger(__name__)

The level comes from Settings.log_level (OCR_ANALYZER_LOG_LEVEL).
"""

import logging
import sys

DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

ROOT_LOGGER_NAME = "ocr_analyzer"

_logging_configured = False


def configure_logging(level: int | str | None = None) -> None:
    """Attach a stderr handler to the package logger, once.

    Args:
        level: Log level or level name. If None or unknown, uses DEFAULT_LOG_LEVEL.
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = DEFAULT_LOG_LEVEL
    elif isinstance(level, str):
        level = logging.getLevelName(level.upper()) if level else DEFAULT_LOG_LEVEL
        if not isinstance(level, int):
            level = DEFAULT_LOG_LEVEL

    log_format = LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(log_format))

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name (typically __name__)."""
    return logging.getLogger(name)
