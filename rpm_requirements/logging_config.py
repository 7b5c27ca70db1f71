"""Logging configuration for rpm-requirements."""

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict

LOGGER_NAME = "rpm_requirements"

_TEXT_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", structured: bool | None = None) -> logging.Logger:
    """
    Set up the package logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        structured: Emit JSON lines instead of text. Defaults to the
            LOG_FORMAT environment variable being "json".

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    if structured is None:
        structured = os.getenv("LOG_FORMAT", "text").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if structured else logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    # Records stop at our handler; the root logger belongs to the embedding application.
    logger.propagate = False

    try:
        set_log_level(level)
    except ValueError:
        set_log_level("INFO")
        logger.warning(f"Unknown log level '{level}', using INFO")
    return logger


def set_log_level(level: str) -> None:
    """Change the level of the package logger and its handlers.

    Raises:
        ValueError: If the level name is unknown
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric)
    for handler in logger.handlers:
        handler.setLevel(numeric)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


# Global logger instance
logger = setup_logging(os.getenv("LOG_LEVEL", "INFO"))
