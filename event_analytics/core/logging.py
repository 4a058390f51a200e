import logging
import sys
from logging.handlers import RotatingFileHandler
import os

from event_analytics.core.config import settings


def get_logger(name):
    """
    Get a configured logger instance with console and (optionally) file handlers.

    Args:
        name (str): The name of the logger, typically __name__ of the calling module

    Returns:
        logging.Logger: Configured logger instance
    """
    # One logger per module name
    logger = logging.getLogger(name)
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    # Handlers are attached once per logger name
    if logger.handlers:
        return logger

    # File lines carry the logger name; console lines stay short
    file_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    # Rotating file output (disabled when LOG_DIR is empty)
    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)

        file_handler = RotatingFileHandler(
            filename=os.path.join(settings.LOG_DIR, "analytics.log"),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Console output
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    return logger


def mask_api_key(api_key):
    """Return a log-safe form of an API key (prefix and first characters only)."""
    if not api_key:
        return "<none>"
    return f"{api_key[:7]}..."
