"""
Centralized logging configuration.
"""
import logging
import logging.handlers
from pathlib import Path
from .constants import (
    LOG_LEVEL, LOG_FORMAT, LOG_FILE,
    LOG_MAX_SIZE_MB, LOG_BACKUP_COUNT
)

ROOT_LOGGER_NAME = 'bookmaker'


def setup_logger(name: str = None) -> logging.Logger:
    """
    Get or create a configured logger.

    Module loggers are children of the 'bookmaker' logger, so handlers are
    attached once at the root and records propagate up to it.

    Usage:
        from config.logging_config import setup_logger
        logger = setup_logger(__name__)
        logger.info("Message here")

    Args:
        name: Logger name. If None, uses 'bookmaker'.

    Returns:
        Configured logging.Logger instance.
    """
    if name and name != ROOT_LOGGER_NAME:
        _configure_root()
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return _configure_root()


def _configure_root() -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    # Console handler
    console = logging.StreamHandler()
    console.setLevel(getattr(logging, LOG_LEVEL))
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console)

    # File handler with rotation - DEBUG level
    log_path = Path(LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        LOG_FILE,
        maxBytes=LOG_MAX_SIZE_MB * 1024 * 1024,
        backupCount=LOG_BACKUP_COUNT,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    return logger


def get_logger(name: str = None) -> logging.Logger:
    """
    Alias for setup_logger for convenience.

    Usage:
        from config.logging_config import get_logger
        logger = get_logger(__name__)
    """
    return setup_logger(name)


# Singleton logger for quick imports
# Usage: from config.logging_config import logger
logger = setup_logger(ROOT_LOGGER_NAME)
