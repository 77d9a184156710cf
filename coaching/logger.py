"""Logging setup shared by the coaching modules and scripts."""

import logging
import sys
from pathlib import Path
from typing import Optional
from config.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Created on first use by a file handler
LOG_DIR = Path(__file__).parent.parent / "logs"

_configured_loggers = set()


def get_log_level(level_name: Optional[str]) -> int:
    """Map a level name such as "debug" to its logging constant, INFO if unknown."""
    level = logging.getLevelName((level_name or "").upper())
    return level if isinstance(level, int) else logging.INFO


def _formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)


def _log_file_path(log_file: Optional[str]) -> Path:
    LOG_DIR.mkdir(exist_ok=True)
    default_name = settings.APP_NAME.lower().replace(" ", "_") + ".log"
    return LOG_DIR / (log_file or default_name)


def setup_logger(
    name: str,
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach handlers to a named logger once.

    Records go to stdout; outside debug mode (or when ``log_file`` is given)
    they are also appended to a file under ``logs/``.

    Args:
        name: Logger name, usually the module's ``__name__``
        level: Level name; defaults to settings.LOG_LEVEL
        log_file: File name inside the log directory

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    log_level = get_log_level(level or settings.LOG_LEVEL)
    logger.setLevel(log_level)

    if name in _configured_loggers:
        return logger

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file or not settings.DEBUG:
        handlers.append(logging.FileHandler(_log_file_path(log_file), encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(_formatter())
        logger.addHandler(handler)

    # Handlers are attached per module, so keep records away from the root logger
    logger.propagate = False
    _configured_loggers.add(name)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Module logger with the application handlers.

    Example:
        >>> from coaching.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Fetched 12 activities")
    """
    return setup_logger(name)


def set_level(level: str) -> None:
    """Change the level of every logger configured so far (used by --verbose)."""
    log_level = get_log_level(level)
    for name in _configured_loggers:
        logger = logging.getLogger(name)
        logger.setLevel(log_level)
        for handler in logger.handlers:
            handler.setLevel(log_level)


def log_exception(logger: logging.Logger, exc: Exception, context: str = ""):
    """Log an exception with its traceback, prefixed with what was being attempted."""
    message = f"{type(exc).__name__}: {exc}"
    logger.error(f"{context}: {message}" if context else message, exc_info=True)
