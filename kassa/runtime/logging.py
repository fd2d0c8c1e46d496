"""Centralized logging configuration for kassa.

Usage:
    from kassa.runtime import get_logger
    logger = get_logger(__name__)

    logger.debug("Detailed debug info")
    logger.info("General info")

Environment variables:
    KASSA_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR). Default: INFO
    KASSA_LOG_FILE: Optional path; log records are appended there as well as to stderr.
"""

import logging
import os
import sys

NAMESPACE = "kassa"

# Default log level, can be overridden by environment variable
DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"

# httpx logs full request URLs at INFO, which include the Telegram bot token.
NOISY_LOGGERS = ("httpx", "httpcore", "telegram.ext", "apscheduler")

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def _level_from_env() -> int:
    return _LEVELS.get(os.environ.get("KASSA_LOG_LEVEL", "").upper(), DEFAULT_LOG_LEVEL)


def configure_logging(level: int | None = None) -> None:
    """Configure the kassa namespace logger once per process.

    Args:
        level: Log level to use. If None, reads KASSA_LOG_LEVEL or uses DEFAULT_LOG_LEVEL.
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = _level_from_env()

    formatter = logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_file = os.environ.get("KASSA_LOG_FILE")
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger(NAMESPACE)
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
    root_logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the kassa namespace.

    Args:
        name: Module name, typically __name__

    Returns:
        Configured logger instance
    """
    configure_logging()

    if name == NAMESPACE or name.startswith(f"{NAMESPACE}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{NAMESPACE}.{name}")


def set_log_level(level: int) -> None:
    """Change the log level at runtime.

    Args:
        level: New log level (e.g., logging.DEBUG)
    """
    logger = logging.getLogger(NAMESPACE)
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT)
    for handler in logger.handlers:
        handler.setFormatter(formatter)
