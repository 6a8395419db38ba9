"""Centralize logger creation.

'why': provide a unified logging approach configured once per translator
"""
from __future__ import annotations

import logging

from ._models import LogLevel


_LOGGER_NAME = "deepl_client"
_logger: logging.Logger | None = None

_LEVELS: dict[LogLevel, int] = {
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


def get_logger() -> logging.Logger:
    """Return the package logger, creating it if necessary."""

    global _logger
    if _logger is not None:
        return _logger
    logger = logging.getLogger(_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s deepl_client: %(message)s",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    logger.propagate = False
    _logger = logger
    return logger


def set_log_level(level: LogLevel) -> None:
    """Apply the provided log level to the package logger."""

    logger = get_logger()
    logger.setLevel(_LEVELS.get(level, logging.INFO))


def redacted(secret: str) -> str:
    """Return a short, non-reversible preview of a credential for log lines."""

    if len(secret) <= 8:
        return "***"
    return f"{secret[:4]}...{secret[-2:]}"
