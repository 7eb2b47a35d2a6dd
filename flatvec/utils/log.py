"""Logging setup for command-line entry points."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "WARNING", *, logger_name: str = "flatvec") -> logging.Logger:
    """Attach a stream handler to the package logger at ``level``.

    Calling this more than once only updates the level.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
