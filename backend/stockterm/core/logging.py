"""Logging setup for the indicator engine."""

import logging
import sys
from typing import Optional, Union

from stockterm.core.config import settings

LOGGER_NAME = "stockterm"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Calling this more than once replaces the level but never stacks handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    resolved = level if level is not None else settings.log_level
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO

    if not any(getattr(h, "_stockterm_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._stockterm_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    logger.setLevel(resolved)
    return logger
