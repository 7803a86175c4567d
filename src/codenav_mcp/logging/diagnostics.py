"""Diagnostic logging on stderr; stdout carries protocol frames only."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "codenav_mcp"
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_diagnostics(level: str = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stderr handler to the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
