"""Shared logging helpers."""

from __future__ import annotations

import logging
import os
from typing import Final

_LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_LEVEL_ENV: Final[str] = "LAZYSCENES_LOG_LEVEL"


def parse_level(level_str: str | None, default: int = logging.INFO) -> int:
    if not level_str:
        return default
    level_str = level_str.strip().upper()
    mapping = {
        "CRITICAL": logging.CRITICAL,
        "ERROR": logging.ERROR,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "INFO": logging.INFO,
        "DEBUG": logging.DEBUG,
        "NOTSET": logging.NOTSET,
    }
    return mapping.get(level_str, default)


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Return a logger that emits to stderr.

    - If `level` is provided it takes precedence.
    - Otherwise `LAZYSCENES_LOG_LEVEL` is consulted (e.g. DEBUG, INFO).
    - Falls back to INFO.
    """

    chosen_level = level if level is not None else parse_level(os.environ.get(_LEVEL_ENV))

    logger = logging.getLogger(name)
    # Re-create handlers so repeated calls keep one handler with a consistent format.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(chosen_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(chosen_level)
    logger.propagate = False
    return logger
