"""Logging setup for the scheduler CLI."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOGGER_NAME = "task_scheduler"
LEVEL_ENV_VAR = "TASK_SCHEDULER_LOG_LEVEL"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Level comes from the argument, then TASK_SCHEDULER_LOG_LEVEL, then WARNING.
    Calling it again only updates the level.
    """
    level = level or os.getenv(LEVEL_ENV_VAR, "WARNING")
    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
