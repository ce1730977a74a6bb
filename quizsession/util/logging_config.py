from __future__ import annotations

"""Logging configuration helpers."""

import logging
from logging import Logger


def configure_logging(level: int | str = logging.WARNING) -> Logger:
    """Configure basic logging for the application and return the package logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("quizsession")
