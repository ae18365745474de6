"""Logging configuration for the API process."""

from __future__ import annotations

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: int | str = logging.INFO, format_string: str | None = None) -> None:
    """Configure the root logger and align uvicorn and application loggers."""

    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "backinstock"):
        logging.getLogger(name).setLevel(level)


__all__ = ["configure_logging"]
