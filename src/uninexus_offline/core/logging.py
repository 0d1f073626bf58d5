"""Logging configuration."""

from __future__ import annotations

import logging

from uninexus_offline.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the package logger.

    Calling this more than once replaces the previous handler instead of stacking.
    """
    logger = logging.getLogger("uninexus_offline")
    logger.setLevel((level or settings.log_level).upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_uninexus_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._uninexus_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
