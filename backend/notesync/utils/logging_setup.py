"""Process-wide logging setup for the console and the store service."""

from __future__ import annotations

import logging

from notesync.utils.settings import log_level

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a single stream handler to the ``notesync`` logger."""
    logger = logging.getLogger("notesync")
    if logger.handlers:
        return logger

    resolved = level or log_level()
    logger.setLevel(getattr(logging, resolved, logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug("Logging configured at %s", logging.getLevelName(logger.level))
    return logger
