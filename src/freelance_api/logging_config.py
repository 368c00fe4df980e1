"""Logging setup for the freelance dashboard backend."""

from __future__ import annotations

import logging

LOGGER_NAME = "freelance_api"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_HANDLER_ATTR = "_freelance_api_handler"


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stream handler to the package logger and set its level.

    Calling this more than once only updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if not any(getattr(h, _HANDLER_ATTR, False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)
    return logger
