"""
logging_setup.py

Logging configuration for applications embedding the engine.

Library modules only create module-level loggers; handlers are installed
here, once, by the application.
"""

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_ROOT_LOGGER_NAMES = ("calibration", "space", "tracking", "pipeline", "sensor", "visualization")


def configure_logging(level: Union[int, str] = "INFO") -> logging.Handler:
    """
    Attach a stream handler to the engine's package loggers.

    Calling it again only updates the level.

    Returns
    -------
    logging.Handler
        The installed (or existing) handler.
    """
    if isinstance(level, str):
        level = level.upper()

    handler = None
    for name in _ROOT_LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for existing in logger.handlers:
            if getattr(existing, "_engine_handler", False):
                handler = existing

    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._engine_handler = True
        for name in _ROOT_LOGGER_NAMES:
            logging.getLogger(name).addHandler(handler)

    handler.setLevel(level)
    return handler
