"""Logging setup: a daily-rotating file log at debug level."""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from os import PathLike

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_FORMAT = "[%(asctime)s.%(msecs)03d] [%(name)s] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(path: str | PathLike[str], name: str) -> logging.Logger:
    """Return logger ``name`` writing to ``path``, rotated at midnight.

    The logger records debug and above; every record is flushed as written.
    Calling this again for the same name replaces the previous handlers.
    """
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = TimedRotatingFileHandler(path, when="midnight", encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger