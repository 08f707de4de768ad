"""
Shared service logger.

Every module logs through the single ``logger`` defined here::

    from logger import logger
    logger.info("Fetched %d records", count)
"""

import logging
import sys

from config import LOG_LEVEL

LOGGER_NAME = "mongo_datasource"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _build_logger() -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    return log


logger = _build_logger()
