"""Logger factory shared by the gateway modules.

Usage:
    from logger import get_logger
    logger = get_logger(__name__)
"""

import logging
import os
import sys
from typing import Optional

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a named logger with a single stdout handler.

    The level defaults to the LOG_LEVEL environment variable (INFO if unset).
    """
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger = logging.getLogger(name)

    # Avoid duplicate handlers when a module is imported more than once
    if not logger.handlers:
        logger.setLevel(resolved)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
