"""Logging configuration for csgeom.

The library never configures logging on import; the ``csgeom`` logger only
carries a ``NullHandler``.  Applications and scripts call ``setup_logging``
to see the debug trail of locates and trace events.

Copyright (c) 2025 Richard DeVaul
MIT License
"""

import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "csgeom"


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``csgeom`` logger with a console handler.

    Args:
        level: Logging level, as a number or a name such as ``"DEBUG"``.
        log_file: Optional path to also write the log to.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # replace handlers from a previous call rather than stacking them
    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


__all__ = ['LOGGER_NAME', 'setup_logging']
