"""Process-wide logging context.

The CLI builds one logger at startup and hands it to every component through
StewContext; nothing below the CLI configures logging itself.
"""

import logging
import sys
from typing import TextIO

LOGGER_NAME = "stew"
LOG_FORMAT = "time=%(asctime)s level=%(levelname)s msg=%(message)s"


def configure_logging(*, verbose: bool, stream: TextIO | None = None) -> logging.Logger:
    """Create the stew logger writing key=value lines to stderr.

    Args:
        verbose: Log at DEBUG instead of INFO
        stream: Destination stream (defaults to sys.stderr)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
