import logging
from typing import Optional, Union

from .config import get_settings

PACKAGE_LOGGER = "extended_future"
LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

stream_handler = None


def setup_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Calling it again replaces the handler rather than stacking a second one.
    """
    global stream_handler
    logger = logging.getLogger(PACKAGE_LOGGER)
    if level is None:
        level = get_settings().LOG_LEVEL
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
    if stream_handler is not None:
        logger.removeHandler(stream_handler)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)
    logger.debug("logging initialized at level %s", logging.getLevelName(logger.level))
    return logger


def close_logging() -> None:
    global stream_handler
    if stream_handler is not None:
        logging.getLogger(PACKAGE_LOGGER).removeHandler(stream_handler)
        stream_handler.close()
        stream_handler = None
