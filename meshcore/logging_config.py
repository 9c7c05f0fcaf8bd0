"""
Logging Configuration
Console logging for the 'meshcore' namespace, used by the scripts.

Library modules only call logging.getLogger(__name__); nothing is printed
unless an application (or setup_logging) attaches a handler.
"""
import logging
import sys
from typing import Optional, TextIO, Union

from .config import LOG_DATEFMT, LOG_FORMAT

# Marks handlers owned by setup_logging, so a second call replaces only those.
_HANDLER_NAME = "meshcore-console"


def setup_logging(level: Union[int, str] = logging.INFO, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Send 'meshcore' log records to `stream` (stderr by default).

    Args:
        level: logging level, as a number or a name such as "DEBUG"
        stream: text stream for the records; stdout is left to script output

    Returns:
        The 'meshcore' logger.
    """
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = value

    logger = logging.getLogger("meshcore")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(handler)
    return logger
