"""Package-wide logger."""
import logging
import sys
from typing import Union

LOGGER_NAME = "shunting_yard"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(processName)s | %(message)s"

logger: logging.Logger = logging.getLogger(LOGGER_NAME)

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(logging.INFO)


def configure_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Set the level of the package logger.

    :param level: Logging level name ("DEBUG", "INFO", ...) or numeric value

    :return: The configured package logger
    :rtype: logging.Logger
    :raises ValueError: If the level name is unknown
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric
    logger.setLevel(level)
    return logger
