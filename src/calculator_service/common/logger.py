"""Shared logger for the calculator service."""
import logging
from typing import Union

LOGGER_NAME = "calculator_service"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _build_logger() -> logging.Logger:
    """
    Create the package logger with a single stream handler.

    Re-importing the module never stacks a second handler.

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(LOGGER_NAME)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(logging.INFO)
    return log


logger: logging.Logger = _build_logger()


def set_log_level(level: Union[str, int]) -> None:
    """
    Change the verbosity of the package logger.

    :param level: Level name (e.g. "DEBUG") or numeric logging level
    :raises ValueError: If the level name is unknown
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric
    logger.setLevel(level)
