"""Logging setup and configuration."""

import logging
import sys
from typing import IO, Optional, Union

from xerrors.config import get_config
from xerrors.logging.formatters import ConsoleFormatter, JSONFormatter

LOGGER_NAME = "xerrors"

# Marks handlers installed by setup_logging so repeated calls replace them
_HANDLER_FLAG = "_xerrors_handler"


def setup_logging(
    level: Union[int, str, None] = None,
    json_format: Optional[bool] = None,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Configure the package logger with a single stream handler.

    Args:
        level: Log level (default: config log_level)
        json_format: Use JSONFormatter instead of ConsoleFormatter (default: config json_logs)
        stream: Output stream (default: sys.stderr)

    Returns:
        The configured "xerrors" logger
    """
    config = get_config()
    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if json_format is None:
        json_format = config.json_logs

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    setattr(handler, _HANDLER_FLAG, True)

    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Use this instead of logging.getLogger() to ensure consistent naming.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
