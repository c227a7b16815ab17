"""Logging utility functions."""

import logging
from typing import Any

from xerrors.errors import classification_of
from xerrors.types import UNCLASSIFIED

# Reserved LogRecord attribute names that cannot be used in extra dict
_RESERVED_LOG_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "asctime",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)

MAX_ERROR_MESSAGE_LENGTH = 500


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Additional context fields (error_code, operation, etc.)
                  Note: exc_info=True is supported and handled specially.

    Example:
        log_with_context(
            logger, logging.DEBUG, "Classified at boundary",
            error_code=500,
            operation="load_user",
        )
    """
    # exc_info is a direct parameter to log(), not extra
    exc_info = kwargs.pop("exc_info", None)

    extra = {k: v for k, v in kwargs.items() if k not in _RESERVED_LOG_KEYS}

    logger.log(level, msg, exc_info=exc_info, extra=extra)


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log exception with its classification and optional traceback.

    The nearest classification on the cause chain becomes error_code and
    error_message; unclassified errors log their text as error_message,
    truncated to 500 characters.

    Example:
        try:
            save(record)
        except Exception as e:
            log_exception(logger, e, "Save failed", operation="save")
    """
    code, classification = classification_of(exc)
    if code != UNCLASSIFIED:
        kwargs.setdefault("error_code", code)

    error_msg = classification or str(exc)
    if len(error_msg) > MAX_ERROR_MESSAGE_LENGTH:
        error_msg = error_msg[:MAX_ERROR_MESSAGE_LENGTH] + "..."
    kwargs["error_message"] = error_msg

    if include_traceback:
        log_with_context(logger, level, msg, exc_info=exc, **kwargs)
    else:
        log_with_context(logger, level, msg, **kwargs)
