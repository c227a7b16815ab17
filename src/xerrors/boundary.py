"""
Helpers for the edges of a call graph.

ensure_classified() applies the boundary policy: whatever reaches a
response or a log sink leaves with a code and message, and an error that
was never classified keeps its trace under the internal code.

handle() declares one handler for a whole block instead of repeating the
same annotate-and-log code after every call:

    with handle("copy %s %s", src, dst, logger=logger):
        data = read(src)
        write(dst, data)
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from xerrors.config import get_config
from xerrors.errors import fail, failf, wrapf
from xerrors.logging.utilities import log_exception, log_with_context
from xerrors.stack import format_message
from xerrors.types import UNCLASSIFIED, ClassifiedError

logger = logging.getLogger(__name__)


def ensure_classified(
    err: Optional[BaseException],
    code: Optional[int] = None,
    message: Optional[str] = None,
) -> Optional[ClassifiedError]:
    """
    Guarantee a classification for an error leaving the system.

    Args:
        err: Error reaching the boundary
        code: Code for an unclassified error (default: config internal_code)
        message: Message for an unclassified error (default: config internal_message)

    Returns:
        err itself when it is already classified, None for None, otherwise
        a new XError holding err's trace
    """
    if err is None:
        return None
    if isinstance(err, ClassifiedError) and err.code != UNCLASSIFIED:
        return err

    config = get_config()
    classified = fail(
        code if code is not None else config.internal_code,
        message if message is not None else config.internal_message,
    )
    log_with_context(
        logger,
        logging.DEBUG,
        "Classifying error at boundary",
        error_code=classified.code,
        error_type=type(err).__name__,
    )

    if isinstance(err, ClassifiedError):
        # Unclassified: carry its raw trace, there is no classification to fold in
        if err.trace is None:
            return classified
        return classified.with_stack(err.trace)
    return classified.with_stack(err)


@contextmanager
def handle(
    message: str,
    *args: Any,
    code: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> Iterator[None]:
    """
    Annotate every exception raised in the block with one message.

    Works as a context manager and as a decorator. Exceptions are re-raised
    as wrapf(exc, message, *args), or, when code is given, as a new
    classified error over exc. Only Exception subclasses are intercepted.

    Args:
        message: Annotation, %-formatted with args
        code: Classify the failure with this code
        logger: Log the failure once through log_exception
    """
    try:
        yield
    except Exception as exc:
        if code is None:
            wrapped: Optional[BaseException] = wrapf(exc, message, *args)
        else:
            wrapped = failf(code, message, *args).with_stack(exc)

        if logger is not None:
            log_exception(logger, wrapped, format_message(message, args))

        if wrapped is exc:
            raise
        raise wrapped from exc


