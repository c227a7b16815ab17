"""
Structured logging module.

Provides JSON and console logging that understands classified errors.
"""

from xerrors.logging.formatters import ConsoleFormatter, JSONFormatter
from xerrors.logging.setup import get_logger, setup_logging
from xerrors.logging.utilities import log_exception, log_with_context

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Utilities
    "log_with_context",
    "log_exception",
]
