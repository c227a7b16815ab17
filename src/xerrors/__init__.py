"""
xerrors: classified errors with mergeable traces.

An error is classified once, with a code and a message, where a business
failure is first recognised. On its way up it is wrapped with annotations
that accumulate in a trace without ever re-capturing the stack for the same
error. At the boundary, the code and message are read back, or the original
low-level error is recovered with cause().

Modules:
    errors    - XError and the fail/wrap/with_stack/cause functions
    stack     - Stack-capturing error layers the traces are built from
    boundary  - ensure_classified() and the handle() block handler
    config    - YAML/environment configuration
    logging   - JSON and console logging aware of classified errors
    types     - ClassifiedError and Causer protocols
"""

from .boundary import ensure_classified, handle
from .config import ErrorsConfig, get_config, load_config, reset_config, set_config
from .errors import (
    DEBUG_CONTEXT_FORMAT,
    XError,
    cause,
    classification_of,
    debug_context,
    fail,
    failf,
    render,
    with_stack,
    wrap,
    wrapf,
)
from .types import UNCLASSIFIED, Causer, ClassifiedError

__version__ = "0.1.0"

__all__ = [
    # Types
    "UNCLASSIFIED",
    "Causer",
    "ClassifiedError",
    "XError",
    # Construction
    "fail",
    "failf",
    # Annotation
    "wrap",
    "wrapf",
    "with_stack",
    # Inspection
    "cause",
    "classification_of",
    "debug_context",
    "render",
    "DEBUG_CONTEXT_FORMAT",
    # Boundary
    "ensure_classified",
    "handle",
    # Configuration
    "ErrorsConfig",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
]
