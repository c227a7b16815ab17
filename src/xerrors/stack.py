"""
Stack-capturing error layers.

A trace is a chain of exceptions built from three kinds of layer:

    Fundamental  - root of a chain: a message and a stack snapshot
    WithStack    - wraps a cause, adding a stack snapshot only
    WithMessage  - wraps a cause, adding a message only

Every layer exposes ``cause`` so the chain can be descended, and
``previous`` for an older trace that this chain superseded. The free
functions return None when handed None, so "no error" propagates without
allocating anything.
"""

import os
import traceback
from typing import Any, List, Optional

from xerrors.config import current_config

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__)) + os.sep

SUPERSEDED_SEPARATOR = "During handling of the above error, another error occurred:"


def capture_stack(depth: Optional[int] = None) -> traceback.StackSummary:
    """
    Snapshot the caller's stack, innermost frame last.

    Frames belonging to this package are dropped so the snapshot starts at
    the code that asked for it.

    Args:
        depth: Maximum number of frames kept (default: stack_depth of the
            loaded config; capturing never loads config itself)
    """
    if depth is None:
        depth = current_config().stack_depth
    frames = [
        frame
        for frame in traceback.extract_stack()
        if not os.path.abspath(frame.filename).startswith(_PACKAGE_DIR)
    ]
    return traceback.StackSummary.from_list(frames[-depth:])


def format_message(fmt: str, args: tuple) -> str:
    """Apply %-style substitution, leaving fmt untouched when there are no args."""
    if not args:
        return fmt
    return fmt % args


class TracedError(Exception):
    """Base class for trace layers."""

    cause: Optional[BaseException] = None
    previous: Optional[BaseException] = None


class Fundamental(TracedError):
    """Root of a trace: a message captured together with the stack."""

    def __init__(self, message: str, stack: Optional[traceback.StackSummary] = None):
        super().__init__(message)
        self.message = message
        self.stack = stack if stack is not None else capture_stack()

    def __str__(self) -> str:
        return self.message


class WithStack(TracedError):
    """Stack snapshot on top of an existing error."""

    def __init__(self, cause: BaseException, stack: Optional[traceback.StackSummary] = None):
        super().__init__(cause)
        self.cause = cause
        self.stack = stack if stack is not None else capture_stack()

    def __str__(self) -> str:
        return _flatten(self)


class WithMessage(TracedError):
    """Message annotation on top of an existing error. Captures no stack."""

    def __init__(self, cause: BaseException, message: str):
        super().__init__(message)
        self.cause = cause
        self.message = message

    def __str__(self) -> str:
        return _flatten(self)


def _flatten(err: BaseException) -> str:
    """Join the messages of consecutive layers, outermost first, then the root text."""
    parts: List[str] = []
    while isinstance(err, (WithStack, WithMessage)):
        if isinstance(err, WithMessage):
            parts.append(err.message)
        err = err.cause
    parts.append(str(err))
    return ": ".join(parts)


def new(message: str) -> Fundamental:
    return Fundamental(message)


def wrap(err: Optional[BaseException], message: str) -> Optional[WithStack]:
    """Annotate err with a message and a fresh stack snapshot."""
    if err is None:
        return None
    return WithStack(WithMessage(err, message))


def wrapf(err: Optional[BaseException], fmt: str, *args: Any) -> Optional[WithStack]:
    if err is None:
        return None
    return WithStack(WithMessage(err, format_message(fmt, args)))


def with_message(err: Optional[BaseException], message: str) -> Optional[WithMessage]:
    """Annotate err with a message only."""
    if err is None:
        return None
    return WithMessage(err, message)


def with_messagef(err: Optional[BaseException], fmt: str, *args: Any) -> Optional[WithMessage]:
    if err is None:
        return None
    return WithMessage(err, format_message(fmt, args))


def with_stack(err: Optional[BaseException]) -> Optional[WithStack]:
    """Annotate err with a stack snapshot only."""
    if err is None:
        return None
    return WithStack(err)


def contains(chain: Optional[BaseException], target: BaseException) -> bool:
    """Check whether target is one of the layers reachable through ``cause``."""
    seen = set()
    while chain is not None and id(chain) not in seen:
        if chain is target:
            return True
        seen.add(id(chain))
        chain = getattr(chain, "cause", None)
    return False


def render(err: Optional[BaseException], verbose: bool = False) -> str:
    """
    Render a trace.

    Plain mode is the flattened message. Verbose mode lists the chain from
    the root outwards: the root error (with its Python traceback if it was
    raised), then every layer's message or captured frames.
    """
    if err is None:
        return ""
    if not verbose:
        return str(err)
    return "\n".join(_verbose_lines(err))


def _format_stack(stack: traceback.StackSummary) -> List[str]:
    return "".join(stack.format()).rstrip("\n").splitlines()


def _format_root(err: BaseException) -> List[str]:
    if err.__traceback__ is not None:
        text = "".join(traceback.format_exception(type(err), err, err.__traceback__))
    else:
        text = "".join(traceback.format_exception_only(type(err), err))
    return text.rstrip("\n").splitlines()


def _verbose_lines(err: BaseException) -> List[str]:
    # Explicit work stack: an item is an error still to expand or a block of
    # finished lines. Chains may be thousands of layers deep.
    lines: List[str] = []
    pending: List[Any] = [err]
    while pending:
        item = pending.pop()
        if isinstance(item, list):
            lines.extend(item)
            continue

        layers: List[TracedError] = []
        root = item
        while isinstance(root, (WithStack, WithMessage)):
            layers.append(root)
            root = root.cause

        for layer in layers:
            if isinstance(layer, WithMessage):
                pending.append([layer.message])
            else:
                pending.append(_format_stack(layer.stack))
        if isinstance(root, Fundamental):
            pending.append([root.message] + _format_stack(root.stack))
            layers.append(root)
        else:
            pending.append(_format_root(root))

        # Only trace layers carry a superseded trace; a foreign root's own
        # "previous" attribute is not ours to read.
        for layer in reversed(layers):
            if layer.previous is not None:
                pending.append(["", SUPERSEDED_SEPARATOR, ""])
                pending.append(layer.previous)
    return lines
