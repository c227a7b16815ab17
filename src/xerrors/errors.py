"""
Classified errors.

An XError carries a classification (code and message) set once at
construction, plus a trace that grows as the error is wrapped on its way up
the call stack.

Wrapping rules:
    - wrapping None gives None
    - wrapping the error itself only adds a message layer; no second stack
      snapshot is ever taken for the same error
    - wrapping a different classified error folds its code and message into
      the trace as "<Error code>: message"; the outer classification stays
    - wrapping a plain exception captures it with a message and a stack

Usage:
    try:
        row = load(key)
    except KeyError as e:
        raise fail(404, "record not found").wrap(e, f"load {key}")
"""

import json
from typing import Any, Optional, Tuple

from xerrors import stack
from xerrors.types import UNCLASSIFIED, Causer, ClassifiedError

DEBUG_CONTEXT_FORMAT = "<Error {code}>: {message}"


def debug_context(err: ClassifiedError) -> str:
    """Format a classification for folding into another error's trace."""
    return DEBUG_CONTEXT_FORMAT.format(code=err.code, message=err.message)


class XError(Exception):
    """
    Error value combining a classification with an accumulated trace.

    Instances are mutated in place by wrap(), wrapf() and with_stack(); a
    single instance must not be wrapped from several threads at once.
    Reading code, message, trace or str() is safe once wrapping is done.

    Attributes:
        code: Classification code, 0 when unclassified
        message: Classification message, "" when none was set
        trace: Stack-captured error chain, None before any wrap
    """

    def __init__(
        self,
        code: int = UNCLASSIFIED,
        message: str = "",
        trace: Optional[BaseException] = None,
    ):
        super().__init__(code, message)
        self._code = code
        self._message = message
        self._trace = trace

    @property
    def code(self) -> int:
        return self._code

    @property
    def message(self) -> str:
        return self._message

    @property
    def trace(self) -> Optional[BaseException]:
        return self._trace

    @property
    def cause(self) -> Optional[BaseException]:
        """The error below the top layer of the trace, never code/message."""
        if self._trace is None:
            return None
        parent = getattr(self._trace, "cause", None)
        return parent if parent is not None else self._trace

    def wrap(self, err: Optional[BaseException], annotation: str) -> Optional["XError"]:
        """
        Annotate this error's trace with err and a message.

        Returns self, or None when err is None, so calls chain:
            raise fail(409, "conflict").wrap(e, "insert user")
        """
        if err is None:
            return None

        if isinstance(err, ClassifiedError):
            if err is self:
                if self._trace is None:
                    self._trace = stack.new(annotation)
                else:
                    self._trace = stack.with_message(self._trace, annotation)
                return self
            self._replace_trace(stack.with_message(self._fold(err), annotation))
        else:
            self._replace_trace(stack.wrap(err, annotation))
        return self

    def wrapf(self, err: Optional[BaseException], fmt: str, *args: Any) -> Optional["XError"]:
        if err is None:
            return None
        return self.wrap(err, stack.format_message(fmt, args))

    def with_stack(self, err: Optional[BaseException]) -> Optional["XError"]:
        """
        Attach a stack snapshot over err, without a message.

        Passing the error itself is a no-op.
        """
        if err is None:
            return None
        if err is self:
            return self

        if isinstance(err, ClassifiedError):
            self._replace_trace(self._fold(err))
        else:
            self._replace_trace(stack.with_stack(err))
        return self

    def _fold(self, other: ClassifiedError) -> BaseException:
        context = debug_context(other)
        if other.trace is None:
            return stack.new(context)
        return stack.with_message(stack.with_stack(other.trace), context)

    def _replace_trace(self, new_trace: BaseException) -> None:
        # An older trace that is not part of the new chain is kept as `previous`.
        old_trace = self._trace
        if old_trace is not None and not stack.contains(new_trace, old_trace):
            new_trace.previous = old_trace
        self._trace = new_trace

    def __str__(self) -> str:
        if self._trace is None:
            return ""
        return str(self._trace)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self._code!r}, message={self._message!r})"

    def __format__(self, spec: str) -> str:
        """
        Render by format spec.

        "", "s", "v": flattened trace message
        "q":          the same, double-quoted
        "+v":         full trace with stack frames and folded classifications,
                      newline-terminated
        """
        if spec == "+v":
            return stack.render(self._trace, verbose=True) + "\n"
        if spec in ("", "s", "v"):
            return str(self)
        if spec == "q":
            return json.dumps(str(self), ensure_ascii=False)
        raise ValueError(
            f"Unknown format code {spec!r} for object of type {type(self).__name__!r}"
        )


def fail(code: int, message: str) -> XError:
    """Classify a new error. The trace stays empty until it is wrapped."""
    return XError(code=code, message=message)


def failf(code: int, fmt: str, *args: Any) -> XError:
    return XError(code=code, message=stack.format_message(fmt, args))


def wrap(err: Optional[BaseException], message: str) -> Optional[ClassifiedError]:
    """
    Annotate any error with a message.

    A classified error is annotated in place (a self-wrap); a plain exception
    becomes an unclassified XError whose trace holds it.
    """
    if err is None:
        return None
    if isinstance(err, ClassifiedError):
        return err.wrap(err, message)
    return XError(trace=stack.wrap(err, message))


def wrapf(err: Optional[BaseException], fmt: str, *args: Any) -> Optional[ClassifiedError]:
    if err is None:
        return None
    if isinstance(err, ClassifiedError):
        return err.wrapf(err, fmt, *args)
    return XError(trace=stack.wrapf(err, fmt, *args))


def with_stack(err: Optional[BaseException]) -> Optional[ClassifiedError]:
    """Attach a stack snapshot to any error; a no-op for classified errors."""
    if err is None:
        return None
    if isinstance(err, ClassifiedError):
        return err.with_stack(err)
    return XError(trace=stack.with_stack(err))


def cause(err: Optional[BaseException]) -> Optional[BaseException]:
    """
    Descend to the deepest underlying error.

    Follows ``cause`` while the error exposes one. If the error is None,
    None is returned without further investigation. A chain that loops back
    on itself stops at the last error before the repeat.
    """
    seen = set()
    while isinstance(err, Causer):
        seen.add(id(err))
        parent = err.cause
        if not isinstance(parent, BaseException) or id(parent) in seen:
            break
        err = parent
    return err


def classification_of(err: Optional[BaseException]) -> Tuple[int, str]:
    """
    Find the nearest classification, starting from the outermost error.

    Returns:
        (code, message), or (UNCLASSIFIED, "") when no error on the cause
        chain is classified
    """
    seen = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        if isinstance(err, ClassifiedError) and err.code != UNCLASSIFIED:
            return err.code, err.message
        parent = err.cause if isinstance(err, Causer) else None
        err = parent if isinstance(parent, BaseException) else None
    return UNCLASSIFIED, ""


def render(err: Optional[BaseException], verbose: bool = False) -> str:
    """Render any error, using the trace of a classified one."""
    if isinstance(err, ClassifiedError):
        return stack.render(err.trace, verbose=verbose)
    return stack.render(err, verbose=verbose)
