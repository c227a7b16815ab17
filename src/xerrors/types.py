"""
Core types and protocols used across modules.

The capability checks in this module are how the rest of the package tells a
classified error apart from a plain exception. They are structural: any
object providing the members qualifies, no inheritance is required.
"""

from typing import Any, Optional, Protocol, runtime_checkable

# Code carried by an error that was never explicitly classified.
UNCLASSIFIED = 0


@runtime_checkable
class Causer(Protocol):
    """
    An error that can name the error it wraps.

    Trace layers, classified errors and exception hierarchies that keep a
    ``cause`` attribute all satisfy this protocol.
    """

    cause: Optional[BaseException]


@runtime_checkable
class ClassifiedError(Protocol):
    """
    Protocol for errors carrying a classification and an accumulated trace.

    Attributes:
        code: Classification code, UNCLASSIFIED (0) when never classified
        message: Classification message, "" when none was given
        trace: Stack-captured error chain, or None before any wrap
    """

    @property
    def code(self) -> int:
        ...

    @property
    def message(self) -> str:
        ...

    @property
    def trace(self) -> Optional[BaseException]:
        ...

    def wrap(self, err: Optional[BaseException], annotation: str) -> Any:
        """Annotate the trace with a message, folding err in."""
        ...

    def wrapf(self, err: Optional[BaseException], fmt: str, *args: Any) -> Any:
        """Same as wrap() with a %-formatted annotation."""
        ...

    def with_stack(self, err: Optional[BaseException]) -> Any:
        """Attach a stack snapshot over err, without a message."""
        ...
