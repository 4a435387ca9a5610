from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, Optional, Sequence

from .frames import StackFrame, capture_stack, frames_from_exception


class ErrorKind(str, Enum):
    """Why a failure exists; boundaries decide how to route it from this tag."""
    DOMAIN = "domain"
    UNEXPECTED = "unexpected"
    UPSTREAM = "upstream"
    PROGRAMMER = "programmer"


class StructuredError(Exception):
    """
    An error carrying a message, optional meta data, its captured stack and a
    link to the call site that set up the asynchronous operation it came from.

    ``meta`` and ``prior_context`` can each be assigned once; after that they
    are read-only. The causal chain only ever grows at its tail via ``link()``.

    Usage example
    -------------
        err = StructuredError("quota exceeded", meta={"user": "u1"})
        for link in err.chain():
            print(link.message, len(link.trace))
    """

    def __init__(
        self,
        message: str = "",
        *,
        meta: Any = None,
        kind: ErrorKind = ErrorKind.DOMAIN,
        trace: Optional[Sequence[StackFrame]] = None,
    ) -> None:
        super().__init__(message)
        self._message = message
        self._meta = meta
        self._kind = kind
        self._trace = tuple(trace) if trace is not None else capture_stack(skip=1)
        self._prior_context: Optional[StructuredError] = None

    @classmethod
    def from_exception(cls, exc: BaseException, *, kind: ErrorKind = ErrorKind.UNEXPECTED) -> "StructuredError":
        """
        Wrap an arbitrary exception, keeping it as ``__cause__``.

        An exception that was never raised has no traceback; the stack where it
        is wrapped stands in for it.
        """
        trace = frames_from_exception(exc) if exc.__traceback__ is not None else capture_stack(skip=1)
        err = cls(str(exc) or type(exc).__name__, kind=kind, trace=trace)
        err.__cause__ = exc
        return err

    @property
    def message(self) -> str:
        return self._message

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def trace(self) -> tuple[StackFrame, ...]:
        return self._trace

    @property
    def meta(self) -> Any:
        return self._meta

    @meta.setter
    def meta(self, value: Any) -> None:
        if self._meta is not None:
            raise AttributeError("meta is already set")
        self._meta = value

    @property
    def prior_context(self) -> Optional["StructuredError"]:
        return self._prior_context

    @prior_context.setter
    def prior_context(self, value: Optional["StructuredError"]) -> None:
        if self._prior_context is not None:
            raise AttributeError("prior_context is already set")
        self._prior_context = value

    def chain(self) -> Iterator["StructuredError"]:
        """Yield this error, then each prior context, outermost failure first."""
        link: Optional[StructuredError] = self
        while link is not None:
            yield link
            link = link._prior_context

    def link(self, context: "StructuredError") -> None:
        """Append `context` at the tail of the causal chain."""
        members = list(self.chain())
        seen = {id(link) for link in members}
        if any(id(link) in seen for link in context.chain()):
            raise ValueError("context is already part of this chain")
        members[-1].prior_context = context

    def copy(self) -> "StructuredError":
        """Return an unlinked copy sharing message, meta, kind and trace."""
        return StructuredError(self._message, meta=self._meta, kind=self._kind, trace=self._trace)

    @property
    def lean_trace(self) -> str:
        """The chain rendered by the process renderer."""
        from leanerr.trace.renderer import render

        return render(self)

    def __str__(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._message!r}, kind={self._kind.value})"


class MissingCallbackError(StructuredError):
    """Raised when a wrapped continuation fails and no completion callback exists."""

    def __init__(self, message: str = "missing callback") -> None:
        super().__init__(message, kind=ErrorKind.PROGRAMMER)
