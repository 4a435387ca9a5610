"""
Asynchronous try/catch for callback-style continuations.

A continuation registered now and run later by an event loop, a thread pool or
an I/O library has no synchronous caller left to receive its exceptions. An
``AsyncBoundary`` runs the continuation, turns any exception into a
StructuredError linked to the place where the boundary was set up, and hands it
to a completion callback instead of letting it escape into the scheduler.
"""

from __future__ import annotations

import copy
import functools
import logging
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

from leanerr.errors.frames import capture_stack
from leanerr.errors.guards import ensure_error, fail
from leanerr.errors.types import ErrorKind, MissingCallbackError, StructuredError

logger = logging.getLogger("leanerr")

Callback = Callable[..., Any]
F = TypeVar("F", bound=Callable[..., Any])


class CallbackSource(str, Enum):
    """Where an AsyncBoundary finds its completion callback."""
    EXPLICIT = "explicit"
    LAST_ARGUMENT = "last_argument"


def _describe(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)


class AsyncBoundary:
    """
    Callable wrapper that never lets a continuation's exception escape.

    Behavior
    --------
    - The call site that created the boundary is captured immediately.
    - On invocation, with `check_first_arg` a truthy first argument is raised
      as an upstream failure and the continuation does not run.
    - Otherwise the continuation runs and its return value is returned.
    - Any ``Exception`` is normalized, a private copy of the captured call site
      is linked at the tail of its causal chain and the error is passed to the
      completion callback as its only argument.
    - Without a callback the failure cannot be reported, so MissingCallbackError
      is raised from the invocation. Programmer errors are never caught.

    Usage example
    -------------
        def on_data(err, payload, cb):
            cb(None, parse(payload))

        loop.call_soon(AsyncBoundary(on_data, check_first_arg=True), None, raw, done)
    """

    def __init__(
        self,
        continuation: Callable[..., Any],
        callback: Optional[Callback] = None,
        *,
        check_first_arg: bool = False,
        _depth: int = 0,
    ) -> None:
        if not callable(continuation):
            raise TypeError(f"continuation must be callable, got {type(continuation).__name__}")
        if callback is not None and not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")

        functools.update_wrapper(self, continuation)
        self._context = StructuredError(trace=capture_stack(skip=_depth + 1))
        self._continuation = continuation
        self._callback = callback
        self._source = CallbackSource.EXPLICIT if callback is not None else CallbackSource.LAST_ARGUMENT
        self._check_first_arg = check_first_arg
        self._instance: Any = None
        self._bound = False

    @property
    def callback_source(self) -> CallbackSource:
        return self._source

    @property
    def check_first_arg(self) -> bool:
        return self._check_first_arg

    @property
    def context(self) -> StructuredError:
        """Snapshot of the call site that created this boundary."""
        return self._context

    def _resolve_callback(self, args: tuple[Any, ...]) -> Optional[Callback]:
        if self._source is CallbackSource.EXPLICIT:
            return self._callback
        if args and callable(args[-1]):
            return args[-1]
        return None

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        callback = self._resolve_callback(args)
        try:
            if self._check_first_arg and args:
                fail(args[0], kind=ErrorKind.UPSTREAM)
            if self._bound:
                return self._continuation(self._instance, *args, **kwargs)
            return self._continuation(*args, **kwargs)
        except Exception as exc:
            err = ensure_error(exc)
            if err.kind is ErrorKind.PROGRAMMER:
                raise
            err.link(self._context.copy())

        if callback is None:
            raise MissingCallbackError() from err
        logger.debug(
            "Delivering %s failure from %s to %s: %s",
            err.kind.value,
            _describe(self._continuation),
            _describe(callback),
            err.message,
        )
        callback(err)
        return None

    def __get__(self, obj: Any, objtype: Any = None) -> Any:
        if obj is None:
            return self
        bound = copy.copy(self)
        bound._instance = obj
        bound._bound = True
        return bound

    def __repr__(self) -> str:
        return f"AsyncBoundary({_describe(self._continuation)}, source={self._source.value})"


def wrap(
    continuation: Callable[..., Any],
    callback: Optional[Callback] = None,
    *,
    check_first_arg: bool = False,
) -> AsyncBoundary:
    """
    Wrap `continuation` in an AsyncBoundary created at the caller's location.

    Parameters
    ----------
    continuation
        Function run when the returned callable is invoked.
    callback
        Completion callback receiving failures. When omitted, the last positional
        argument of each invocation is used if it is callable.
    check_first_arg
        Treat a truthy first argument as a failure reported by the caller
        (callback convention ``fn(err, ...)``).

    Usage example
    -------------
        def read_config(path, cb):
            def parsed(err, text):
                cb(None, json.loads(text))
            read_file(path, wrap(parsed, cb, check_first_arg=True))
    """
    return AsyncBoundary(continuation, callback, check_first_arg=check_first_arg, _depth=1)


def boundary(callback: Optional[Callback] = None, *, check_first_arg: bool = False) -> Callable[[F], AsyncBoundary]:
    """
    Decorator form of ``wrap``; the call site is the decorated definition.

    Usage example
    -------------
        @boundary(check_first_arg=True)
        def on_reply(err, reply, cb):
            cb(None, reply.body)
    """

    def _decorate(fn: F) -> AsyncBoundary:
        return AsyncBoundary(fn, callback, check_first_arg=check_first_arg, _depth=1)

    return _decorate
