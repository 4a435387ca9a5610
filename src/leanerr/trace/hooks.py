"""Reporting of StructuredErrors that nothing caught."""

from __future__ import annotations

import asyncio
import sys
from types import TracebackType
from typing import Any, Callable, Mapping, Optional

from leanerr.errors.logging import log
from leanerr.errors.types import StructuredError

from .renderer import LeanRenderer, get_renderer

ExceptHook = Callable[[type[BaseException], BaseException, Optional[TracebackType]], Any]


def report(err: StructuredError, renderer: Optional[LeanRenderer] = None) -> None:
    """Send the lean trace of `err` (and of its ``__cause__``, if any) to the log sink."""
    active = renderer if renderer is not None else get_renderer()
    log(active.render(err))
    cause = err.__cause__
    if cause is not None:
        log(f"caused by: {active.render(cause)}")


def install_excepthook(renderer: Optional[LeanRenderer] = None) -> ExceptHook:
    """
    Report uncaught StructuredErrors as lean traces; defer everything else.

    Returns the previous ``sys.excepthook``, which keeps handling other exceptions.

    Usage example
    -------------
        install_excepthook()
        loop.run_forever()
    """
    previous = sys.excepthook

    def _hook(exc_type: type[BaseException], exc: BaseException, tb: Optional[TracebackType]) -> None:
        if isinstance(exc, StructuredError):
            report(exc, renderer)
        else:
            previous(exc_type, exc, tb)

    sys.excepthook = _hook
    return previous


def loop_exception_handler(loop: asyncio.AbstractEventLoop, context: Mapping[str, Any]) -> None:
    """
    asyncio exception handler reporting StructuredErrors raised by loop callbacks.

    Usage example
    -------------
        loop.set_exception_handler(loop_exception_handler)
    """
    exc = context.get("exception")
    if isinstance(exc, StructuredError):
        report(exc)
    else:
        loop.default_exception_handler(dict(context))
