"""Stack frame descriptors and the helpers that capture them."""

from __future__ import annotations

import os
import sys
import sysconfig
import traceback
from dataclasses import dataclass
from types import FrameType
from typing import Iterable, Optional


def _runtime_roots() -> tuple[str, ...]:
    paths = sysconfig.get_paths()
    roots = set()
    for key in ("stdlib", "platstdlib", "purelib", "platlib"):
        path = paths.get(key)
        if path:
            roots.add(os.path.normcase(os.path.abspath(path)) + os.sep)
    return tuple(sorted(roots))


_RUNTIME_ROOTS = _runtime_roots()
_DEPENDENCY_DIRS = ("site-packages", "dist-packages")


def is_evaluated_location(filename: Optional[str]) -> bool:
    """Return True for code compiled from a string (``<string>``, ``<stdin>``, ...)."""
    if not filename:
        return False
    return filename.startswith("<") and not filename.startswith("<frozen")


def is_runtime_location(filename: Optional[str]) -> bool:
    """Return True for frozen modules, the standard library and installed packages."""
    if not filename:
        return False
    if filename.startswith("<frozen"):
        return True
    if filename.startswith("<"):
        return False
    normalized = os.path.normcase(os.path.abspath(filename))
    if normalized.startswith(_RUNTIME_ROOTS):
        return True
    return any(part in _DEPENDENCY_DIRS for part in normalized.split(os.sep))


@dataclass(frozen=True)
class StackFrame:
    """
    One frame of a captured call stack.

    ``location`` is the raw file name as reported by the interpreter; it is
    normalized only when a trace is rendered, since normalization depends on the
    working directory at render time.

    Usage example
    -------------
        frame = StackFrame(location="/srv/app/jobs.py", line=42, function="run")
    """

    location: Optional[str]
    line: Optional[int]
    function: str = "?"
    is_evaluated: bool = False
    is_runtime_internal: bool = False

    @classmethod
    def from_location(cls, location: Optional[str], line: Optional[int], function: str = "?") -> "StackFrame":
        return cls(
            location=location or None,
            line=line,
            function=function,
            is_evaluated=is_evaluated_location(location),
            is_runtime_internal=is_runtime_location(location),
        )

    @classmethod
    def from_frame(cls, frame: FrameType, line: Optional[int]) -> "StackFrame":
        code = frame.f_code
        return cls.from_location(code.co_filename, line, code.co_name)


def _frames(walk: Iterable[tuple[FrameType, Optional[int]]]) -> list[StackFrame]:
    return [StackFrame.from_frame(frame, line) for frame, line in walk]


def capture_stack(skip: int = 0, limit: Optional[int] = None) -> tuple[StackFrame, ...]:
    """
    Capture the current call stack, innermost frame first.

    Parameters
    ----------
    skip
        Number of frames above the caller to leave out. ``0`` starts at the
        function calling ``capture_stack``.
    limit
        Maximum number of frames to keep.
    """
    frames = _frames(traceback.walk_stack(sys._getframe(skip + 1)))
    if limit is not None:
        frames = frames[:limit]
    return tuple(frames)


def frames_from_exception(exc: BaseException) -> tuple[StackFrame, ...]:
    """
    Rebuild the full stack of a raised exception, innermost frame first.

    The traceback only covers the frames between the raise site and the frame
    that caught the exception; the frames that were still active above the
    catching frame are appended so the result reads like a stack captured at
    the raise site. An exception that was never raised yields an empty tuple.
    """
    tb = exc.__traceback__
    if tb is None:
        return ()
    inner = _frames(traceback.walk_tb(tb))
    inner.reverse()
    outer = _frames(traceback.walk_stack(tb.tb_frame.f_back)) if tb.tb_frame.f_back is not None else []
    return tuple(inner + outer)
