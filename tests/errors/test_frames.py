import json
import sys

from leanerr.errors.frames import (
    StackFrame,
    capture_stack,
    frames_from_exception,
    is_evaluated_location,
    is_runtime_location,
)


def _helper() -> tuple:
    return capture_stack()


def test_capture_stack_starts_at_caller() -> None:
    line = sys._getframe().f_lineno + 1
    frames = capture_stack()

    assert frames[0].location == __file__
    assert frames[0].line == line
    assert frames[0].function == "test_capture_stack_starts_at_caller"


def test_capture_stack_skip_and_limit() -> None:
    frames = _helper()
    assert frames[0].function == "_helper"
    assert frames[1].function == "test_capture_stack_skip_and_limit"

    assert len(capture_stack(limit=1)) == 1


def test_frames_from_exception_is_innermost_first_and_includes_outer_frames() -> None:
    def inner() -> None:
        raise RuntimeError("x")

    try:
        inner()
    except RuntimeError as exc:
        frames = frames_from_exception(exc)

    functions = [f.function for f in frames]
    assert functions[0] == "inner"
    assert functions[1] == "test_frames_from_exception_is_innermost_first_and_includes_outer_frames"
    # frames above the catching function come from the live stack
    assert len(frames) > 2


def test_frames_from_unraised_exception_is_empty() -> None:
    assert frames_from_exception(ValueError("never raised")) == ()


def test_stdlib_frames_are_runtime_internal() -> None:
    try:
        json.loads("{")
    except ValueError as exc:
        frames = frames_from_exception(exc)

    json_frames = [f for f in frames if f.location and "json" in f.location and f.location != __file__]
    assert json_frames
    assert all(f.is_runtime_internal for f in json_frames)
    assert not any(f.is_runtime_internal for f in frames if f.location == __file__)


def test_evaluated_code_is_flagged() -> None:
    namespace: dict = {}
    exec(compile("import sys\ndef grab():\n    return sys._getframe()\n", "<string>", "exec"), namespace)
    frame = namespace["grab"]()

    desc = StackFrame.from_frame(frame, frame.f_lineno)
    assert desc.location == "<string>"
    assert desc.is_evaluated is True
    assert desc.is_runtime_internal is False


def test_location_classification() -> None:
    assert is_evaluated_location("<stdin>") is True
    assert is_evaluated_location("<frozen importlib._bootstrap>") is False
    assert is_runtime_location("<frozen importlib._bootstrap>") is True
    assert is_runtime_location("/opt/venv/lib/python3.12/site-packages/pkg/mod.py") is True
    assert is_runtime_location(__file__) is False
    assert is_runtime_location(None) is False


def test_from_location_handles_missing_file_name() -> None:
    frame = StackFrame.from_location("", None)

    assert frame.location is None
    assert frame.line is None
    assert frame.is_evaluated is False
