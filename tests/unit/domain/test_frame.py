from __future__ import annotations

import sys
from collections.abc import Callable

import pytest

from stackerrors.config.settings import get_settings
from stackerrors.domain.frame import (
    Frame,
    StackTrace,
    capture_caller_stack,
    capture_stack,
    stack_from_traceback,
)

_MODULE_PACKAGE = __name__.rsplit(".", 1)[-1]

_MODULE_LEVEL_TRACE = capture_stack()


def _build(skip: int = 0) -> StackTrace:
    # Library-constructor shape: the trace starts at whoever called _build.
    return capture_caller_stack(skip)


def _helper() -> StackTrace:
    return capture_stack()


def _helper_skipping_self() -> StackTrace:
    return capture_stack(1)


def _nested(depth: int) -> StackTrace:
    if depth == 0:
        return capture_stack()
    return _nested(depth - 1)


def _explode() -> None:
    raise RuntimeError("boom")


# --------------------------------------------------------------------------- #
# Frame name decomposition
# --------------------------------------------------------------------------- #
def test_package_and_function_from_path_qualified_symbol() -> None:
    frame = Frame(function="pkg/sub.Handler.func1")
    assert frame.package == "sub"
    assert frame.function_name == "func1"
    assert frame.context == "sub.func1"


@pytest.mark.parametrize("symbol", ["type.__call__", "<string>.<module>", "<frozen runpy>.x"])
def test_reserved_symbols_have_no_package(symbol: str) -> None:
    assert Frame(function=symbol).package == ""


def test_symbol_without_dot_is_its_own_function_name() -> None:
    frame = Frame(function="main")
    assert frame.package == ""
    assert frame.function_name == "main"
    assert frame.context == "main"


def test_nested_function_uses_innermost_name() -> None:
    frame = Frame(function="app/jobs.run.<locals>.step")
    assert frame.package == "jobs"
    assert frame.function_name == "step"


def test_from_frame_builds_module_qualified_symbol() -> None:
    frame = Frame.from_frame(sys._getframe())
    assert frame.package == _MODULE_PACKAGE
    assert frame.function_name == "test_from_frame_builds_module_qualified_symbol"
    assert frame.filename.endswith("test_frame.py")
    assert frame.lineno > 0


def test_frame_to_dict_exposes_derived_names() -> None:
    data = Frame(function="a/b.c", filename="b.py", lineno=7).to_dict()
    assert data == {
        "function": "a/b.c",
        "package": "b",
        "function_name": "c",
        "filename": "b.py",
        "lineno": 7,
    }


# --------------------------------------------------------------------------- #
# Capture
# --------------------------------------------------------------------------- #
def test_capture_stack_starts_at_its_caller() -> None:
    trace = _helper()
    assert trace.origin is not None
    assert trace.origin.function_name == "_helper"
    assert trace[1].function_name == "test_capture_stack_starts_at_its_caller"


def test_capture_stack_skip_drops_leading_frames() -> None:
    trace = _helper_skipping_self()
    assert trace.origin is not None
    assert trace.origin.function_name == "test_capture_stack_skip_drops_leading_frames"


def test_capture_stack_at_module_level_is_not_empty() -> None:
    assert _MODULE_LEVEL_TRACE.origin is not None
    assert _MODULE_LEVEL_TRACE.origin.function_name == "<module>"
    assert _MODULE_LEVEL_TRACE.origin.package == _MODULE_PACKAGE


def test_capture_caller_stack_skips_library_frame() -> None:
    trace = _build()
    assert trace.origin is not None
    assert trace.origin.function_name == "test_capture_caller_stack_skips_library_frame"


@pytest.mark.parametrize("capture", [capture_stack, _build])
def test_capture_negative_skip_rejected(capture: Callable[[int], StackTrace]) -> None:
    with pytest.raises(ValueError, match="skip must be >= 0"):
        capture(-1)


def test_capture_skip_past_stack_depth_is_empty() -> None:
    assert len(capture_stack(10_000)) == 0
    assert len(_build(10_000)) == 0


def test_capture_is_bounded_by_max_stack_frames(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STACKERRORS_MAX_FRAMES", "3")
    get_settings.cache_clear()

    trace = _nested(10)

    assert len(trace) == 3
    assert all(f.function_name == "_nested" for f in trace)


def test_capture_default_bound_is_32() -> None:
    trace = _nested(50)
    assert len(trace) == 32


def test_capture_disabled_yields_empty_trace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STACKERRORS_CAPTURE_STACKS", "false")
    get_settings.cache_clear()

    trace = _helper()

    assert not trace
    assert trace.origin is None


def test_stack_from_traceback_starts_at_raise_site() -> None:
    try:
        _explode()
    except RuntimeError as exc:
        trace = stack_from_traceback(exc.__traceback__)

    assert trace[0].function_name == "_explode"
    assert trace[1].function_name == "test_stack_from_traceback_starts_at_raise_site"


def test_stack_from_traceback_without_traceback_is_empty() -> None:
    assert stack_from_traceback(None) == StackTrace.empty()


# --------------------------------------------------------------------------- #
# StackTrace
# --------------------------------------------------------------------------- #
def test_stack_trace_sequence_behaviour() -> None:
    frames = (
        Frame("a/b.one", "b.py", 1),
        Frame("a/b.two", "b.py", 2),
        Frame("a/c.three", "c.py", 3),
    )
    trace = StackTrace(frames)

    assert len(trace) == 3
    assert list(trace) == list(frames)
    assert trace[1] is frames[1]
    assert isinstance(trace[1:], StackTrace)
    assert trace[1:].origin is frames[1]


def test_stack_trace_format_and_to_list() -> None:
    trace = StackTrace((Frame("a/b.one", "b.py", 10),))

    assert trace.format() == '  File "b.py", line 10, in a/b.one\n'
    assert trace.to_list()[0]["function_name"] == "one"
