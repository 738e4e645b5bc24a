# src/stackerrors/domain/frame.py
# Copyright (c) stackerrors.
# SPDX-License-Identifier: MIT
"""
Stack frames and stack traces.

Purpose:
    Capture the call stack at the point an error is created or wrapped, and
    decompose each frame's fully-qualified symbol into a package and function
    name for display.

Design:
    - A symbol is ``<module path, "/"-separated>.<qualified name>``, e.g.
      ``app/services/orders.OrderService.place``. The package is the last path
      component of the module (``orders``), the function is the last dotted
      component of the qualified name (``place``).
    - Traces are stored nearest frame first and bounded by
      ``Settings.max_stack_frames``; deeper stacks keep only the nearest frames.

Layer:
    domain
"""

from __future__ import annotations

import sys
import traceback
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from itertools import chain, islice
from types import FrameType, TracebackType
from typing import Any, overload

from stackerrors.config.settings import get_settings

__all__ = [
    "RESERVED_SYMBOL_PREFIXES",
    "Frame",
    "StackTrace",
    "capture_caller_stack",
    "capture_stack",
    "stack_from_traceback",
]

# Symbols synthesized by the interpreter rather than defined in a real module:
# code compiled from strings or frozen modules (``<string>``, ``<frozen ...>``)
# and methods of the ``type`` metaclass.
RESERVED_SYMBOL_PREFIXES: tuple[str, ...] = ("type.", "<")

# capture_caller_stack itself plus the library function that calls it.
_INTERNAL_SKIP = 2


@dataclass(frozen=True, slots=True)
class Frame:
    """One captured call-stack entry.

    Args:
        function: Fully-qualified symbol of the executing function.
        filename: Source file of the code object.
        lineno: Line being executed when the frame was captured.
    """

    function: str
    filename: str = ""
    lineno: int = 0

    @classmethod
    def from_frame(cls, frame: FrameType, lineno: int | None = None) -> Frame:
        """Build a Frame from a live interpreter frame."""
        code = frame.f_code
        module = frame.f_globals.get("__name__") or ""
        qualname = getattr(code, "co_qualname", code.co_name)
        symbol = f"{module.replace('.', '/')}.{qualname}" if module else qualname
        if lineno is None:
            lineno = frame.f_lineno
        return cls(function=symbol, filename=code.co_filename, lineno=lineno or 0)

    @property
    def package(self) -> str:
        """Module component of the symbol, or ``""`` for synthesized symbols."""
        if self.function.startswith(RESERVED_SYMBOL_PREFIXES):
            return ""
        path_end = self.function.rfind("/")
        tail = self.function[path_end + 1 :]
        dot = tail.find(".")
        if dot == -1:
            return ""
        return tail[:dot]

    @property
    def function_name(self) -> str:
        """Component of the symbol after its last dot."""
        dot = self.function.rfind(".")
        if dot == -1:
            return self.function
        return self.function[dot + 1 :]

    @property
    def context(self) -> str:
        """``package.function`` label used in error display strings."""
        if self.package:
            return f"{self.package}.{self.function_name}"
        return self.function_name

    def to_dict(self) -> dict[str, Any]:
        return {
            "function": self.function,
            "package": self.package,
            "function_name": self.function_name,
            "filename": self.filename,
            "lineno": self.lineno,
        }


@dataclass(frozen=True, slots=True)
class StackTrace:
    """Ordered, immutable sequence of frames, nearest frame first."""

    frames: tuple[Frame, ...] = ()

    @classmethod
    def empty(cls) -> StackTrace:
        return cls(())

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self) -> Iterator[Frame]:
        return iter(self.frames)

    def __bool__(self) -> bool:
        return bool(self.frames)

    @overload
    def __getitem__(self, index: int) -> Frame: ...

    @overload
    def __getitem__(self, index: slice) -> StackTrace: ...

    def __getitem__(self, index: int | slice) -> Frame | StackTrace:
        if isinstance(index, slice):
            return StackTrace(self.frames[index])
        return self.frames[index]

    @property
    def origin(self) -> Frame | None:
        """The frame nearest to the capture site, if any."""
        return self.frames[0] if self.frames else None

    def format(self) -> str:
        """Render the trace in a traceback-like layout, one frame per entry."""
        return "".join(
            f'  File "{f.filename}", line {f.lineno}, in {f.function}\n' for f in self.frames
        )

    def to_list(self) -> list[dict[str, Any]]:
        return [f.to_dict() for f in self.frames]


def _collect(entries: Iterable[tuple[FrameType, int | None]], skip: int) -> StackTrace:
    settings = get_settings()
    if not settings.capture_stacks:
        return StackTrace.empty()
    bounded = islice(entries, skip, skip + settings.max_stack_frames)
    return StackTrace(tuple(Frame.from_frame(f, lineno) for f, lineno in bounded))


def capture_stack(skip: int = 0) -> StackTrace:
    """Capture the stack starting at the function that calls this.

    Args:
        skip: Frames to drop from the front of the trace.

    Returns:
        StackTrace: Nearest frame first, bounded by ``max_stack_frames``. Empty
        if ``skip`` exceeds the stack depth or capture is disabled.

    Raises:
        ValueError: If ``skip`` is negative.
    """
    if skip < 0:
        raise ValueError("skip must be >= 0")
    return _collect(traceback.walk_stack(sys._getframe(1)), skip)


def capture_caller_stack(skip: int = 0) -> StackTrace:
    """Capture the stack of the caller of the library function invoking this.

    Args:
        skip: Additional frames to drop from the front of the trace.

    Returns:
        StackTrace: Nearest frame first, bounded by ``max_stack_frames``. Empty
        if ``skip`` exceeds the stack depth or capture is disabled.

    Raises:
        ValueError: If ``skip`` is negative.
    """
    if skip < 0:
        raise ValueError("skip must be >= 0")
    try:
        frame = sys._getframe(_INTERNAL_SKIP)
    except ValueError:
        return StackTrace.empty()
    return _collect(traceback.walk_stack(frame), skip)


def stack_from_traceback(tb: TracebackType | None, skip: int = 0) -> StackTrace:
    """Build a trace that starts at the raise site recorded in ``tb``.

    The traceback frames (raise site first) are followed by the frames above
    the frame that caught the exception, so the result reads like a trace
    captured at the moment of the raise.

    Raises:
        ValueError: If ``skip`` is negative.
    """
    if skip < 0:
        raise ValueError("skip must be >= 0")
    handled = list(traceback.walk_tb(tb))
    if not handled:
        return StackTrace.empty()
    entries: Iterable[tuple[FrameType, int | None]] = reversed(handled)
    catcher = handled[0][0].f_back
    if catcher is not None:
        entries = chain(entries, traceback.walk_stack(catcher))
    return _collect(entries, skip)
