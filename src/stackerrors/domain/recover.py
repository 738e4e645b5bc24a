# src/stackerrors/domain/recover.py
# Copyright (c) stackerrors.
# SPDX-License-Identifier: MIT
"""
Failure boundary.

Purpose:
    Normalize whatever escaped a unit of work into a ``TracedError`` at a
    top-level boundary (request handler, worker loop, CLI entry point) so the
    host can report it with its type, stack trace and metadata.

Design:
    - ``recover_panic`` writes into an ``ErrorSlot`` and leaves it untouched
      when nothing was recovered.
    - Traces start at the failure site: for exceptions they are rebuilt from
      ``__traceback__``, and the adapter's own frames never appear.
    - ``recovering()`` suppresses ``Exception`` only; interpreter-level
      signals (``KeyboardInterrupt``, ``SystemExit``) propagate.

Layer:
    domain
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType

from stackerrors.domain.errors import TracedError, _safe_str, as_
from stackerrors.domain.frame import capture_caller_stack, stack_from_traceback

__all__ = ["PANIC_MESSAGE", "ErrorSlot", "recover_panic", "recovering"]

logger = logging.getLogger(__name__)

PANIC_MESSAGE = "caught panic"


@dataclass
class ErrorSlot:
    """Output slot filled by the failure boundary."""

    error: BaseException | None = None

    def __bool__(self) -> bool:
        return self.error is not None

    def raise_if_set(self) -> None:
        """Re-raise the recovered error, if any."""
        if self.error is not None:
            raise self.error


def recover_panic(recovered: object, slot: ErrorSlot, skip: int = 0) -> None:
    """Normalize ``recovered`` into a ``TracedError`` and store it in ``slot``.

    Args:
        recovered: Whatever was caught: ``None`` (nothing happened), an
            exception, or an arbitrary value.
        slot: Output slot; untouched when ``recovered`` is ``None``.
        skip: Extra frames to drop when the trace is captured from the caller
            (callers that are themselves boundary helpers pass 1).
    """
    if recovered is None:
        return

    err: TracedError
    if isinstance(recovered, TracedError):
        err = recovered
    elif isinstance(recovered, BaseException):
        inner = as_(recovered, TracedError)
        if recovered.__traceback__ is not None:
            trace = stack_from_traceback(recovered.__traceback__)
        else:
            trace = capture_caller_stack(skip)
        err = TracedError(
            PANIC_MESSAGE,
            cause=recovered,
            type_tag=inner.type_tag if inner is not None else "",
            metadata=inner.metadata if inner is not None else None,
            stack_trace=trace,
        )
    else:
        err = TracedError(
            f"{PANIC_MESSAGE}: {_safe_str(recovered)}",
            stack_trace=capture_caller_stack(skip),
        )

    logger.warning(
        "stackerrors.panic_recovered",
        extra={"extra": {"error_type": err.type, "error": _safe_str(err)}},
    )
    slot.error = err


class recovering:  # noqa: N801
    """Context manager that turns an escaping ``Exception`` into a slot value.

    Example:
        with recovering() as slot:
            handle(request)
        if slot:
            report(slot.error)
    """

    def __init__(self) -> None:
        self.slot = ErrorSlot()

    def __enter__(self) -> ErrorSlot:
        return self.slot

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc is None or not isinstance(exc, Exception):
            return False
        recover_panic(exc, self.slot, skip=1)
        return True
