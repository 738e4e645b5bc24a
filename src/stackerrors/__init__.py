# src/stackerrors/__init__.py
# Copyright (c) stackerrors.
# SPDX-License-Identifier: MIT
"""
stackerrors: exceptions with stack traces, type tags and metadata.

Typical usage:
    from stackerrors import new, wrap, wrap_with_type, is_, get_metadata

    ErrNotFound = new_sentinel("NotFound")

    def load(key):
        raise sentinel_with_stack(ErrNotFound).with_metadata({"key": key})

    try:
        load("a")
    except Exception as exc:
        err = wrap(exc, "loading %s", "a")
        assert is_(err, ErrNotFound)
"""

from __future__ import annotations

from .domain.errors import (
    TracedError,
    as_,
    get_metadata,
    is_,
    new,
    new_sentinel,
    new_with_type,
    sentinel_with_stack,
    stack_trace_of,
    type_of,
    unwrap,
    w,
    wrap,
    wrap_as_sentinel,
    wrap_with_type,
)
from .domain.frame import Frame, StackTrace, capture_stack
from .domain.recover import ErrorSlot, recover_panic, recovering
from .types import Metadata, MetadataValue

__version__ = "0.1.0"

__all__ = [
    "ErrorSlot",
    "Frame",
    "Metadata",
    "MetadataValue",
    "StackTrace",
    "TracedError",
    "as_",
    "capture_stack",
    "get_metadata",
    "is_",
    "new",
    "new_sentinel",
    "new_with_type",
    "recover_panic",
    "recovering",
    "sentinel_with_stack",
    "stack_trace_of",
    "type_of",
    "unwrap",
    "w",
    "wrap",
    "wrap_as_sentinel",
    "wrap_with_type",
]
