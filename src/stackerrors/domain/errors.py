# src/stackerrors/domain/errors.py
# Copyright (c) stackerrors.
# SPDX-License-Identifier: MIT
"""
Traced errors.

Summary:
    ``TracedError`` is an exception that carries an optional cause, a message,
    a type tag, the stack captured where it was created or wrapped, and a
    metadata mapping. The module-level constructors are the supported way to
    build one; they capture the stack of *their caller*.

Propagation rules:
    - ``wrap``/``w`` inherit the type tag and the metadata mapping (by
      reference) of the nearest ``TracedError`` in the wrapped chain.
    - ``wrap_with_type`` sets its own type tag and starts from a copy of the
      wrapped metadata.
    - Sentinels (``new_sentinel``/``wrap_as_sentinel``) carry no stack. Re-expose
      them at a call site with ``sentinel_with_stack``; the result still
      satisfies ``is_(result, sentinel)``.

Display:
    ``[type_tag@]package.function [[message]] [=> str(cause)]``

Layer:
    domain
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, TypeVar

from stackerrors.domain.frame import StackTrace, capture_caller_stack
from stackerrors.types import Metadata, MetadataValue

__all__ = [
    "TracedError",
    "as_",
    "get_metadata",
    "is_",
    "new",
    "new_sentinel",
    "new_with_type",
    "sentinel_with_stack",
    "stack_trace_of",
    "type_of",
    "unwrap",
    "w",
    "wrap",
    "wrap_as_sentinel",
    "wrap_with_type",
]

E = TypeVar("E", bound=BaseException)


def _safe_str(x: object) -> str:
    try:
        return str(x)
    except Exception:
        return f"<unprintable {type(x).__name__}>"


def _format(message: str, args: tuple[object, ...]) -> str:
    if not args:
        return message
    try:
        return message % args
    except (TypeError, ValueError):
        # Mismatched placeholders keep the raw text; the error is still built.
        return f"{message} {args!r}"


def _restore(cls: type[TracedError], message: str) -> TracedError:
    err = cls.__new__(cls)
    Exception.__init__(err, message)
    return err


class TracedError(Exception):
    """Exception with a cause, type tag, captured stack trace and metadata.

    Args:
        message: Human-readable context for this layer (may be empty).
        cause: Wrapped error, if any. Mirrored to ``__cause__``.
        type_tag: Caller-assigned classification (may be empty).
        stack_trace: Frames captured at creation/wrap time.
        metadata: Mapping attached to the error. Stored as given, not copied.
        sentinel_of: Sentinel this value re-exposes; see ``matches``.
    """

    def __init__(
        self,
        message: str = "",
        *,
        cause: BaseException | None = None,
        type_tag: str = "",
        stack_trace: StackTrace | None = None,
        metadata: Metadata | None = None,
        sentinel_of: TracedError | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.type_tag = type_tag
        self._stack_trace = stack_trace if stack_trace is not None else StackTrace.empty()
        self.metadata: Metadata = metadata if metadata is not None else {}
        self._sentinel_of = sentinel_of
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        origin = self._stack_trace.origin
        head = origin.context if origin is not None else ""
        if self.type_tag:
            head = f"{self.type_tag}@{head}" if head else self.type_tag

        text = head
        if self.message:
            text = f"{text} [{self.message}]" if text else f"[{self.message}]"

        if self.cause is not None:
            cause_text = _safe_str(self.cause) or type(self.cause).__name__
            text = f"{text} => {cause_text}" if text else cause_text
        return text

    def __reduce__(self) -> tuple[Any, ...]:
        return (_restore, (type(self), self.message), dict(self.__dict__))

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)
        if self.cause is not None:
            self.__cause__ = self.cause

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, type={self.type!r}, "
            f"frames={len(self._stack_trace)})"
        )

    @property
    def type(self) -> str:
        """Explicit type tag, or the class name when none was set."""
        return self.type_tag or type(self).__name__

    @property
    def stack_trace(self) -> StackTrace:
        return self._stack_trace

    def unwrap(self) -> BaseException | None:
        return self.cause

    def matches(self, target: BaseException) -> bool:
        """Report equality to ``target`` beyond identity.

        A value produced by ``sentinel_with_stack`` matches the sentinel it was
        made from, transitively.
        """
        sentinel = self._sentinel_of
        if sentinel is None:
            return False
        return sentinel is target or sentinel.matches(target)

    def with_metadata(self, update: Mapping[str, MetadataValue]) -> TracedError:
        """Shallow-merge ``update`` into this error's metadata and return self.

        Nested mappings are replaced wholesale, not merged. Not synchronized:
        callers sharing an error across threads must serialize updates.

        Raises:
            TypeError: If ``update`` is not a mapping.
        """
        if not isinstance(update, Mapping):
            raise TypeError(f"metadata update must be a mapping, got {type(update).__name__}")
        self.metadata.update(update)
        return self

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready rendering for logs and reporting collaborators."""
        cause: dict[str, Any] | None
        if isinstance(self.cause, TracedError):
            cause = self.cause.to_dict()
        elif self.cause is not None:
            cause = {"type": type(self.cause).__name__, "message": _safe_str(self.cause)}
        else:
            cause = None
        return {
            "type": self.type,
            "message": self.message,
            "error": str(self),
            "stack_trace": self._stack_trace.to_list(),
            "metadata": self.metadata,
            "cause": cause,
        }


# --------------------------------------------------------------------------- #
# Construction
# --------------------------------------------------------------------------- #
def new(message: str, *args: object) -> TracedError:
    """Create a leaf error with a stack trace captured at the caller."""
    return TracedError(_format(message, args), stack_trace=capture_caller_stack())


def new_with_type(message: str, type_tag: str, *args: object) -> TracedError:
    """Create a leaf error with an explicit type tag."""
    return TracedError(
        _format(message, args), type_tag=type_tag, stack_trace=capture_caller_stack()
    )


def new_sentinel(type_tag: str, message: str = "") -> TracedError:
    """Create a stack-less sentinel, meant to be a module-level constant."""
    return TracedError(message, type_tag=type_tag)


def wrap(err: BaseException | None, message: str, *args: object) -> TracedError:
    """Wrap ``err`` with a message and a fresh stack trace.

    The type tag and metadata mapping of the nearest ``TracedError`` in
    ``err``'s chain are carried over; the mapping is shared, not copied.
    """
    inner = as_(err, TracedError)
    return TracedError(
        _format(message, args),
        cause=err,
        type_tag=inner.type_tag if inner is not None else "",
        metadata=inner.metadata if inner is not None else None,
        stack_trace=capture_caller_stack(),
    )


def w(err: BaseException | None) -> TracedError:
    """Wrap ``err`` without a message, only to record the current call site."""
    inner = as_(err, TracedError)
    return TracedError(
        cause=err,
        type_tag=inner.type_tag if inner is not None else "",
        metadata=inner.metadata if inner is not None else None,
        stack_trace=capture_caller_stack(),
    )


def wrap_with_type(
    err: BaseException | None, message: str, type_tag: str, *args: object
) -> TracedError:
    """Wrap ``err`` with an explicit type tag and a copy of its metadata."""
    inner = as_(err, TracedError)
    return TracedError(
        _format(message, args),
        cause=err,
        type_tag=type_tag,
        metadata=dict(inner.metadata) if inner is not None else None,
        stack_trace=capture_caller_stack(),
    )


def wrap_as_sentinel(err: BaseException, type_tag: str, message: str = "") -> TracedError:
    """Derive a new stack-less sentinel from ``err`` with its own type tag."""
    inner = as_(err, TracedError)
    return TracedError(
        message,
        cause=err,
        type_tag=type_tag,
        metadata=dict(inner.metadata) if inner is not None else None,
    )


def sentinel_with_stack(err: BaseException) -> TracedError:
    """Re-expose a sentinel at the caller's site with a fresh stack trace.

    A ``TracedError`` sentinel loses whatever trace it had (it points at the
    module that defined it) and the returned copy keeps its cause, message,
    type tag and a copy of its metadata. A foreign error is wrapped as-is.
    """
    if isinstance(err, TracedError):
        err._stack_trace = StackTrace.empty()
        return TracedError(
            err.message,
            cause=err.cause,
            type_tag=err.type_tag,
            metadata=dict(err.metadata),
            stack_trace=capture_caller_stack(),
            sentinel_of=err,
        )
    return TracedError(cause=err, stack_trace=capture_caller_stack())


# --------------------------------------------------------------------------- #
# Introspection
# --------------------------------------------------------------------------- #
def unwrap(err: BaseException | None) -> BaseException | None:
    """Return the next error in the chain.

    Uses an ``unwrap()`` method when the error has one, else ``__cause__``.
    """
    if err is None:
        return None
    hook = getattr(err, "unwrap", None)
    if callable(hook):
        nxt = hook()
        return nxt if isinstance(nxt, BaseException) else None
    return err.__cause__


def _walk(err: BaseException | None, seen: set[int] | None = None) -> Iterator[BaseException]:
    """Depth-first traversal of the cause chain and exception group members."""
    if seen is None:
        seen = set()
    node = err
    while node is not None and id(node) not in seen:
        seen.add(id(node))
        yield node
        if isinstance(node, BaseExceptionGroup):
            for member in node.exceptions:
                yield from _walk(member, seen)
        node = unwrap(node)


def is_(err: BaseException | None, target: BaseException) -> bool:
    """Return True if any error in ``err``'s chain is or matches ``target``."""
    for node in _walk(err):
        if node is target or node == target:
            return True
        matches = getattr(node, "matches", None)
        if callable(matches) and matches(target):
            return True
    return False


def as_(err: BaseException | None, cls: type[E]) -> E | None:
    """Return the first error in ``err``'s chain that is an instance of ``cls``."""
    for node in _walk(err):
        if isinstance(node, cls):
            return node
    return None


def get_metadata(err: BaseException | None) -> Metadata | None:
    """Metadata of the nearest ``TracedError`` in the chain, by reference."""
    inner = as_(err, TracedError)
    return inner.metadata if inner is not None else None


def type_of(err: BaseException) -> str:
    """Type tag of a ``TracedError``, or the class name of any other error."""
    if isinstance(err, TracedError):
        return err.type
    return type(err).__name__


def stack_trace_of(err: BaseException | None) -> StackTrace:
    """Stack trace of the nearest ``TracedError`` in the chain, or an empty one."""
    inner = as_(err, TracedError)
    return inner.stack_trace if inner is not None else StackTrace.empty()
