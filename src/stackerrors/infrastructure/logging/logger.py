# src/stackerrors/infrastructure/logging/logger.py
# Copyright (c) stackerrors.
# SPDX-License-Identifier: MIT
"""Structured JSON logging utilities.

This module exposes an idempotent root configurator and a per-module logger
factory that produce JSON logs suitable for ingestion by log pipelines.

Features:
    * Stable keys: ``ts``, ``level``, ``logger``, ``message``.
    * Logged ``TracedError`` chains add ``error_type``, ``stack_trace`` and
      ``metadata`` taken from the nearest traced error.

Typical usage:
    configure_root_logging()
    log = get_json_logger(__name__)
    log.error("order.failed", exc_info=err)
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from stackerrors.config.settings import get_settings
from stackerrors.domain.errors import TracedError, as_

__all__ = ["configure_root_logging", "get_json_logger"]


class _JsonFormatter(logging.Formatter):
    """One JSON object per record; traced errors add their type, stack and metadata."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now(tz=UTC).isoformat()
        payload: dict[str, Any] = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Exceptions: guard against None in exc_info tuple.
        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            if exc_type is not None:
                payload["exc_type"] = exc_type.__name__
            if exc_value is not None:
                payload["exc_message"] = str(exc_value)
                payload.update(_traced_fields(exc_value))

        # Extra dict, if any.
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)

        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str)


def _traced_fields(exc: BaseException) -> dict[str, Any]:
    traced = as_(exc, TracedError)
    if traced is None:
        return {}
    return {
        "error_type": traced.type,
        "stack_trace": traced.stack_trace.to_list(),
        "metadata": traced.metadata,
    }


def configure_root_logging(level: str | int | None = None) -> None:
    """Initialize the root logger with a JSON stream handler (idempotent).

    Args:
        level: Logging level or level name. If ``None``, use ``Settings.log_level``
            (env ``LOG_LEVEL``) or ``INFO``.
    """
    root = logging.getLogger()

    resolved: int | str = level if level is not None else (get_settings().log_level or "INFO")
    root.setLevel(resolved)

    if root.handlers:
        # Already configured; prevent duplicate handlers on reload.
        return

    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return the logger for ``name``; its records reach the JSON root handler.

    Hosts call :func:`configure_root_logging` once at startup so their own
    records and the ones emitted by stackerrors share one layout.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.propagate = True
    return logger
