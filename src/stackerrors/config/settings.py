# src/stackerrors/config/settings.py
# Copyright (c) stackerrors.
# SPDX-License-Identifier: MIT
"""stackerrors Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for stack capture and logging. The library
    is embedded in host processes, so settings are read lazily on first use and
    cached for the lifetime of the process.

Design:
    - Pydantic v2 BaseSettings; unknown env is ignored because the host owns
      the rest of the environment.
    - Explicit field declarations with constrained types and ranges.
    - Singleton accessor `get_settings()` with LRU cache.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MAX_STACK_FRAMES = 32


class Settings(BaseSettings):
    """Typed configuration for stackerrors."""

    # ---------------------------
    # Stack capture
    # ---------------------------
    max_stack_frames: int = Field(
        default=DEFAULT_MAX_STACK_FRAMES,
        ge=1,
        le=256,
        description=(
            "Upper bound on frames kept per captured stack trace. Deeper stacks "
            "keep only the frames nearest to the capture site."
        ),
        validation_alias="STACKERRORS_MAX_FRAMES",
    )
    capture_stacks: bool = Field(
        default=True,
        description="Capture stack traces on construction. When false, traces are empty.",
        validation_alias="STACKERRORS_CAPTURE_STACKS",
    )

    # ---------------------------
    # Logging
    # ---------------------------
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO'). If not set, defaults are used.",
        validation_alias="LOG_LEVEL",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        """Upper-case the log level name and treat blanks as unset."""
        if isinstance(value, str):
            stripped = value.strip()
            return stripped.upper() or None
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.error("stackerrors.settings_invalid", extra={"error_count": exc.error_count()})
        raise RuntimeError(f"Invalid stackerrors configuration: {exc}") from exc

    logger.debug(
        "stackerrors.settings_initialized",
        extra={
            "max_stack_frames": settings.max_stack_frames,
            "capture_stacks": settings.capture_stacks,
        },
    )
    return settings
