# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator

import pytest

from stackerrors.config.settings import get_settings

_ENV_KEYS = (
    "STACKERRORS_MAX_FRAMES",
    "STACKERRORS_CAPTURE_STACKS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Run every test against default settings read from a clean environment."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
