from __future__ import annotations

import pytest

from stackerrors.config import Settings, get_settings
from stackerrors.config.settings import DEFAULT_MAX_STACK_FRAMES


def test_defaults_when_unset_are_sane() -> None:
    s = get_settings()

    assert s.max_stack_frames == DEFAULT_MAX_STACK_FRAMES == 32
    assert s.capture_stacks is True
    assert s.log_level is None
    assert set(Settings.model_fields) == {"max_stack_frames", "capture_stacks", "log_level"}


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STACKERRORS_MAX_FRAMES", "8")
    monkeypatch.setenv("STACKERRORS_CAPTURE_STACKS", "0")
    monkeypatch.setenv("LOG_LEVEL", " debug ")

    s = Settings()

    assert s.max_stack_frames == 8
    assert s.capture_stacks is False
    assert s.log_level == "DEBUG"


def test_unrelated_env_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://x")
    assert get_settings().max_stack_frames == 32


@pytest.mark.parametrize("value", ["0", "257", "lots"])
def test_invalid_frame_cap_raises_runtime_error(
    monkeypatch: pytest.MonkeyPatch, value: str
) -> None:
    monkeypatch.setenv("STACKERRORS_MAX_FRAMES", value)

    with pytest.raises(RuntimeError, match="Invalid stackerrors configuration"):
        get_settings()
