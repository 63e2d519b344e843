from __future__ import annotations

import pytest

from live_relay.runtime.settings_loader import load_settings
from live_relay.config.persona import DEFAULT_SYSTEM_INSTRUCTION
from live_relay.config.upstream import DEFAULT_MODEL_NAME, DEFAULT_UPSTREAM_URL

_ENV_NAMES = (
    "GEMINI_API_KEY",
    "MODEL_NAME",
    "GEMINI_LIVE_URL",
    "VOICE_NAME",
    "SYSTEM_INSTRUCTION",
    "RESPONSE_DEADLINE_S",
    "MAX_CONCURRENT_CONNECTIONS",
    "MAX_TURN_AUDIO_SECONDS",
    "WS_IDLE_TIMEOUT_S",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    settings = load_settings()

    assert settings.upstream.api_key == ""
    assert settings.upstream.model_name == DEFAULT_MODEL_NAME
    assert settings.upstream.url == DEFAULT_UPSTREAM_URL
    assert settings.upstream.voice_name == "Puck"
    assert settings.upstream.system_instruction == DEFAULT_SYSTEM_INSTRUCTION
    assert settings.upstream.response_deadline_s == 10.0
    assert settings.audio.target_sample_rate_hz == 16000
    assert settings.audio.playback_sample_rate_hz == 24000
    assert settings.limits.max_concurrent_connections == 100


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "  k  ")
    monkeypatch.setenv("MODEL_NAME", "other-model")
    monkeypatch.setenv("VOICE_NAME", "Kore")
    monkeypatch.setenv("RESPONSE_DEADLINE_S", "2.5")
    monkeypatch.setenv("MAX_CONCURRENT_CONNECTIONS", "0")
    monkeypatch.setenv("WS_IDLE_TIMEOUT_S", "30")

    settings = load_settings()

    assert settings.upstream.api_key == "k"
    assert settings.upstream.model_name == "other-model"
    assert settings.upstream.voice_name == "Kore"
    assert settings.upstream.response_deadline_s == 2.5
    assert settings.limits.max_concurrent_connections == 1
    assert settings.websocket.idle_timeout_s == 30.0


def test_invalid_numbers_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESPONSE_DEADLINE_S", "soon")
    monkeypatch.setenv("MAX_TURN_AUDIO_SECONDS", "-5")
    monkeypatch.setenv("MODEL_NAME", "   ")

    settings = load_settings()

    assert settings.upstream.response_deadline_s == 10.0
    assert settings.audio.max_turn_audio_seconds == 0.0
    assert settings.upstream.model_name == DEFAULT_MODEL_NAME
