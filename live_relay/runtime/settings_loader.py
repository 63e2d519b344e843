"""Environment parsing for runtime settings."""

from __future__ import annotations

import os

from live_relay.config.persona import ENV_SYSTEM_INSTRUCTION, DEFAULT_SYSTEM_INSTRUCTION
from live_relay.config.limits import (
    ENV_MAX_CONCURRENT_CONNECTIONS,
    ENV_MAX_UTTERANCE_AUDIO_SECONDS,
    DEFAULT_MAX_CONCURRENT_CONNECTIONS,
    DEFAULT_MAX_UTTERANCE_AUDIO_SECONDS,
)
from live_relay.state.settings import (
    AppSettings,
    AudioSettings,
    LimitsSettings,
    UpstreamSettings,
    WebSocketSettings,
)
from live_relay.config.audio import (
    TARGET_SAMPLE_RATE_HZ,
    PLAYBACK_SAMPLE_RATE_HZ,
    ENV_MAX_TURN_AUDIO_SECONDS,
    DEFAULT_MAX_TURN_AUDIO_SECONDS,
)
from live_relay.config.websocket import (
    ENV_WS_IDLE_TIMEOUT_S,
    ENV_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
    ENV_WS_MAX_CONNECTION_DURATION_S,
    DEFAULT_WS_MAX_CONNECTION_DURATION_S,
)
from live_relay.config.upstream import (
    ENV_MODEL_NAME,
    ENV_VOICE_NAME,
    ENV_UPSTREAM_URL,
    DEFAULT_MODEL_NAME,
    DEFAULT_VOICE_NAME,
    ENV_GEMINI_API_KEY,
    DEFAULT_UPSTREAM_URL,
    ENV_RESPONSE_DEADLINE_S,
    DEFAULT_RESPONSE_DEADLINE_S,
    ENV_UPSTREAM_OPEN_TIMEOUT_S,
    ENV_UPSTREAM_PING_INTERVAL_S,
    ENV_UPSTREAM_SETUP_TIMEOUT_S,
    ENV_UPSTREAM_MAX_MESSAGE_BYTES,
    DEFAULT_UPSTREAM_OPEN_TIMEOUT_S,
    DEFAULT_UPSTREAM_PING_INTERVAL_S,
    DEFAULT_UPSTREAM_SETUP_TIMEOUT_S,
    DEFAULT_UPSTREAM_MAX_MESSAGE_BYTES,
)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except Exception:
        return default


def _load_upstream_settings() -> UpstreamSettings:
    # An empty key is kept as-is; sessions report it instead of connecting.
    api_key = (os.getenv(ENV_GEMINI_API_KEY) or "").strip()
    return UpstreamSettings(
        api_key=api_key,
        model_name=_str_env(ENV_MODEL_NAME, DEFAULT_MODEL_NAME),
        url=_str_env(ENV_UPSTREAM_URL, DEFAULT_UPSTREAM_URL),
        voice_name=_str_env(ENV_VOICE_NAME, DEFAULT_VOICE_NAME),
        system_instruction=_str_env(ENV_SYSTEM_INSTRUCTION, DEFAULT_SYSTEM_INSTRUCTION),
        open_timeout_s=_float_env(ENV_UPSTREAM_OPEN_TIMEOUT_S, DEFAULT_UPSTREAM_OPEN_TIMEOUT_S),
        setup_timeout_s=_float_env(ENV_UPSTREAM_SETUP_TIMEOUT_S, DEFAULT_UPSTREAM_SETUP_TIMEOUT_S),
        response_deadline_s=_float_env(ENV_RESPONSE_DEADLINE_S, DEFAULT_RESPONSE_DEADLINE_S),
        max_message_bytes=max(1, _int_env(ENV_UPSTREAM_MAX_MESSAGE_BYTES, DEFAULT_UPSTREAM_MAX_MESSAGE_BYTES)),
        ping_interval_s=max(0.0, _float_env(ENV_UPSTREAM_PING_INTERVAL_S, DEFAULT_UPSTREAM_PING_INTERVAL_S)),
    )


def _load_audio_settings() -> AudioSettings:
    return AudioSettings(
        target_sample_rate_hz=TARGET_SAMPLE_RATE_HZ,
        playback_sample_rate_hz=PLAYBACK_SAMPLE_RATE_HZ,
        max_turn_audio_seconds=max(0.0, _float_env(ENV_MAX_TURN_AUDIO_SECONDS, DEFAULT_MAX_TURN_AUDIO_SECONDS)),
    )


def _load_limits_settings() -> LimitsSettings:
    max_connections = _int_env(ENV_MAX_CONCURRENT_CONNECTIONS, DEFAULT_MAX_CONCURRENT_CONNECTIONS)
    max_utterance_s = _float_env(ENV_MAX_UTTERANCE_AUDIO_SECONDS, DEFAULT_MAX_UTTERANCE_AUDIO_SECONDS)
    return LimitsSettings(
        max_concurrent_connections=max(1, max_connections),
        max_utterance_audio_seconds=max(0.0, max_utterance_s),
    )


def _load_websocket_settings() -> WebSocketSettings:
    return WebSocketSettings(
        idle_timeout_s=_float_env(ENV_WS_IDLE_TIMEOUT_S, DEFAULT_WS_IDLE_TIMEOUT_S),
        watchdog_tick_s=_float_env(ENV_WS_WATCHDOG_TICK_S, DEFAULT_WS_WATCHDOG_TICK_S),
        max_connection_duration_s=_float_env(ENV_WS_MAX_CONNECTION_DURATION_S, DEFAULT_WS_MAX_CONNECTION_DURATION_S),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        upstream=_load_upstream_settings(),
        audio=_load_audio_settings(),
        limits=_load_limits_settings(),
        websocket=_load_websocket_settings(),
    )


__all__ = ["load_settings"]
