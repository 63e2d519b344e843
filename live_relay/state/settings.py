"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UpstreamSettings:
    api_key: str
    model_name: str
    url: str
    voice_name: str
    system_instruction: str
    open_timeout_s: float
    setup_timeout_s: float
    response_deadline_s: float
    max_message_bytes: int
    ping_interval_s: float


@dataclass(frozen=True, slots=True)
class AudioSettings:
    target_sample_rate_hz: int
    playback_sample_rate_hz: int
    max_turn_audio_seconds: float


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    max_concurrent_connections: int
    max_utterance_audio_seconds: float


@dataclass(frozen=True, slots=True)
class WebSocketSettings:
    idle_timeout_s: float
    watchdog_tick_s: float
    max_connection_duration_s: float


@dataclass(frozen=True, slots=True)
class AppSettings:
    upstream: UpstreamSettings
    audio: AudioSettings
    limits: LimitsSettings
    websocket: WebSocketSettings


__all__ = [
    "AppSettings",
    "AudioSettings",
    "LimitsSettings",
    "UpstreamSettings",
    "WebSocketSettings",
]
