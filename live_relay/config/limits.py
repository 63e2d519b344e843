"""Admission control and utterance limits (env variable names and defaults)."""

from __future__ import annotations

from live_relay.config.audio import TARGET_SAMPLE_RATE_HZ, PCM_BYTES_PER_SAMPLE

ENV_MAX_CONCURRENT_CONNECTIONS = "MAX_CONCURRENT_CONNECTIONS"
DEFAULT_MAX_CONCURRENT_CONNECTIONS = 100

ENV_MAX_UTTERANCE_AUDIO_SECONDS = "MAX_UTTERANCE_AUDIO_SECONDS"
DEFAULT_MAX_UTTERANCE_AUDIO_SECONDS = 120.0


def utterance_audio_bytes(seconds: float) -> int:
    if seconds <= 0:
        return 0
    return int(seconds * TARGET_SAMPLE_RATE_HZ * PCM_BYTES_PER_SAMPLE)


__all__ = [
    "DEFAULT_MAX_CONCURRENT_CONNECTIONS",
    "DEFAULT_MAX_UTTERANCE_AUDIO_SECONDS",
    "ENV_MAX_CONCURRENT_CONNECTIONS",
    "ENV_MAX_UTTERANCE_AUDIO_SECONDS",
    "utterance_audio_bytes",
]
