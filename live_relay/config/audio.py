"""Audio format constants for the upstream container and playback PCM."""

from __future__ import annotations

# Upstream input: 16 kHz mono signed 16-bit little-endian in a 44-byte WAV header.
TARGET_SAMPLE_RATE_HZ: int = 16000
TARGET_CHANNELS: int = 1
PCM_BITS_PER_SAMPLE: int = 16
PCM_BYTES_PER_SAMPLE: int = PCM_BITS_PER_SAMPLE // 8
WAV_HEADER_BYTES: int = 44
WAV_FMT_CHUNK_BYTES: int = 16
WAV_FORMAT_PCM: int = 1

# Model output arrives as raw PCM16 at 24 kHz unless the mime type says otherwise.
PLAYBACK_SAMPLE_RATE_HZ: int = 24000

# Source rates closer than this to the target are passed through unresampled.
RESAMPLE_TOLERANCE_HZ: int = 100

# int16 conversion is asymmetric so -1.0 maps to -32768 and 1.0 to 32767.
PCM_NEGATIVE_SCALE: float = 32768.0
PCM_POSITIVE_SCALE: float = 32767.0
PLAYBACK_DIVISOR: float = 32768.0

SILENCE_FALLBACK_SECONDS: float = 1.0

ENV_MAX_TURN_AUDIO_SECONDS = "MAX_TURN_AUDIO_SECONDS"
DEFAULT_MAX_TURN_AUDIO_SECONDS: float = float(5 * 60)


def max_turn_audio_bytes(seconds: float, sample_rate: int = PLAYBACK_SAMPLE_RATE_HZ) -> int:
    """Byte budget for one model turn; 0 disables the cap."""
    if seconds <= 0:
        return 0
    return int(seconds * sample_rate * PCM_BYTES_PER_SAMPLE)


__all__ = [
    "DEFAULT_MAX_TURN_AUDIO_SECONDS",
    "ENV_MAX_TURN_AUDIO_SECONDS",
    "PCM_BITS_PER_SAMPLE",
    "PCM_BYTES_PER_SAMPLE",
    "PCM_NEGATIVE_SCALE",
    "PCM_POSITIVE_SCALE",
    "PLAYBACK_DIVISOR",
    "PLAYBACK_SAMPLE_RATE_HZ",
    "RESAMPLE_TOLERANCE_HZ",
    "SILENCE_FALLBACK_SECONDS",
    "TARGET_CHANNELS",
    "TARGET_SAMPLE_RATE_HZ",
    "WAV_FMT_CHUNK_BYTES",
    "WAV_FORMAT_PCM",
    "WAV_HEADER_BYTES",
    "max_turn_audio_bytes",
]
