"""Conversion between captured audio, the upstream container and playback samples.

Captured audio is whatever the client recorded (WAV, FLAC, OGG, ...). The model
expects 16 kHz mono PCM16 inside the canonical 44-byte WAV header and replies
with raw PCM16, which clients play as float samples in [-1, 1).
"""

from __future__ import annotations

import io
import base64
import logging
import binascii
from dataclasses import dataclass

import numpy as np
import soundfile as sf

from live_relay.errors import InvalidAudioPayloadError
from live_relay.config.audio import (
    PLAYBACK_DIVISOR,
    PCM_NEGATIVE_SCALE,
    PCM_POSITIVE_SCALE,
    PCM_BYTES_PER_SAMPLE,
    RESAMPLE_TOLERANCE_HZ,
    TARGET_SAMPLE_RATE_HZ,
    SILENCE_FALLBACK_SECONDS,
)

from .container import build_wav_container, is_canonical_container

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlaybackBuffer:
    samples: np.ndarray
    sample_rate: int

    @property
    def duration_s(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / float(self.sample_rate)


def _round_half_up(values: np.ndarray | float) -> np.ndarray:
    return np.floor(np.asarray(values, dtype=np.float64) + 0.5)


def resample_nearest(samples: np.ndarray, source_rate: int, target_rate: int = TARGET_SAMPLE_RATE_HZ) -> np.ndarray:
    """Nearest-neighbour resampling; rates within the tolerance pass through unchanged."""
    if source_rate <= 0:
        raise ValueError(f"source_rate must be positive, got {source_rate}")
    if abs(source_rate - target_rate) < RESAMPLE_TOLERANCE_HZ:
        return samples

    ratio = source_rate / target_rate
    out_len = int(_round_half_up(len(samples) / ratio))
    src_idx = _round_half_up(np.arange(out_len, dtype=np.float64) * ratio).astype(np.int64)

    out = np.zeros(out_len, dtype=np.float32)
    in_range = src_idx < len(samples)
    out[in_range] = samples[src_idx[in_range]]
    return out


def to_pcm16(samples: np.ndarray) -> bytes:
    clipped = np.clip(np.nan_to_num(samples.astype(np.float32, copy=False)), -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * PCM_NEGATIVE_SCALE, clipped * PCM_POSITIVE_SCALE)
    # astype truncates toward zero.
    return scaled.astype("<i2").tobytes()


def silence_container(
    seconds: float = SILENCE_FALLBACK_SECONDS,
    sample_rate: int = TARGET_SAMPLE_RATE_HZ,
) -> bytes:
    n_samples = int(round(seconds * sample_rate))
    return build_wav_container(bytes(n_samples * PCM_BYTES_PER_SAMPLE), sample_rate)


def _decode_capture(capture: bytes) -> tuple[np.ndarray, int]:
    data, sample_rate = sf.read(io.BytesIO(capture), dtype="float32", always_2d=True)
    if data.shape[0] == 0:
        raise ValueError("captured audio decoded to zero frames")
    # Only the first channel is kept.
    return np.ascontiguousarray(data[:, 0]), int(sample_rate)


def encode_for_upstream(capture: bytes) -> bytes:
    """Convert captured audio of any readable format into the canonical upstream container.

    Never raises: undecodable input is replaced by one second of silence so the
    conversation keeps flowing.
    """
    try:
        samples, sample_rate = _decode_capture(capture)
    except (sf.SoundFileError, RuntimeError, ValueError, TypeError) as exc:
        logger.warning("captured audio could not be decoded (%d bytes): %s; sending silence", len(capture), exc)
        return silence_container()

    resampled = resample_nearest(samples, sample_rate, TARGET_SAMPLE_RATE_HZ)
    return build_wav_container(to_pcm16(resampled), TARGET_SAMPLE_RATE_HZ)


def decode_for_playback(pcm: bytes, sample_rate: int) -> PlaybackBuffer:
    usable = len(pcm) - (len(pcm) % PCM_BYTES_PER_SAMPLE)
    ints = np.frombuffer(pcm[:usable], dtype="<i2")
    return PlaybackBuffer(samples=ints.astype(np.float32) / PLAYBACK_DIVISOR, sample_rate=int(sample_rate))


def encode_audio_b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_audio_b64(text: str) -> bytes:
    try:
        return base64.b64decode((text or "").strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidAudioPayloadError(str(exc)) from exc


def normalize_client_audio(audio_b64: str) -> str:
    """Return base64 of a canonical upstream container for a client payload.

    Payloads that already are canonical pass through untouched; anything else is
    transcoded, and garbage degrades to silence.
    """
    try:
        raw = decode_audio_b64(audio_b64)
    except InvalidAudioPayloadError as exc:
        logger.warning("client audio payload rejected: %s; sending silence", exc)
        return encode_audio_b64(silence_container())

    if is_canonical_container(raw):
        return audio_b64.strip()
    return encode_audio_b64(encode_for_upstream(raw))


__all__ = [
    "PlaybackBuffer",
    "decode_audio_b64",
    "decode_for_playback",
    "encode_audio_b64",
    "encode_for_upstream",
    "normalize_client_audio",
    "resample_nearest",
    "silence_container",
    "to_pcm16",
]
