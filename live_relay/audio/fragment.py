"""Audio fragment value types and mime-type parsing."""

from __future__ import annotations

from dataclasses import dataclass

from live_relay.config.audio import PCM_BITS_PER_SAMPLE, PLAYBACK_SAMPLE_RATE_HZ


@dataclass(frozen=True, slots=True)
class AudioEncoding:
    codec: str
    sample_rate: int
    bit_depth: int = PCM_BITS_PER_SAMPLE


@dataclass(frozen=True, slots=True)
class AudioFragment:
    """One unit of model-produced audio, numbered in arrival order within a turn."""

    data: bytes
    encoding: AudioEncoding
    sequence: int

    def __len__(self) -> int:
        return len(self.data)


def parse_audio_mime(mime_type: str, *, default_rate: int = PLAYBACK_SAMPLE_RATE_HZ) -> AudioEncoding:
    """Parse ``audio/pcm;rate=24000`` style mime strings.

    Unknown or malformed rate parameters fall back to ``default_rate``.
    """
    head, *params = (mime_type or "").split(";")
    _, _, subtype = head.strip().lower().partition("/")
    codec = subtype or "pcm"
    if codec.startswith("l16"):
        codec = "pcm"
    rate = default_rate
    for param in params:
        key, _, value = param.partition("=")
        if key.strip().lower() != "rate":
            continue
        try:
            rate = int(value.strip())
        except ValueError:
            rate = default_rate
        if rate <= 0:
            rate = default_rate
    return AudioEncoding(codec=codec, sample_rate=rate)


__all__ = ["AudioEncoding", "AudioFragment", "parse_audio_mime"]
