"""Canonical 44-byte RIFF/WAVE container for mono PCM16 audio."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from live_relay.errors import InvalidContainerError
from live_relay.config.audio import (
    WAV_FORMAT_PCM,
    TARGET_CHANNELS,
    WAV_HEADER_BYTES,
    PCM_BITS_PER_SAMPLE,
    WAV_FMT_CHUNK_BYTES,
    PCM_BYTES_PER_SAMPLE,
    TARGET_SAMPLE_RATE_HZ,
)

# RIFF id, RIFF size, WAVE id, fmt id, fmt size, format, channels, rate,
# byte rate, block align, bits per sample, data id, data size.
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


@dataclass(frozen=True, slots=True)
class WavHeader:
    sample_rate: int
    channels: int
    bits_per_sample: int
    byte_rate: int
    block_align: int
    data_size: int


def build_wav_container(pcm: bytes, sample_rate: int = TARGET_SAMPLE_RATE_HZ) -> bytes:
    data_size = len(pcm)
    block_align = TARGET_CHANNELS * PCM_BYTES_PER_SAMPLE
    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        WAV_FMT_CHUNK_BYTES,
        WAV_FORMAT_PCM,
        TARGET_CHANNELS,
        int(sample_rate),
        int(sample_rate) * block_align,
        block_align,
        PCM_BITS_PER_SAMPLE,
        b"data",
        data_size,
    )
    return header + bytes(pcm)


def parse_wav_header(data: bytes) -> WavHeader:
    if len(data) < WAV_HEADER_BYTES:
        raise InvalidContainerError(f"expected at least {WAV_HEADER_BYTES} bytes, got {len(data)}")
    (
        riff_id,
        _riff_size,
        wave_id,
        fmt_id,
        fmt_size,
        audio_format,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        data_id,
        data_size,
    ) = _HEADER.unpack_from(data, 0)
    if riff_id != b"RIFF" or wave_id != b"WAVE":
        raise InvalidContainerError("missing RIFF/WAVE signature")
    if fmt_id != b"fmt " or fmt_size != WAV_FMT_CHUNK_BYTES or audio_format != WAV_FORMAT_PCM:
        raise InvalidContainerError("fmt chunk is not 16-byte linear PCM")
    if data_id != b"data":
        raise InvalidContainerError("data chunk does not follow fmt chunk")
    return WavHeader(
        sample_rate=sample_rate,
        channels=channels,
        bits_per_sample=bits_per_sample,
        byte_rate=byte_rate,
        block_align=block_align,
        data_size=data_size,
    )


def is_canonical_container(data: bytes, sample_rate: int = TARGET_SAMPLE_RATE_HZ) -> bool:
    """True when ``data`` is exactly what ``build_wav_container`` would emit for its payload."""
    try:
        header = parse_wav_header(data)
    except InvalidContainerError:
        return False
    return (
        header.sample_rate == sample_rate
        and header.channels == TARGET_CHANNELS
        and header.bits_per_sample == PCM_BITS_PER_SAMPLE
        and header.byte_rate == sample_rate * TARGET_CHANNELS * PCM_BYTES_PER_SAMPLE
        and header.block_align == TARGET_CHANNELS * PCM_BYTES_PER_SAMPLE
        and header.data_size == len(data) - WAV_HEADER_BYTES
    )


__all__ = ["WavHeader", "build_wav_container", "is_canonical_container", "parse_wav_header"]
