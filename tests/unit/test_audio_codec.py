from __future__ import annotations

import io
import struct

import numpy as np
import pytest
import soundfile as sf

from live_relay.errors import InvalidContainerError, InvalidAudioPayloadError
from live_relay.config.audio import WAV_HEADER_BYTES, TARGET_SAMPLE_RATE_HZ, SILENCE_FALLBACK_SECONDS
from live_relay.audio.container import parse_wav_header, build_wav_container, is_canonical_container
from live_relay.audio.codec import (
    to_pcm16,
    resample_nearest,
    decode_audio_b64,
    encode_audio_b64,
    silence_container,
    decode_for_playback,
    encode_for_upstream,
    normalize_client_audio,
)


def _wav_bytes(samples: np.ndarray, sample_rate: int, *, subtype: str = "PCM_16") -> bytes:
    buf = io.BytesIO()
    sf.write(buf, samples, sample_rate, format="WAV", subtype=subtype)
    return buf.getvalue()


def _tone(seconds: float, sample_rate: int, freq: float = 440.0) -> np.ndarray:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return (0.5 * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def test_wav_header_fields_are_consistent() -> None:
    pcm = bytes(range(200))
    data = build_wav_container(pcm, 16000)

    assert len(data) == WAV_HEADER_BYTES + len(pcm)
    assert data[0:4] == b"RIFF"
    assert data[8:12] == b"WAVE"
    assert struct.unpack_from("<I", data, 4)[0] == 36 + len(pcm)
    assert struct.unpack_from("<I", data, 40)[0] == len(pcm)

    header = parse_wav_header(data)
    assert header.sample_rate == 16000
    assert header.channels == 1
    assert header.bits_per_sample == 16
    assert header.byte_rate == 16000 * 2
    assert header.block_align == 2
    assert header.data_size == len(pcm)
    assert is_canonical_container(data)


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"RIFF",
        b"X" * 64,
        build_wav_container(b"\x00\x00", 16000)[:40],
    ],
)
def test_parse_wav_header_rejects_foreign_bytes(data: bytes) -> None:
    with pytest.raises(InvalidContainerError):
        parse_wav_header(data)
    assert not is_canonical_container(data)


def test_non_target_rate_container_is_not_canonical() -> None:
    assert not is_canonical_container(build_wav_container(b"\x00\x00" * 10, 44100))


def test_encode_for_upstream_resamples_to_target_rate() -> None:
    source_rate = 44100
    samples = _tone(1.0, source_rate)
    out = encode_for_upstream(_wav_bytes(samples, source_rate))

    header = parse_wav_header(out)
    assert header.sample_rate == TARGET_SAMPLE_RATE_HZ
    assert header.channels == 1
    assert header.bits_per_sample == 16
    assert header.data_size == len(out) - WAV_HEADER_BYTES
    assert header.byte_rate == TARGET_SAMPLE_RATE_HZ * 2
    assert header.block_align == 2
    assert is_canonical_container(out)

    expected = round(len(samples) * TARGET_SAMPLE_RATE_HZ / source_rate)
    assert abs(header.data_size // 2 - expected) <= 1


def test_encode_for_upstream_keeps_first_channel_only() -> None:
    left = np.full(1600, 0.25, dtype=np.float32)
    right = np.full(1600, -0.75, dtype=np.float32)
    out = encode_for_upstream(_wav_bytes(np.stack([left, right], axis=1), 16000))

    ints = np.frombuffer(out[WAV_HEADER_BYTES:], dtype="<i2")
    assert len(ints) == 1600
    assert np.all(ints > 0)


@pytest.mark.parametrize("capture", [b"", b"definitely not audio", bytes(1000)])
def test_encode_for_upstream_falls_back_to_silence(capture: bytes) -> None:
    out = encode_for_upstream(capture)

    header = parse_wav_header(out)
    assert header.sample_rate == TARGET_SAMPLE_RATE_HZ
    assert header.data_size == int(SILENCE_FALLBACK_SECONDS * TARGET_SAMPLE_RATE_HZ) * 2
    assert set(out[WAV_HEADER_BYTES:]) == {0}
    assert out == silence_container()


def test_resample_skips_rates_within_tolerance() -> None:
    samples = np.linspace(-1, 1, 1000, dtype=np.float32)
    assert resample_nearest(samples, 16050, 16000) is samples


def test_resample_nearest_picks_rounded_source_index() -> None:
    samples = np.arange(10, dtype=np.float32)
    out = resample_nearest(samples, 20000, 10000)
    assert out.tolist() == [0.0, 2.0, 4.0, 6.0, 8.0]


def test_resample_nearest_zero_fills_past_the_end() -> None:
    samples = np.ones(3, dtype=np.float32)
    # 3 samples at 48k -> round(3 / 3) = 1 sample; upsampling 3 -> 9 stays in range.
    assert resample_nearest(samples, 48000, 16000).tolist() == [1.0]
    up = resample_nearest(samples, 16000, 48000)
    assert len(up) == 9
    # index round(8 / 3) = 3 falls outside the source.
    assert up[-1] == 0.0


def test_resample_rejects_non_positive_rate() -> None:
    with pytest.raises(ValueError):
        resample_nearest(np.zeros(4, dtype=np.float32), 0, 16000)


def test_pcm16_scaling_is_asymmetric_and_clamped() -> None:
    pcm = to_pcm16(np.array([-1.0, 1.0, -2.0, 2.0, 0.0, 0.5, -0.5], dtype=np.float32))
    assert np.frombuffer(pcm, dtype="<i2").tolist() == [-32768, 32767, -32768, 32767, 0, 16383, -16384]


def test_decode_for_playback_normalizes_samples() -> None:
    pcm = np.array([-32768, 0, 16384, 32767], dtype="<i2").tobytes()
    buf = decode_for_playback(pcm + b"\x01", 24000)

    assert buf.sample_rate == 24000
    assert buf.samples.dtype == np.float32
    assert buf.samples.tolist() == [-1.0, 0.0, 0.5, 32767 / 32768]
    assert buf.duration_s == pytest.approx(4 / 24000)


def test_decode_for_playback_empty() -> None:
    buf = decode_for_playback(b"", 24000)
    assert len(buf.samples) == 0
    assert buf.duration_s == 0.0


def test_b64_helpers() -> None:
    assert decode_audio_b64(encode_audio_b64(b"\x00\x01\xff")) == b"\x00\x01\xff"
    with pytest.raises(InvalidAudioPayloadError):
        decode_audio_b64("not base64!")


def test_normalize_client_audio_passes_canonical_container_through() -> None:
    canonical = encode_audio_b64(build_wav_container(b"\x10\x00" * 160, 16000))
    assert normalize_client_audio(canonical) == canonical


def test_normalize_client_audio_transcodes_other_formats() -> None:
    flac = io.BytesIO()
    sf.write(flac, _tone(0.5, 48000), 48000, format="FLAC")

    out = decode_audio_b64(normalize_client_audio(encode_audio_b64(flac.getvalue())))
    assert is_canonical_container(out)
    assert abs(parse_wav_header(out).data_size // 2 - 8000) <= 1


def test_normalize_client_audio_degrades_garbage_to_silence() -> None:
    assert decode_audio_b64(normalize_client_audio("%%%")) == silence_container()
