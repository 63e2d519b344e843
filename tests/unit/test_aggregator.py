from __future__ import annotations

import pytest

from live_relay.audio.aggregator import ChunkAggregator
from live_relay.errors import FragmentOrderError, TurnAudioOverflowError
from live_relay.audio.fragment import AudioEncoding, AudioFragment, parse_audio_mime

_PCM24 = AudioEncoding(codec="pcm", sample_rate=24000)


def _fragment(data: bytes, sequence: int) -> AudioFragment:
    return AudioFragment(data=data, encoding=_PCM24, sequence=sequence)


def test_drain_concatenates_in_append_order() -> None:
    agg = ChunkAggregator()
    agg.append(_fragment(b"ab", 0))
    agg.append(_fragment(b"", 1))
    agg.append(_fragment(b"cde", 2))

    assert len(agg) == 3
    assert agg.buffered_bytes == 5
    assert [f.data for f in agg.pending_fragments()] == [b"ab", b"", b"cde"]
    assert agg.drain_on_complete() == b"abcde"


def test_drain_empties_and_restarts_sequence() -> None:
    agg = ChunkAggregator()
    agg.append(_fragment(b"xy", 0))
    agg.drain_on_complete()

    assert len(agg) == 0
    assert agg.buffered_bytes == 0
    assert agg.next_sequence == 0
    assert agg.drain_on_complete() == b""


def test_reset_discards_without_output() -> None:
    agg = ChunkAggregator()
    agg.append(_fragment(b"xy", 0))
    agg.reset()

    assert agg.pending_fragments() == ()
    assert agg.drain_on_complete() == b""


@pytest.mark.parametrize("sequence", [1, 5, -1])
def test_gap_is_detected(sequence: int) -> None:
    agg = ChunkAggregator()
    with pytest.raises(FragmentOrderError) as exc:
        agg.append(_fragment(b"zz", sequence))
    assert exc.value.expected == 0
    assert exc.value.received == sequence
    assert len(agg) == 0


def test_replayed_sequence_is_detected() -> None:
    agg = ChunkAggregator()
    agg.append(_fragment(b"a", 0))
    with pytest.raises(FragmentOrderError):
        agg.append(_fragment(b"a", 0))
    assert agg.drain_on_complete() == b"a"


def test_overflow_rejects_fragment_and_keeps_buffer() -> None:
    agg = ChunkAggregator(max_bytes=4)
    agg.append(_fragment(b"abc", 0))
    with pytest.raises(TurnAudioOverflowError) as exc:
        agg.append(_fragment(b"de", 1))

    assert exc.value.limit_bytes == 4
    assert exc.value.attempted_bytes == 5
    assert agg.drain_on_complete() == b"abc"


@pytest.mark.parametrize(
    ("mime", "codec", "rate"),
    [
        ("audio/pcm;rate=24000", "pcm", 24000),
        ("audio/pcm; rate=16000", "pcm", 16000),
        ("audio/pcm", "pcm", 24000),
        ("audio/L16;codec=pcm;rate=22050", "pcm", 22050),
        ("audio/pcm;rate=abc", "pcm", 24000),
        ("", "pcm", 24000),
    ],
)
def test_parse_audio_mime(mime: str, codec: str, rate: int) -> None:
    encoding = parse_audio_mime(mime)
    assert encoding.codec == codec
    assert encoding.sample_rate == rate
    assert encoding.bit_depth == 16
