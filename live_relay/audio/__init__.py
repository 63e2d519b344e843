from .aggregator import ChunkAggregator
from .fragment import AudioEncoding, AudioFragment, parse_audio_mime
from .container import WavHeader, parse_wav_header, build_wav_container, is_canonical_container
from .codec import (
    PlaybackBuffer,
    decode_audio_b64,
    encode_audio_b64,
    silence_container,
    decode_for_playback,
    encode_for_upstream,
    normalize_client_audio,
)

__all__ = [
    "AudioEncoding",
    "AudioFragment",
    "ChunkAggregator",
    "PlaybackBuffer",
    "WavHeader",
    "build_wav_container",
    "decode_audio_b64",
    "decode_for_playback",
    "encode_audio_b64",
    "encode_for_upstream",
    "is_canonical_container",
    "normalize_client_audio",
    "parse_audio_mime",
    "parse_wav_header",
    "silence_container",
]
