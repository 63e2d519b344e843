"""Typed inbound events decoded from upstream frames."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SetupComplete:
    pass


@dataclass(frozen=True, slots=True)
class AudioChunk:
    """One model audio part. ``sequence`` is its position within the model turn."""

    data: bytes
    mime_type: str
    sequence: int | None = None


@dataclass(frozen=True, slots=True)
class AudioPartLost:
    """An audio part that arrived but could not be decoded."""

    mime_type: str
    reason: str


@dataclass(frozen=True, slots=True)
class TurnComplete:
    """End of a model turn; ``fragment_count`` counts every audio part it carried, lost ones included."""

    fragment_count: int | None = None


@dataclass(frozen=True, slots=True)
class GenerationInterrupted:
    pass


@dataclass(frozen=True, slots=True)
class UpstreamError:
    message: str
    close_code: int | None = None


UpstreamEvent = (
    SetupComplete | AudioChunk | AudioPartLost | TurnComplete | GenerationInterrupted | UpstreamError
)

__all__ = [
    "AudioChunk",
    "AudioPartLost",
    "GenerationInterrupted",
    "SetupComplete",
    "TurnComplete",
    "UpstreamError",
    "UpstreamEvent",
]
