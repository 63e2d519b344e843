"""Shared error types for the live relay."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class InvalidContainerError(Exception):
    """Raised when bytes do not carry the canonical 44-byte PCM16 WAV header."""

    reason: str

    def __str__(self) -> str:
        return f"invalid audio container: {self.reason}"


@dataclass(frozen=True, slots=True)
class InvalidAudioPayloadError(Exception):
    """Raised when a textual audio payload is not valid base64."""

    reason: str

    def __str__(self) -> str:
        return f"invalid audio payload: {self.reason}"


@dataclass(frozen=True, slots=True)
class FragmentOrderError(Exception):
    """Raised when a fragment arrives out of sequence (a gap or a replay)."""

    expected: int
    received: int

    def __str__(self) -> str:
        return f"audio fragment out of order: expected {self.expected}, received {self.received}"


@dataclass(frozen=True, slots=True)
class TurnAudioOverflowError(Exception):
    """Raised when a model turn would exceed the aggregator byte budget."""

    limit_bytes: int
    attempted_bytes: int

    def __str__(self) -> str:
        return f"turn audio exceeded {self.limit_bytes} bytes (attempted {self.attempted_bytes})"


@dataclass(frozen=True, slots=True)
class UpstreamNotReadyError(Exception):
    """Raised when sending upstream before the setup acknowledgement."""

    state: str

    def __str__(self) -> str:
        return f"upstream connection not ready (state={self.state})"


@dataclass(frozen=True, slots=True)
class UpstreamSendError(Exception):
    """Raised when the upstream socket rejects an outbound frame."""

    reason: str

    def __str__(self) -> str:
        return f"upstream send failed: {self.reason}"


__all__ = [
    "FragmentOrderError",
    "InvalidAudioPayloadError",
    "InvalidContainerError",
    "TurnAudioOverflowError",
    "UpstreamNotReadyError",
    "UpstreamSendError",
]
