"""Messages accepted by a relay session's inbox."""

from __future__ import annotations

from dataclasses import dataclass

from live_relay.upstream.events import UpstreamEvent


@dataclass(frozen=True, slots=True)
class StartSession:
    pass


@dataclass(frozen=True, slots=True)
class UserAudio:
    audio: str
    transcript: str | None = None


@dataclass(frozen=True, slots=True)
class Interrupt:
    pass


@dataclass(frozen=True, slots=True)
class CloseSession:
    pass


@dataclass(frozen=True, slots=True)
class UpstreamEventReceived:
    generation: int
    event: UpstreamEvent


@dataclass(frozen=True, slots=True)
class ResponseDeadlineElapsed:
    turn_id: int


@dataclass(frozen=True, slots=True)
class SetupTimedOut:
    generation: int


SessionCommand = (
    StartSession
    | UserAudio
    | Interrupt
    | CloseSession
    | UpstreamEventReceived
    | ResponseDeadlineElapsed
    | SetupTimedOut
)

__all__ = [
    "CloseSession",
    "Interrupt",
    "ResponseDeadlineElapsed",
    "SessionCommand",
    "SetupTimedOut",
    "StartSession",
    "UpstreamEventReceived",
    "UserAudio",
]
