"""State enums for relay sessions and upstream connections."""

from __future__ import annotations

from enum import Enum


class TurnPhase(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    READY = "ready"
    USER_TURN_PENDING = "user_turn_pending"
    MODEL_TURN_STREAMING = "model_turn_streaming"
    ERRORED = "errored"
    CLOSED = "closed"

    @property
    def turn_open(self) -> bool:
        return self in (TurnPhase.USER_TURN_PENDING, TurnPhase.MODEL_TURN_STREAMING)


class UpstreamState(str, Enum):
    CONNECTING = "connecting"
    CONFIGURING = "configuring"
    READY = "ready"
    CLOSING = "closing"
    CLOSED = "closed"


__all__ = ["TurnPhase", "UpstreamState"]
