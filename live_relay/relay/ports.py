"""Interfaces a relay session depends on."""

from __future__ import annotations

from typing import Any, Protocol
from collections.abc import Callable

from live_relay.state.phase import UpstreamState
from live_relay.upstream.events import UpstreamEvent
from live_relay.state.settings import UpstreamSettings


class ClientTransport(Protocol):
    """Outbound half of the downstream channel; returns False once the client is gone."""

    async def send_event(self, msg_type: str, payload: dict[str, Any] | None = None) -> bool: ...


class UpstreamClient(Protocol):
    @property
    def state(self) -> UpstreamState: ...

    @property
    def is_ready(self) -> bool: ...

    async def connect(self) -> None: ...

    async def send_user_turn(self, audio_b64: str) -> None: ...

    async def send_interrupt(self) -> None: ...

    async def close(self) -> None: ...


UpstreamClientFactory = Callable[[UpstreamSettings, Callable[[UpstreamEvent], None]], UpstreamClient]

__all__ = ["ClientTransport", "UpstreamClient", "UpstreamClientFactory"]
