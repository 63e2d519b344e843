"""Factory wiring new downstream connections to relay sessions."""

from __future__ import annotations

import uuid

from live_relay.state.settings import AppSettings
from live_relay.config.audio import max_turn_audio_bytes
from live_relay.upstream.client import UpstreamSessionClient

from .session import RelaySession
from .ports import ClientTransport, UpstreamClientFactory


class RelayBridge:
    def __init__(self, *, settings: AppSettings, client_factory: UpstreamClientFactory | None = None) -> None:
        self._settings = settings
        self._client_factory: UpstreamClientFactory = client_factory or UpstreamSessionClient

    def new_session(self, transport: ClientTransport, *, session_id: str | None = None) -> RelaySession:
        audio = self._settings.audio
        return RelaySession(
            session_id=session_id or uuid.uuid4().hex,
            transport=transport,
            settings=self._settings.upstream,
            client_factory=self._client_factory,
            max_turn_audio_bytes=max_turn_audio_bytes(audio.max_turn_audio_seconds, audio.playback_sample_rate_hz),
        )


__all__ = ["RelayBridge"]
