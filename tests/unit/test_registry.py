from __future__ import annotations

import pytest

from live_relay.state.phase import TurnPhase
from live_relay.relay.bridge import RelayBridge
from live_relay.relay.registry import SessionRegistry
from live_relay.runtime.settings_loader import load_settings


class _NullTransport:
    async def send_event(self, msg_type: str, payload: dict | None = None) -> bool:
        return True


@pytest.mark.asyncio
async def test_registry_tracks_and_closes_sessions(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    bridge = RelayBridge(settings=load_settings())
    registry = SessionRegistry()

    first = bridge.new_session(_NullTransport())
    second = bridge.new_session(_NullTransport(), session_id="fixed")
    registry.add(first)
    registry.add(second)

    assert len(registry) == 2
    assert "fixed" in registry
    assert registry.get(first.session_id) is first
    assert first.session_id != second.session_id

    with pytest.raises(ValueError):
        registry.add(second)

    assert registry.remove("fixed") is second
    assert registry.remove("fixed") is None

    first.run()
    await registry.close_all()
    assert len(registry) == 0
    assert first.phase is TurnPhase.CLOSED
