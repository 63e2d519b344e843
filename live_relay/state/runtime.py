"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from live_relay.relay.bridge import RelayBridge
    from live_relay.state.settings import AppSettings
    from live_relay.relay.registry import SessionRegistry
    from live_relay.handlers.connections import ConnectionManager


@dataclass(slots=True)
class RuntimeDeps:
    connections: ConnectionManager
    sessions: SessionRegistry
    relay_bridge: RelayBridge
    settings: AppSettings

    async def shutdown(self) -> None:
        try:
            await self.sessions.close_all()
        except Exception:
            logger.exception("runtime shutdown failed")


__all__ = ["RuntimeDeps"]
