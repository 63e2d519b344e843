"""Runtime dependency construction (relay sessions + admission control)."""

from __future__ import annotations

import logging

from live_relay.state import RuntimeDeps
from live_relay.relay.bridge import RelayBridge
from live_relay.state.settings import AppSettings
from live_relay.relay.registry import SessionRegistry
from live_relay.relay.ports import UpstreamClientFactory
from live_relay.handlers.connections import ConnectionManager

from .settings_loader import load_settings

logger = logging.getLogger(__name__)


def build_runtime_deps(
    settings: AppSettings | None = None,
    *,
    client_factory: UpstreamClientFactory | None = None,
) -> RuntimeDeps:
    settings = settings or load_settings()
    if not settings.upstream.api_key:
        logger.warning("GEMINI_API_KEY is not set; sessions will report it instead of connecting")
    logger.info(
        "runtime: model=%s voice=%s max_connections=%d",
        settings.upstream.model_name,
        settings.upstream.voice_name,
        settings.limits.max_concurrent_connections,
    )
    return RuntimeDeps(
        connections=ConnectionManager(max_connections=settings.limits.max_concurrent_connections),
        sessions=SessionRegistry(),
        relay_bridge=RelayBridge(settings=settings, client_factory=client_factory),
        settings=settings,
    )


__all__ = ["RuntimeDeps", "build_runtime_deps"]
