"""Primary WebSocket connection handler orchestration."""

from __future__ import annotations

import logging
import contextlib

from fastapi import WebSocket

from live_relay.state import RuntimeDeps
from live_relay.relay.session import RelaySession
from live_relay.config.websocket import WS_CLOSE_BUSY_CODE, WS_ERROR_SERVER_AT_CAPACITY

from .errors import reject_connection
from .lifecycle import WebSocketLifecycle
from .transport import WebSocketTransport
from .message_loop import run_message_loop

logger = logging.getLogger(__name__)


async def _prepare_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> bool:
    if not await runtime_deps.connections.connect(ws):
        await reject_connection(
            ws,
            error_code=WS_ERROR_SERVER_AT_CAPACITY,
            message="Server cannot accept new connections. Please try again later.",
            close_code=WS_CLOSE_BUSY_CODE,
        )
        return False

    try:
        await ws.accept()
    except Exception:
        with contextlib.suppress(Exception):
            await runtime_deps.connections.disconnect(ws)
        raise
    return True


def _open_session(ws: WebSocket, runtime_deps: RuntimeDeps, lifecycle: WebSocketLifecycle) -> RelaySession:
    transport = WebSocketTransport(ws, touch=lifecycle.touch)
    session = runtime_deps.relay_bridge.new_session(transport)
    runtime_deps.sessions.add(session)
    lifecycle.set_busy_fn(lambda: session.is_busy)
    session.run()
    return session


async def handle_websocket_connection(ws: WebSocket, runtime_deps: RuntimeDeps) -> None:
    lifecycle: WebSocketLifecycle | None = None
    session: RelaySession | None = None
    admitted = False
    try:
        if not await _prepare_connection(ws, runtime_deps):
            return
        admitted = True

        lifecycle = WebSocketLifecycle(
            ws,
            idle_timeout_s=runtime_deps.settings.websocket.idle_timeout_s,
            watchdog_tick_s=runtime_deps.settings.websocket.watchdog_tick_s,
            max_connection_duration_s=runtime_deps.settings.websocket.max_connection_duration_s,
        )
        session = _open_session(ws, runtime_deps, lifecycle)
        lifecycle.start()

        logger.info(
            "WebSocket connection accepted session_id=%s. Active: %s",
            session.session_id,
            runtime_deps.connections.get_connection_count(),
        )
        await run_message_loop(ws, lifecycle, session, runtime_deps)
    finally:
        if session is not None:
            runtime_deps.sessions.remove(session.session_id)
            with contextlib.suppress(Exception):
                await session.close()

        if lifecycle is not None:
            with contextlib.suppress(Exception):
                await lifecycle.stop()

        if admitted:
            with contextlib.suppress(Exception):
                await runtime_deps.connections.disconnect(ws)
            logger.info(
                "WebSocket connection closed session_id=%s. Active: %s",
                session.session_id if session is not None else None,
                runtime_deps.connections.get_connection_count(),
            )


__all__ = ["handle_websocket_connection"]
