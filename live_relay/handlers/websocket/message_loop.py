"""Receive loop for one downstream connection."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from typing import Literal

from fastapi import WebSocket, WebSocketDisconnect

from live_relay.state import RuntimeDeps
from live_relay.relay.session import RelaySession
from live_relay.config.websocket import WS_ERROR_INVALID_MESSAGE, WS_CLOSE_CLIENT_REQUEST_CODE

from .dispatch import HANDLERS
from .parser import parse_client_message
from .lifecycle import WebSocketLifecycle
from .errors import send_error, safe_send_envelope

logger = logging.getLogger(__name__)


async def _recv_text_with_watchdog(ws: WebSocket, lifecycle: WebSocketLifecycle) -> tuple[str | None, bool]:
    try:
        message = await asyncio.wait_for(
            ws.receive_text(),
            timeout=lifecycle.watchdog_tick_s * 2,
        )
        return message, False
    except TimeoutError:
        return None, lifecycle.should_close()


async def _handle_control_message(ws: WebSocket, msg_type: str) -> Literal["none", "continue", "close"]:
    if msg_type == "ping":
        await safe_send_envelope(ws, msg_type="pong")
        return "continue"
    if msg_type == "pong":
        return "continue"
    if msg_type == "end":
        await safe_send_envelope(ws, msg_type="session_end")
        with contextlib.suppress(Exception):
            await ws.close(code=WS_CLOSE_CLIENT_REQUEST_CODE)
        return "close"
    return "none"


async def _parse_or_send_error(ws: WebSocket, raw: str) -> dict[str, Any] | None:
    try:
        return parse_client_message(raw)
    except ValueError as exc:
        await send_error(ws, error_code=WS_ERROR_INVALID_MESSAGE, message=str(exc))
        return None


async def run_message_loop(
    ws: WebSocket,
    lifecycle: WebSocketLifecycle,
    session: RelaySession,
    runtime_deps: RuntimeDeps,
) -> None:
    try:
        while True:
            raw, should_exit = await _recv_text_with_watchdog(ws, lifecycle)
            if should_exit:
                return
            if raw is None:
                continue

            lifecycle.touch()

            msg = await _parse_or_send_error(ws, raw)
            if msg is None:
                continue

            msg_type = msg["type"]
            control = await _handle_control_message(ws, msg_type)
            if control == "close":
                return
            if control == "continue":
                continue

            handler = HANDLERS.get(msg_type)
            if handler is not None:
                await handler(ws, runtime_deps, session, msg)
                continue

            await send_error(
                ws,
                error_code=WS_ERROR_INVALID_MESSAGE,
                message=f"message type '{msg_type}' is not supported",
                details={"reason_code": "unknown_message_type"},
            )
    except WebSocketDisconnect:
        logger.debug("session %s: client disconnected", session.session_id)
        return


__all__ = ["run_message_loop"]
