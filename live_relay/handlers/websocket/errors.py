"""Send helpers and error envelopes for the downstream JSON channel."""

from __future__ import annotations

import logging
from typing import Any

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from live_relay.config.websocket import WS_KEY_TYPE, WS_KEY_MESSAGE, WS_EVENT_ERROR

logger = logging.getLogger(__name__)


def build_error_payload(
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {WS_KEY_MESSAGE: message, "code": code}
    if details:
        payload["details"] = dict(details)
    return payload


def build_envelope(msg_type: str, payload: dict[str, Any] | None = None) -> dict[str, Any]:
    envelope = {key: value for key, value in (payload or {}).items() if key != WS_KEY_TYPE}
    return {WS_KEY_TYPE: msg_type, **envelope}


async def safe_send_text(ws: WebSocket, text: str) -> bool:
    try:
        await ws.send_text(text)
    except WebSocketDisconnect:
        return False
    except Exception:
        logger.debug("WebSocket send failed", exc_info=True)
        return False
    return True


async def safe_send_envelope(ws: WebSocket, *, msg_type: str, payload: dict[str, Any] | None = None) -> bool:
    data = build_envelope(msg_type, payload)
    return await safe_send_text(ws, orjson.dumps(data).decode("utf-8"))


async def send_error(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> bool:
    return await safe_send_envelope(
        ws,
        msg_type=WS_EVENT_ERROR,
        payload=build_error_payload(error_code, message, details=details),
    )


async def reject_connection(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    close_code: int,
) -> None:
    # Accept so we can send a structured error, then close.
    try:
        await ws.accept()
    except Exception:
        return
    await send_error(ws, error_code=error_code, message=message)
    try:
        await ws.close(code=close_code, reason=message)
    except Exception:
        return


__all__ = [
    "build_envelope",
    "build_error_payload",
    "reject_connection",
    "safe_send_envelope",
    "safe_send_text",
    "send_error",
]
