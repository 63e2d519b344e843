"""Downstream transport handed to relay sessions."""

from __future__ import annotations

from typing import Any
from collections.abc import Callable

from fastapi import WebSocket

from .errors import safe_send_envelope


class WebSocketTransport:
    """Sends flat JSON events to one client; after the first failed send it stays closed."""

    def __init__(self, ws: WebSocket, *, touch: Callable[[], None] | None = None) -> None:
        self._ws = ws
        self._touch = touch
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send_event(self, msg_type: str, payload: dict[str, Any] | None = None) -> bool:
        if self._closed:
            return False
        if self._touch is not None:
            self._touch()
        sent = await safe_send_envelope(self._ws, msg_type=msg_type, payload=payload)
        if not sent:
            self._closed = True
        return sent


__all__ = ["WebSocketTransport"]
