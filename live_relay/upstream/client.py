"""WebSocket client for one upstream live-model session."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from dataclasses import replace
from collections.abc import Callable

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from live_relay.state.phase import UpstreamState
from live_relay.state.settings import UpstreamSettings
from live_relay.config.upstream import UPSTREAM_CLOSE_TIMEOUT_S
from live_relay.errors import UpstreamSendError, UpstreamNotReadyError

from .events import (
    AudioChunk,
    TurnComplete,
    AudioPartLost,
    SetupComplete,
    UpstreamError,
    UpstreamEvent,
    GenerationInterrupted,
)
from .protocol import (
    redact_url,
    describe_close,
    encode_message,
    build_upstream_url,
    build_setup_message,
    parse_server_message,
    build_interrupt_message,
    build_user_turn_message,
)

logger = logging.getLogger(__name__)

EventSink = Callable[[UpstreamEvent], None]


class UpstreamSessionClient:
    """Owns the upstream socket: connect, configure, send turns, decode replies.

    Every inbound event, including the terminal close, is handed to ``on_event``.
    A close requested through ``close()`` is not reported.

    Audio parts are numbered from 0 within each model turn. A part that cannot
    be decoded still takes its number but is not forwarded, so the receiver sees
    a gap, and ``TurnComplete.fragment_count`` covers it.
    """

    def __init__(
        self,
        settings: UpstreamSettings,
        on_event: EventSink,
        *,
        connect_fn: Callable[..., Any] | None = None,
    ) -> None:
        self._settings = settings
        self._on_event = on_event
        self._connect_fn = connect_fn or websockets.connect
        self._ws: Any = None
        self._recv_task: asyncio.Task | None = None
        self._state = UpstreamState.CONNECTING
        self._close_requested = False
        self._turn_sequence = 0

    @property
    def state(self) -> UpstreamState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is UpstreamState.READY

    async def connect(self) -> None:
        self._state = UpstreamState.CONNECTING
        url = build_upstream_url(self._settings.url, self._settings.api_key)
        logger.info("upstream: connecting url=%s model=%s", redact_url(url), self._settings.model_name)
        try:
            ws = await self._connect_fn(
                url,
                open_timeout=self._settings.open_timeout_s,
                max_size=self._settings.max_message_bytes,
                ping_interval=self._settings.ping_interval_s or None,
                close_timeout=UPSTREAM_CLOSE_TIMEOUT_S,
            )
        except (OSError, TimeoutError, WebSocketException) as exc:
            self._state = UpstreamState.CLOSED
            if not self._close_requested:
                self._emit(UpstreamError(message=f"Gemini connection error: {exc}"))
            return

        self._ws = ws
        if self._close_requested:
            await self._close_socket()
            self._state = UpstreamState.CLOSED
            return

        self._state = UpstreamState.CONFIGURING
        try:
            await ws.send(encode_message(build_setup_message(self._settings)))
        except ConnectionClosed:
            self._state = UpstreamState.CLOSED
            if not self._close_requested:
                self._emit_close(ws)
            return
        logger.debug("upstream: setup sent voice=%s", self._settings.voice_name)
        self._recv_task = asyncio.create_task(self._receive_loop(ws))

    async def send_user_turn(self, audio_b64: str) -> None:
        await self._send(build_user_turn_message(audio_b64))
        self._turn_sequence = 0
        logger.debug("upstream: user turn sent (%d b64 chars)", len(audio_b64))

    async def send_interrupt(self) -> None:
        await self._send(build_interrupt_message())
        self._turn_sequence = 0
        logger.debug("upstream: interrupt sent")

    async def close(self) -> None:
        if self._state is UpstreamState.CLOSED and self._ws is None:
            self._close_requested = True
            return
        self._close_requested = True
        self._state = UpstreamState.CLOSING
        await self._close_socket()
        task = self._recv_task
        if task is not None and not task.done():
            try:
                await asyncio.wait_for(task, timeout=UPSTREAM_CLOSE_TIMEOUT_S)
            except TimeoutError:
                logger.warning("upstream: receive loop did not stop after close; cancelling")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._recv_task = None
        self._ws = None
        self._state = UpstreamState.CLOSED

    async def _close_socket(self) -> None:
        if self._ws is None:
            return
        with contextlib.suppress(Exception):
            await self._ws.close()

    async def _send(self, message: dict[str, Any]) -> None:
        if self._state is not UpstreamState.READY or self._ws is None:
            raise UpstreamNotReadyError(state=self._state.value)
        try:
            await self._ws.send(encode_message(message))
        except ConnectionClosed as exc:
            raise UpstreamSendError(reason=str(exc)) from exc

    async def _receive_loop(self, ws: Any) -> None:
        try:
            async for raw in ws:
                for event in parse_server_message(raw):
                    event = self._stamp_sequence(event)
                    if event is not None:
                        self._emit(event)
        except ConnectionClosed:
            pass
        if self._close_requested:
            return
        self._state = UpstreamState.CLOSED
        logger.info("upstream: connection closed code=%s reason=%s", ws.close_code, ws.close_reason)
        self._emit_close(ws)

    def _stamp_sequence(self, event: UpstreamEvent) -> UpstreamEvent | None:
        if isinstance(event, SetupComplete):
            self._state = UpstreamState.READY
            logger.info("upstream: setup complete")
        elif isinstance(event, AudioChunk):
            event = replace(event, sequence=self._turn_sequence)
            self._turn_sequence += 1
            logger.debug("upstream: audio part #%d %d bytes %s", event.sequence, len(event.data), event.mime_type)
        elif isinstance(event, AudioPartLost):
            logger.warning("upstream: audio part #%d lost (%s)", self._turn_sequence, event.reason)
            self._turn_sequence += 1
            return None
        elif isinstance(event, TurnComplete):
            event = replace(event, fragment_count=self._turn_sequence)
            self._turn_sequence = 0
        elif isinstance(event, GenerationInterrupted):
            logger.info("upstream: generation interrupted after %d parts", self._turn_sequence)
            self._turn_sequence = 0
        return event

    def _emit_close(self, ws: Any) -> None:
        code = ws.close_code or 1006
        self._emit(UpstreamError(message=describe_close(code, ws.close_reason), close_code=code))

    def _emit(self, event: UpstreamEvent) -> None:
        try:
            self._on_event(event)
        except Exception:
            logger.exception("upstream: event sink failed for %s", type(event).__name__)


__all__ = ["EventSink", "UpstreamSessionClient"]
