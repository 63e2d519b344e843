"""Dispatch handlers for client protocol messages."""

from __future__ import annotations

from typing import Any
from collections.abc import Callable, Awaitable

from fastapi import WebSocket

from live_relay.state import RuntimeDeps
from live_relay.relay.session import RelaySession
from live_relay.config.limits import utterance_audio_bytes
from live_relay.config.websocket import (
    WS_KEY_AUDIO,
    WS_MSG_INTERRUPT,
    WS_KEY_TRANSCRIPT,
    WS_MSG_AUDIO_DATA,
    WS_MSG_START_SESSION,
    WS_ERROR_INVALID_PAYLOAD,
    WS_ERROR_UTTERANCE_TOO_LONG,
)

from .errors import send_error

HandlerFn = Callable[[WebSocket, RuntimeDeps, RelaySession, dict[str, Any]], Awaitable[None]]


def _estimate_b64_decoded_bytes(s: str) -> int:
    """Estimate decoded byte length of a base64 string without decoding it."""
    s = (s or "").strip()
    if not s:
        return 0

    padding = 0
    if s.endswith("=="):
        padding = 2
    elif s.endswith("="):
        padding = 1

    # base64 expands 3 bytes -> 4 chars
    return max(0, (len(s) * 3) // 4 - padding)


async def _handle_start_session(
    _ws: WebSocket,
    _runtime_deps: RuntimeDeps,
    session: RelaySession,
    _msg: dict[str, Any],
) -> None:
    await session.start()


async def _handle_audio_data(
    ws: WebSocket,
    runtime_deps: RuntimeDeps,
    session: RelaySession,
    msg: dict[str, Any],
) -> None:
    audio = msg.get(WS_KEY_AUDIO)
    if not isinstance(audio, str) or not audio.strip():
        await send_error(
            ws,
            error_code=WS_ERROR_INVALID_PAYLOAD,
            message="'audio' (base64 WAV) is required",
            details={"reason_code": "missing_audio"},
        )
        return

    transcript = msg.get(WS_KEY_TRANSCRIPT)
    if transcript is not None and not isinstance(transcript, str):
        await send_error(
            ws,
            error_code=WS_ERROR_INVALID_PAYLOAD,
            message="'transcript' must be a string",
            details={"reason_code": "invalid_transcript"},
        )
        return

    max_seconds = runtime_deps.settings.limits.max_utterance_audio_seconds
    max_bytes = utterance_audio_bytes(max_seconds)
    received = _estimate_b64_decoded_bytes(audio)
    if max_bytes and received > max_bytes:
        await send_error(
            ws,
            error_code=WS_ERROR_UTTERANCE_TOO_LONG,
            message="utterance exceeded maximum audio duration",
            details={
                "max_audio_seconds": float(max_seconds),
                "max_audio_bytes": int(max_bytes),
                "received_audio_bytes": int(received),
            },
        )
        return

    await session.send_user_audio(audio, transcript)


async def _handle_interrupt(
    _ws: WebSocket,
    _runtime_deps: RuntimeDeps,
    session: RelaySession,
    _msg: dict[str, Any],
) -> None:
    await session.interrupt()


HANDLERS: dict[str, HandlerFn] = {
    WS_MSG_START_SESSION: _handle_start_session,
    WS_MSG_AUDIO_DATA: _handle_audio_data,
    WS_MSG_INTERRUPT: _handle_interrupt,
}

__all__ = ["HANDLERS", "HandlerFn"]
