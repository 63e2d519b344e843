"""Wire format of the upstream bidirectional live-model protocol."""

from __future__ import annotations

import base64
import logging
import binascii
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

import orjson

from live_relay.state.settings import UpstreamSettings
from live_relay.config.upstream import (
    CLOSE_CODE_REASONS,
    RESPONSE_MODALITIES,
    UNKNOWN_CLOSE_REASON,
    MODEL_RESOURCE_PREFIX,
    UPSTREAM_INPUT_MIME_TYPE,
    UPSTREAM_KEY_QUERY_PARAM,
    UPSTREAM_AUDIO_MIME_PREFIX,
)

from .events import (
    AudioChunk,
    TurnComplete,
    AudioPartLost,
    SetupComplete,
    UpstreamError,
    UpstreamEvent,
    GenerationInterrupted,
)

logger = logging.getLogger(__name__)


def build_upstream_url(base_url: str, api_key: str) -> str:
    parts = urlsplit(base_url)
    query = urlencode({UPSTREAM_KEY_QUERY_PARAM: api_key})
    if parts.query:
        query = f"{parts.query}&{query}"
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def redact_url(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def model_resource_name(model_name: str) -> str:
    if model_name.startswith(MODEL_RESOURCE_PREFIX):
        return model_name
    return f"{MODEL_RESOURCE_PREFIX}{model_name}"


def build_setup_message(settings: UpstreamSettings) -> dict[str, Any]:
    return {
        "setup": {
            "model": model_resource_name(settings.model_name),
            "generation_config": {
                "response_modalities": list(RESPONSE_MODALITIES),
                "speech_config": {
                    "voice_config": {
                        "prebuilt_voice_config": {"voice_name": settings.voice_name},
                    },
                },
            },
            "system_instruction": {"parts": [{"text": settings.system_instruction}]},
        }
    }


def build_user_turn_message(audio_b64: str, mime_type: str = UPSTREAM_INPUT_MIME_TYPE) -> dict[str, Any]:
    return {
        "clientContent": {
            "turns": [
                {
                    "role": "user",
                    "parts": [{"inlineData": {"mimeType": mime_type, "data": audio_b64}}],
                }
            ],
            "turnComplete": True,
        }
    }


def build_interrupt_message() -> dict[str, Any]:
    """An empty, still-open client turn makes the model abandon its current answer."""
    return {"clientContent": {"turns": [], "turnComplete": False}}


def encode_message(message: dict[str, Any]) -> str:
    return orjson.dumps(message).decode("utf-8")


def describe_close(code: int | None, reason: str | None = None) -> str:
    code = 1006 if code is None else int(code)
    meaning = CLOSE_CODE_REASONS.get(code, UNKNOWN_CLOSE_REASON)
    text = f"Gemini connection closed: {meaning} ({code})"
    if reason:
        text = f"{text}: {reason}"
    return text


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
        return orjson.dumps(error).decode("utf-8")
    return str(error)


def _parse_parts(parts: list[Any]) -> list[UpstreamEvent]:
    events: list[UpstreamEvent] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        inline = part.get("inlineData")
        if isinstance(inline, dict):
            mime_type = str(inline.get("mimeType") or "")
            if mime_type.startswith(UPSTREAM_AUDIO_MIME_PREFIX):
                try:
                    data = base64.b64decode(inline.get("data") or "", validate=True)
                except (binascii.Error, ValueError) as exc:
                    logger.warning("upstream audio part with invalid base64: %s", exc)
                    events.append(AudioPartLost(mime_type=mime_type, reason="invalid base64"))
                    continue
                events.append(AudioChunk(data=data, mime_type=mime_type))
            else:
                logger.debug("upstream inline part ignored mime_type=%s", mime_type)
        text = part.get("text")
        if isinstance(text, str) and text:
            logger.info("upstream text part: %s", text)
    return events


def parse_server_message(raw: str | bytes) -> list[UpstreamEvent]:
    """Decode one upstream frame into zero or more events.

    Frames that are not JSON objects or have no recognised key decode to an
    empty list so new server message kinds are ignored rather than fatal.
    """
    try:
        msg = orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.debug("upstream frame is not JSON; ignored (%d bytes)", len(raw))
        return []
    if not isinstance(msg, dict):
        logger.debug("upstream frame is not an object; ignored")
        return []

    events: list[UpstreamEvent] = []
    if "setupComplete" in msg:
        events.append(SetupComplete())

    content = msg.get("serverContent")
    if isinstance(content, dict):
        model_turn = content.get("modelTurn")
        if isinstance(model_turn, dict) and isinstance(model_turn.get("parts"), list):
            events.extend(_parse_parts(model_turn["parts"]))
        if content.get("interrupted"):
            events.append(GenerationInterrupted())
        if content.get("turnComplete"):
            events.append(TurnComplete())

    if "error" in msg:
        events.append(UpstreamError(message=f"Gemini API error: {_error_message(msg['error'])}"))

    if not events and not isinstance(content, dict):
        logger.debug("upstream frame with unrecognised keys ignored: %s", sorted(msg))
    return events


__all__ = [
    "build_interrupt_message",
    "build_setup_message",
    "build_upstream_url",
    "build_user_turn_message",
    "describe_close",
    "encode_message",
    "model_resource_name",
    "parse_server_message",
    "redact_url",
]
