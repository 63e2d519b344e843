"""Upstream live-model connection configuration."""

from __future__ import annotations

ENV_GEMINI_API_KEY = "GEMINI_API_KEY"

ENV_MODEL_NAME = "MODEL_NAME"
DEFAULT_MODEL_NAME = "gemini-2.0-flash-live-001"
MODEL_RESOURCE_PREFIX = "models/"

ENV_UPSTREAM_URL = "GEMINI_LIVE_URL"
DEFAULT_UPSTREAM_URL = (
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.v1alpha.GenerativeService.BidiGenerateContent"
)
UPSTREAM_KEY_QUERY_PARAM = "key"

ENV_VOICE_NAME = "VOICE_NAME"
DEFAULT_VOICE_NAME = "Puck"

RESPONSE_MODALITIES: tuple[str, ...] = ("AUDIO",)
UPSTREAM_INPUT_MIME_TYPE = "audio/wav"
UPSTREAM_AUDIO_MIME_PREFIX = "audio/"

ENV_UPSTREAM_OPEN_TIMEOUT_S = "UPSTREAM_OPEN_TIMEOUT_S"
DEFAULT_UPSTREAM_OPEN_TIMEOUT_S = 10.0

ENV_UPSTREAM_SETUP_TIMEOUT_S = "UPSTREAM_SETUP_TIMEOUT_S"
DEFAULT_UPSTREAM_SETUP_TIMEOUT_S = 15.0

ENV_RESPONSE_DEADLINE_S = "RESPONSE_DEADLINE_S"
DEFAULT_RESPONSE_DEADLINE_S = 10.0

ENV_UPSTREAM_MAX_MESSAGE_BYTES = "UPSTREAM_MAX_MESSAGE_BYTES"
DEFAULT_UPSTREAM_MAX_MESSAGE_BYTES = 16 * 1024 * 1024

ENV_UPSTREAM_PING_INTERVAL_S = "UPSTREAM_PING_INTERVAL_S"
DEFAULT_UPSTREAM_PING_INTERVAL_S = 20.0

UPSTREAM_CLOSE_TIMEOUT_S = 5.0

# RFC 6455 close codes, rendered into the error event when the upstream drops.
CLOSE_CODE_REASONS: dict[int, str] = {
    1000: "Normal closure",
    1001: "Going away",
    1002: "Protocol error",
    1003: "Unsupported data",
    1005: "No status received",
    1006: "Abnormal closure",
    1007: "Invalid frame payload data",
    1008: "Policy violation",
    1009: "Message too big",
    1010: "Mandatory extension",
    1011: "Internal server error",
    1015: "TLS handshake",
}
UNKNOWN_CLOSE_REASON = "Unknown"

__all__ = [
    "CLOSE_CODE_REASONS",
    "DEFAULT_MODEL_NAME",
    "DEFAULT_RESPONSE_DEADLINE_S",
    "DEFAULT_UPSTREAM_MAX_MESSAGE_BYTES",
    "DEFAULT_UPSTREAM_OPEN_TIMEOUT_S",
    "DEFAULT_UPSTREAM_PING_INTERVAL_S",
    "DEFAULT_UPSTREAM_SETUP_TIMEOUT_S",
    "DEFAULT_UPSTREAM_URL",
    "DEFAULT_VOICE_NAME",
    "ENV_GEMINI_API_KEY",
    "ENV_MODEL_NAME",
    "ENV_RESPONSE_DEADLINE_S",
    "ENV_UPSTREAM_MAX_MESSAGE_BYTES",
    "ENV_UPSTREAM_OPEN_TIMEOUT_S",
    "ENV_UPSTREAM_PING_INTERVAL_S",
    "ENV_UPSTREAM_SETUP_TIMEOUT_S",
    "ENV_UPSTREAM_URL",
    "ENV_VOICE_NAME",
    "MODEL_RESOURCE_PREFIX",
    "RESPONSE_MODALITIES",
    "UNKNOWN_CLOSE_REASON",
    "UPSTREAM_AUDIO_MIME_PREFIX",
    "UPSTREAM_CLOSE_TIMEOUT_S",
    "UPSTREAM_INPUT_MIME_TYPE",
    "UPSTREAM_KEY_QUERY_PARAM",
]
