"""Downstream WebSocket protocol configuration and constants."""

from __future__ import annotations

import os

WS_ENDPOINT_PATH = (os.getenv("WS_ENDPOINT_PATH") or "/ws").strip() or "/ws"

# Flat envelopes: every message carries a type discriminator next to its fields.
WS_KEY_TYPE = "type"
WS_KEY_AUDIO = "audio"
WS_KEY_TRANSCRIPT = "transcript"
WS_KEY_MESSAGE = "message"

# Client -> relay
WS_MSG_START_SESSION = "start_session"
WS_MSG_AUDIO_DATA = "audio_data"
WS_MSG_INTERRUPT = "interrupt"

# Relay -> client
WS_EVENT_SESSION_READY = "session_ready"
WS_EVENT_USER_MESSAGE = "user_message"
WS_EVENT_STATUS = "status"
WS_EVENT_AUDIO_RESPONSE = "audio_response"
WS_EVENT_TURN_COMPLETE = "turn_complete"
WS_EVENT_INTERRUPTED = "interrupted"
WS_EVENT_NO_RESPONSE = "no_response"
WS_EVENT_ERROR = "error"

WS_STATUS_SPEAKING = "speaking"
WS_TRANSCRIPT_PLACEHOLDER = "[Voice message]"
WS_NO_RESPONSE_MESSAGE = "No response - try again"

# Close codes
WS_CLOSE_CLIENT_REQUEST_CODE = 1000
WS_CLOSE_BUSY_CODE = 4002
WS_CLOSE_IDLE_CODE = 4000
WS_CLOSE_MAX_DURATION_CODE = 4003

WS_CLOSE_IDLE_REASON = "idle timeout"
WS_CLOSE_MAX_DURATION_REASON = "max connection duration reached"

ENV_WS_IDLE_TIMEOUT_S = "WS_IDLE_TIMEOUT_S"
DEFAULT_WS_IDLE_TIMEOUT_S = 150.0
ENV_WS_WATCHDOG_TICK_S = "WS_WATCHDOG_TICK_S"
DEFAULT_WS_WATCHDOG_TICK_S = 5.0
ENV_WS_MAX_CONNECTION_DURATION_S = "WS_MAX_CONNECTION_DURATION_S"
DEFAULT_WS_MAX_CONNECTION_DURATION_S = float(60 * 60)

WS_IDLE_TIMEOUT_S = float(os.getenv(ENV_WS_IDLE_TIMEOUT_S) or DEFAULT_WS_IDLE_TIMEOUT_S)
WS_WATCHDOG_TICK_S = float(os.getenv(ENV_WS_WATCHDOG_TICK_S) or DEFAULT_WS_WATCHDOG_TICK_S)
WS_MAX_CONNECTION_DURATION_S = float(
    os.getenv(ENV_WS_MAX_CONNECTION_DURATION_S) or DEFAULT_WS_MAX_CONNECTION_DURATION_S
)

# Errors (code field values)
WS_ERROR_SERVER_AT_CAPACITY = "server_at_capacity"
WS_ERROR_INVALID_MESSAGE = "invalid_message"
WS_ERROR_INVALID_PAYLOAD = "invalid_payload"
WS_ERROR_UTTERANCE_TOO_LONG = "utterance_too_long"
WS_ERROR_SESSION = "session_error"
WS_ERROR_UPSTREAM = "upstream_error"
WS_ERROR_INTERNAL = "internal_error"

__all__ = [
    "DEFAULT_WS_IDLE_TIMEOUT_S",
    "DEFAULT_WS_MAX_CONNECTION_DURATION_S",
    "DEFAULT_WS_WATCHDOG_TICK_S",
    "ENV_WS_IDLE_TIMEOUT_S",
    "ENV_WS_MAX_CONNECTION_DURATION_S",
    "ENV_WS_WATCHDOG_TICK_S",
    "WS_CLOSE_BUSY_CODE",
    "WS_CLOSE_CLIENT_REQUEST_CODE",
    "WS_CLOSE_IDLE_CODE",
    "WS_CLOSE_IDLE_REASON",
    "WS_CLOSE_MAX_DURATION_CODE",
    "WS_CLOSE_MAX_DURATION_REASON",
    "WS_ENDPOINT_PATH",
    "WS_ERROR_INTERNAL",
    "WS_ERROR_INVALID_MESSAGE",
    "WS_ERROR_INVALID_PAYLOAD",
    "WS_ERROR_SERVER_AT_CAPACITY",
    "WS_ERROR_SESSION",
    "WS_ERROR_UPSTREAM",
    "WS_ERROR_UTTERANCE_TOO_LONG",
    "WS_EVENT_AUDIO_RESPONSE",
    "WS_EVENT_ERROR",
    "WS_EVENT_INTERRUPTED",
    "WS_EVENT_NO_RESPONSE",
    "WS_EVENT_SESSION_READY",
    "WS_EVENT_STATUS",
    "WS_EVENT_TURN_COMPLETE",
    "WS_EVENT_USER_MESSAGE",
    "WS_IDLE_TIMEOUT_S",
    "WS_KEY_AUDIO",
    "WS_KEY_MESSAGE",
    "WS_KEY_TRANSCRIPT",
    "WS_KEY_TYPE",
    "WS_MAX_CONNECTION_DURATION_S",
    "WS_MSG_AUDIO_DATA",
    "WS_MSG_INTERRUPT",
    "WS_MSG_START_SESSION",
    "WS_NO_RESPONSE_MESSAGE",
    "WS_STATUS_SPEAKING",
    "WS_TRANSCRIPT_PLACEHOLDER",
    "WS_WATCHDOG_TICK_S",
]
