from __future__ import annotations

import base64
import json

import pytest

from live_relay.state.settings import UpstreamSettings
from live_relay.upstream.events import (
    AudioChunk,
    TurnComplete,
    AudioPartLost,
    SetupComplete,
    UpstreamError,
    GenerationInterrupted,
)
from live_relay.upstream.protocol import (
    redact_url,
    describe_close,
    build_upstream_url,
    build_setup_message,
    model_resource_name,
    parse_server_message,
    build_interrupt_message,
    build_user_turn_message,
)


def _settings(**overrides: object) -> UpstreamSettings:
    values: dict[str, object] = {
        "api_key": "secret",
        "model_name": "gemini-2.0-flash-live-001",
        "url": "wss://example.test/ws/live",
        "voice_name": "Puck",
        "system_instruction": "Be brief.",
        "open_timeout_s": 1.0,
        "setup_timeout_s": 1.0,
        "response_deadline_s": 1.0,
        "max_message_bytes": 1024,
        "ping_interval_s": 0.0,
    }
    values.update(overrides)
    return UpstreamSettings(**values)  # type: ignore[arg-type]


def test_setup_message_shape() -> None:
    setup = build_setup_message(_settings())["setup"]

    assert setup["model"] == "models/gemini-2.0-flash-live-001"
    assert setup["generation_config"]["response_modalities"] == ["AUDIO"]
    voice = setup["generation_config"]["speech_config"]["voice_config"]["prebuilt_voice_config"]
    assert voice == {"voice_name": "Puck"}
    assert setup["system_instruction"] == {"parts": [{"text": "Be brief."}]}


def test_model_resource_name_is_not_prefixed_twice() -> None:
    assert model_resource_name("models/x") == "models/x"
    assert model_resource_name("x") == "models/x"


def test_user_turn_message_is_a_complete_single_turn() -> None:
    content = build_user_turn_message("QUJD")["clientContent"]

    assert content["turnComplete"] is True
    assert content["turns"] == [
        {"role": "user", "parts": [{"inlineData": {"mimeType": "audio/wav", "data": "QUJD"}}]}
    ]


def test_interrupt_message_is_empty_open_turn() -> None:
    assert build_interrupt_message() == {"clientContent": {"turns": [], "turnComplete": False}}


def test_upstream_url_carries_key_and_redaction_hides_it() -> None:
    url = build_upstream_url("wss://example.test/ws/live?alt=json", "s3cr3t")
    assert url == "wss://example.test/ws/live?alt=json&key=s3cr3t"
    assert "s3cr3t" not in redact_url(url)


def test_parse_setup_complete() -> None:
    assert parse_server_message(json.dumps({"setupComplete": {}})) == [SetupComplete()]


def test_parse_binary_frame() -> None:
    assert parse_server_message(b'{"setupComplete": {}}') == [SetupComplete()]


def test_parse_model_turn_audio_then_turn_complete() -> None:
    pcm = b"\x01\x00\x02\x00"
    raw = json.dumps({
        "serverContent": {
            "modelTurn": {
                "parts": [
                    {"text": "thinking"},
                    {"inlineData": {"mimeType": "audio/pcm;rate=24000", "data": base64.b64encode(pcm).decode()}},
                    {"inlineData": {"mimeType": "image/png", "data": "AAAA"}},
                ]
            },
            "turnComplete": True,
        }
    })

    assert parse_server_message(raw) == [AudioChunk(data=pcm, mime_type="audio/pcm;rate=24000"), TurnComplete()]


def test_undecodable_audio_part_is_reported_in_place() -> None:
    raw = json.dumps({
        "serverContent": {
            "modelTurn": {
                "parts": [
                    {"inlineData": {"mimeType": "audio/pcm;rate=24000", "data": "AQA="}},
                    {"inlineData": {"mimeType": "audio/pcm;rate=24000", "data": "!!not-b64"}},
                    {"inlineData": {"mimeType": "audio/pcm;rate=24000", "data": "AwA="}},
                ]
            },
            "turnComplete": True,
        }
    })

    assert parse_server_message(raw) == [
        AudioChunk(data=b"\x01\x00", mime_type="audio/pcm;rate=24000"),
        AudioPartLost(mime_type="audio/pcm;rate=24000", reason="invalid base64"),
        AudioChunk(data=b"\x03\x00", mime_type="audio/pcm;rate=24000"),
        TurnComplete(),
    ]


def test_parse_generation_interrupted() -> None:
    assert parse_server_message(json.dumps({"serverContent": {"interrupted": True}})) == [GenerationInterrupted()]


def test_parse_error_frame() -> None:
    events = parse_server_message(json.dumps({"error": {"code": 400, "message": "bad model"}}))
    assert events == [UpstreamError(message="Gemini API error: bad model")]


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        json.dumps([1, 2]),
        json.dumps({"toolCall": {}}),
        json.dumps({"serverContent": {"modelTurn": {"parts": "nope"}}}),
    ],
)
def test_unknown_shapes_are_ignored(raw: str) -> None:
    assert parse_server_message(raw) == []


@pytest.mark.parametrize(
    ("code", "reason", "expected"),
    [
        (1000, None, "Gemini connection closed: Normal closure (1000)"),
        (1006, "", "Gemini connection closed: Abnormal closure (1006)"),
        (1011, "overloaded", "Gemini connection closed: Internal server error (1011): overloaded"),
        (4321, None, "Gemini connection closed: Unknown (4321)"),
        (None, None, "Gemini connection closed: Abnormal closure (1006)"),
    ],
)
def test_describe_close(code: int | None, reason: str | None, expected: str) -> None:
    assert describe_close(code, reason) == expected
