from .client import EventSink, UpstreamSessionClient
from .events import (
    AudioChunk,
    TurnComplete,
    AudioPartLost,
    SetupComplete,
    UpstreamError,
    UpstreamEvent,
    GenerationInterrupted,
)

__all__ = [
    "AudioChunk",
    "AudioPartLost",
    "EventSink",
    "GenerationInterrupted",
    "SetupComplete",
    "TurnComplete",
    "UpstreamError",
    "UpstreamEvent",
    "UpstreamSessionClient",
]
