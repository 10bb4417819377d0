"""Domain models for the site generation engine."""

from .provider_descriptor import ProviderDescriptor
from .generation import GenerationRequest, GenerationResult
from .stream_events import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    StatusEvent,
    StreamEvent,
    parse_stream_event,
)
from .session_state import ErrorKind, SessionError, SessionSnapshot, SessionStatus


__all__ = [
    "ProviderDescriptor",
    "GenerationRequest",
    "GenerationResult",
    "ChunkEvent",
    "DoneEvent",
    "ErrorEvent",
    "StatusEvent",
    "StreamEvent",
    "parse_stream_event",
    "ErrorKind",
    "SessionError",
    "SessionSnapshot",
    "SessionStatus",
]
