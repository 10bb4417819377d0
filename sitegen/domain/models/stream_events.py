"""Streaming transport events.

A stream yields any number of chunk/status events and is terminated by
exactly one done or error event (or by explicit cancellation).
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from sitegen.domain.models.generation import GenerationResult


class ChunkEvent(BaseModel):
    """Incremental generated text, appended in receipt order."""

    model_config = ConfigDict(frozen=True)

    type: Literal["chunk"] = "chunk"
    text: str


class StatusEvent(BaseModel):
    """Advisory progress message for display."""

    model_config = ConfigDict(frozen=True)

    type: Literal["status"] = "status"
    text: str


class DoneEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["done"] = "done"
    result: GenerationResult


class ErrorEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["error"] = "error"
    reason: str


StreamEvent = Annotated[
    Union[ChunkEvent, StatusEvent, DoneEvent, ErrorEvent],
    Field(discriminator="type"),
]

_EVENT_ADAPTER: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


def parse_stream_event(data: str | bytes | dict) -> StreamEvent:
    """Parse one wire event (JSON text or decoded mapping) into a typed event.

    Raises:
        pydantic.ValidationError: If the payload is not a known event
    """
    if isinstance(data, dict):
        return _EVENT_ADAPTER.validate_python(data)
    return _EVENT_ADAPTER.validate_json(data)


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (DoneEvent, ErrorEvent))
