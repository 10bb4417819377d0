"""Session event system for observer pattern notifications."""

from sitegen.domain.events.event_types import SessionEventType
from sitegen.domain.events.event import SessionEvent
from sitegen.domain.events.observer import SessionObserver
from sitegen.domain.events.emitter import SessionEventEmitter
from sitegen.domain.events.stderr_observer import StderrEventObserver

__all__ = [
    "SessionEventType",
    "SessionEvent",
    "SessionObserver",
    "SessionEventEmitter",
    "StderrEventObserver",
]
