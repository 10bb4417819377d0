"""Session observer protocol."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from sitegen.domain.events.event import SessionEvent


class SessionObserver(Protocol):
    """Receives events from one or more generation sessions.

    Called synchronously from the task driving the session, between stream
    events. Implementations must not block or await; hand slow work (UI
    updates, network pushes) off to another task.
    """

    def on_event(self, event: "SessionEvent") -> None:
        """Handle a session event. Exceptions are logged and dropped by the emitter."""
        ...
