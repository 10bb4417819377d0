"""Session event emitter for dispatching events to observers.

One emitter may be shared by every session in a host process; observers
narrow what they receive by event type, by project, or both.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sitegen.domain.events.event import SessionEvent
from sitegen.domain.events.event_types import SessionEventType
from sitegen.domain.events.observer import SessionObserver

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Subscription:
    observer: SessionObserver
    event_types: frozenset[SessionEventType] | None
    project_id: str | None

    def matches(self, event: SessionEvent) -> bool:
        if self.event_types is not None and event.event_type not in self.event_types:
            return False
        return self.project_id is None or event.project_id == self.project_id


class SessionEventEmitter:
    """Central event dispatcher for session events."""

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []

    def subscribe(
        self,
        observer: SessionObserver,
        event_types: Iterable[SessionEventType] | None = None,
        *,
        project_id: str | None = None,
    ) -> None:
        """Subscribe to specific event types (all if None), optionally for one project only."""
        types = frozenset(event_types) if event_types is not None else None
        self._subscriptions.append(_Subscription(observer, types, project_id))

    def unsubscribe(self, observer: SessionObserver) -> None:
        """Remove observer from all subscriptions."""
        self._subscriptions = [s for s in self._subscriptions if s.observer is not observer]

    def emit(self, event: SessionEvent) -> None:
        """Dispatch event to all matching observers, in subscription order."""
        # Copy: an observer may unsubscribe while being notified
        for subscription in list(self._subscriptions):
            if subscription.matches(event):
                self._safe_notify(subscription.observer, event)

    def _safe_notify(self, observer: SessionObserver, event: SessionEvent) -> None:
        """Notify observer, catching and logging any exceptions."""
        try:
            observer.on_event(event)
        except Exception as e:
            logger.warning(
                f"Observer {observer} failed on {event.event_type.value} "
                f"for project {event.project_id}: {e}"
            )
