"""Session event types for observer pattern notifications."""

from enum import Enum


class SessionEventType(str, Enum):
    """Typed generation-session events for host integration."""

    # Attempt lifecycle
    ATTEMPT_STARTED = "attempt_started"
    PROVIDER_SELECTED = "provider_selected"
    STREAM_OPENED = "stream_opened"

    # Progress
    STATUS_UPDATED = "status_updated"

    # Terminal outcomes
    GENERATION_SUCCEEDED = "generation_succeeded"
    GENERATION_FAILED = "generation_failed"
    GENERATION_CANCELLED = "generation_cancelled"
