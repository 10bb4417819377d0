"""Session event payload model."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from sitegen.domain.events.event_types import SessionEventType
from sitegen.domain.models.session_state import SessionStatus


class SessionEvent(BaseModel):
    """Immutable event payload for session notifications."""

    model_config = {"frozen": True}

    event_type: SessionEventType
    project_id: str
    timestamp: datetime
    status: SessionStatus | None = None
    attempt: int | None = None
    provider: str | None = None
    message: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
