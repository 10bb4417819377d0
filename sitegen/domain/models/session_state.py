from enum import Enum

from pydantic import BaseModel, ConfigDict

from sitegen.domain.models.generation import GenerationResult
from sitegen.domain.models.provider_descriptor import ProviderDescriptor


class SessionStatus(str, Enum):
    """Generation session status.

    IDLE -> STREAMING -> SUCCEEDED | FAILED; FAILED re-enters STREAMING via
    retry/resume, SUCCEEDED returns to IDLE via retry.
    """

    IDLE = "idle"            # Ready for generate()
    STREAMING = "streaming"  # One outstanding stream
    SUCCEEDED = "succeeded"  # final_result available
    FAILED = "failed"        # last_error set, partial content kept as resume seed


class ErrorKind(str, Enum):
    NO_PROVIDER = "no_provider"  # No credential resolvable
    TRANSPORT = "transport"      # Network/provider failure or timeout
    CANCELLED = "cancelled"      # Host cancelled, not shown as a failure


class SessionError(BaseModel):
    """Structured error recorded on a failed attempt."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    provider: str | None = None


class SessionSnapshot(BaseModel):
    """Read-only view of a session for hosts (rendering, polling, CLI output)."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    status: SessionStatus
    attempt: int
    is_generating: bool
    status_message: str = ""
    content: str = ""
    active_provider: ProviderDescriptor | None = None
    final_result: GenerationResult | None = None
    error: SessionError | None = None
    handoff_error: str | None = None
