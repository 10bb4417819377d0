"""Declarative state transitions for generation sessions.

Table-driven state machine: (status, command) -> TransitionResult.

Key concepts:
- Commands come from the host (generate, retry, resume, cancel) or from the
  stream (done, error) and credential resolution (no_provider).
- The action says what the session does after entering the new status.
- generate/cancel outside their active state are explicit no-ops.
"""

from dataclasses import dataclass
from enum import Enum

from sitegen.domain.models.session_state import SessionStatus


class Action(str, Enum):
    """Actions to execute during transitions."""

    OPEN_STREAM = "open_stream"      # Fresh attempt, empty partial content
    RESUME_STREAM = "resume_stream"  # Attempt seeded with partial content
    HAND_OFF = "hand_off"            # Record result and pass it to the sink
    RECORD_ERROR = "record_error"    # Record last_error
    CANCEL = "cancel"                # Tear down the outstanding stream
    RESET = "reset"                  # Back to a clean IDLE session
    NOOP = "noop"                    # Ignore command


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """Result of a state transition.

    Attributes:
        status: Target session status
        action: Action to execute after transition
    """

    status: SessionStatus
    action: Action


_TransitionKey = tuple[SessionStatus, str]


class TransitionTable:
    """Declarative state machine for session transitions.

    Usage:
        result = TransitionTable.get_transition(status, command)
        if result is None:
            raise InvalidCommand(...)
    """

    _TRANSITIONS: dict[_TransitionKey, TransitionResult] = {
        # === IDLE ===
        (SessionStatus.IDLE, "generate"): TransitionResult(
            SessionStatus.STREAMING, Action.OPEN_STREAM
        ),
        (SessionStatus.IDLE, "no_provider"): TransitionResult(
            SessionStatus.FAILED, Action.RECORD_ERROR
        ),
        (SessionStatus.IDLE, "cancel"): TransitionResult(
            SessionStatus.IDLE, Action.NOOP
        ),

        # === STREAMING ===
        # At most one outstanding attempt per session
        (SessionStatus.STREAMING, "generate"): TransitionResult(
            SessionStatus.STREAMING, Action.NOOP
        ),
        (SessionStatus.STREAMING, "done"): TransitionResult(
            SessionStatus.SUCCEEDED, Action.HAND_OFF
        ),
        (SessionStatus.STREAMING, "error"): TransitionResult(
            SessionStatus.FAILED, Action.RECORD_ERROR
        ),
        (SessionStatus.STREAMING, "cancel"): TransitionResult(
            SessionStatus.FAILED, Action.CANCEL
        ),
        # Configuration problem mid-attempt; not recorded as a failure
        (SessionStatus.STREAMING, "abort"): TransitionResult(
            SessionStatus.IDLE, Action.RESET
        ),

        # === SUCCEEDED ===
        (SessionStatus.SUCCEEDED, "generate"): TransitionResult(
            SessionStatus.SUCCEEDED, Action.NOOP
        ),
        (SessionStatus.SUCCEEDED, "retry"): TransitionResult(
            SessionStatus.IDLE, Action.RESET
        ),
        (SessionStatus.SUCCEEDED, "cancel"): TransitionResult(
            SessionStatus.SUCCEEDED, Action.NOOP
        ),

        # === FAILED ===
        (SessionStatus.FAILED, "generate"): TransitionResult(
            SessionStatus.FAILED, Action.NOOP
        ),
        (SessionStatus.FAILED, "retry"): TransitionResult(
            SessionStatus.STREAMING, Action.OPEN_STREAM
        ),
        (SessionStatus.FAILED, "resume"): TransitionResult(
            SessionStatus.STREAMING, Action.RESUME_STREAM
        ),
        (SessionStatus.FAILED, "no_provider"): TransitionResult(
            SessionStatus.FAILED, Action.RECORD_ERROR
        ),
        (SessionStatus.FAILED, "cancel"): TransitionResult(
            SessionStatus.FAILED, Action.NOOP
        ),
    }

    @classmethod
    def get_transition(cls, status: SessionStatus, command: str) -> TransitionResult | None:
        """Get the transition result for a command from current status.

        Returns:
            TransitionResult if valid, None if invalid command
        """
        return cls._TRANSITIONS.get((status, command))

    @classmethod
    def valid_commands(cls, status: SessionStatus) -> list[str]:
        """Commands accepted from `status` (including no-ops)."""
        return [cmd for (s, cmd) in cls._TRANSITIONS if s == status]
