"""Generation session: one project's resilient, resumable generation run.

Drives attempts through a StreamTransport using the TransitionTable state
machine. Attempt-level failures (missing credentials, transport errors,
timeouts, cancellation) become FAILED state and are never raised to the
host. ConfigurationError is the exception: it propagates.

Public operations are not safe to call concurrently on the same session;
the host serializes them. cancel() is the one call meant to arrive from
another task while generate()/retry()/resume_from_partial() is awaiting.
"""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import Any

from sitegen.application.credentials import CredentialResolver
from sitegen.application.storage.result_sink import ResultSink
from sitegen.application.transitions import Action, TransitionResult, TransitionTable
from sitegen.application.transport.base import StreamTransport
from sitegen.domain.errors import (
    ConfigurationError,
    GenerationCancelled,
    NoProviderAvailable,
    TransportError,
)
from sitegen.domain.events.emitter import SessionEventEmitter
from sitegen.domain.events.event import SessionEvent
from sitegen.domain.events.event_types import SessionEventType
from sitegen.domain.models.generation import GenerationRequest, GenerationResult
from sitegen.domain.models.provider_descriptor import ProviderDescriptor
from sitegen.domain.models.session_state import (
    ErrorKind,
    SessionError,
    SessionSnapshot,
    SessionStatus,
)
from sitegen.domain.models.stream_events import ChunkEvent, DoneEvent, ErrorEvent, StatusEvent
from sitegen.domain.providers.catalog import ProviderCatalog
from sitegen.domain.providers.selector import ProviderSelector

logger = logging.getLogger(__name__)


class InvalidCommand(Exception):
    """Raised when a command is not valid for the current session status."""

    def __init__(self, command: str, status: SessionStatus):
        self.command = command
        self.status = status
        super().__init__(f"Command '{command}' is not valid from {status.value}")


class GenerationSession:
    """Stateful orchestrator for one project's generation attempts.

    Exposes status, content (partial output), is_generating and last_error,
    plus generate / retry / resume_from_partial / cancel.

    Args:
        project_id: Project this session generates for
        catalog: Shared, read-only provider catalog
        transport: Opens provider streams
        credentials: Resolves a provider's secret per attempt
        selector: Provider selection policy (default: unseeded random)
        result_sink: Receives final_result on success
        event_emitter: Receives session events
        response_timeout: Deadline in seconds for one attempt (None = no deadline)
        provider: Name of a provider to use for the first attempt instead of
            a weighted pick

    Raises:
        ConfigurationError: If `provider` is not in the catalog
    """

    def __init__(
        self,
        project_id: str,
        *,
        catalog: ProviderCatalog,
        transport: StreamTransport,
        credentials: CredentialResolver,
        selector: ProviderSelector | None = None,
        result_sink: ResultSink | None = None,
        event_emitter: SessionEventEmitter | None = None,
        response_timeout: float | None = None,
        provider: str | None = None,
    ) -> None:
        self.project_id = project_id
        self._catalog = catalog
        self._transport = transport
        self._credentials = credentials
        self._selector = selector or ProviderSelector()
        self._result_sink = result_sink
        self._event_emitter = event_emitter or SessionEventEmitter()
        self._response_timeout = response_timeout

        self._active_provider: ProviderDescriptor | None = None
        if provider is not None:
            pinned = catalog.get(provider)
            if pinned is None:
                raise ConfigurationError(
                    f"Provider '{provider}' is not in the catalog. "
                    f"Available providers: {', '.join(catalog.names())}"
                )
            self._active_provider = pinned
        self._pinned_provider = self._active_provider

        self._status = SessionStatus.IDLE
        self._attempt = 0
        self._partial_content = ""
        self._status_message = ""
        self._final_result: GenerationResult | None = None
        self._last_error: SessionError | None = None
        self._handoff_error: str | None = None
        self._request: GenerationRequest | None = None
        # Providers attempted since the last fresh generate(); retry/resume
        # walk the fallback order past these before re-picking by weight.
        self._tried: set[str] = set()

        self._stream_task: asyncio.Task[None] | None = None
        # Bumped whenever a stream is opened or abandoned; events carrying an
        # older token must not touch session state.
        self._stream_token = 0

    # ========================================================================
    # Read path
    # ========================================================================

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def attempt(self) -> int:
        return self._attempt

    @property
    def active_provider(self) -> ProviderDescriptor | None:
        return self._active_provider

    @property
    def partial_content(self) -> str:
        return self._partial_content

    @property
    def content(self) -> str:
        """Same as partial_content; named like SessionSnapshot.content."""
        return self._partial_content

    @property
    def status_message(self) -> str:
        return self._status_message

    @property
    def final_result(self) -> GenerationResult | None:
        return self._final_result

    @property
    def last_error(self) -> SessionError | None:
        return self._last_error

    @property
    def handoff_error(self) -> str | None:
        return self._handoff_error

    @property
    def is_generating(self) -> bool:
        return self._status is SessionStatus.STREAMING

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            project_id=self.project_id,
            status=self._status,
            attempt=self._attempt,
            is_generating=self.is_generating,
            status_message=self._status_message,
            content=self._partial_content,
            active_provider=self._active_provider,
            final_result=self._final_result,
            error=self._last_error,
            handoff_error=self._handoff_error,
        )

    def result(self) -> GenerationResult:
        """Return the final result, or raise the recorded failure.

        For hosts that prefer exceptions over inspecting state.

        Raises:
            NoProviderAvailable: Last attempt had no credential
            TransportError: Last attempt failed mid-stream
            GenerationCancelled: Last attempt was cancelled
            InvalidCommand: No attempt has finished yet
        """
        if self._status is SessionStatus.SUCCEEDED and self._final_result is not None:
            return self._final_result

        error = self._last_error
        if self._status is not SessionStatus.FAILED or error is None:
            raise InvalidCommand("result", self._status)

        if error.kind is ErrorKind.NO_PROVIDER:
            raise NoProviderAvailable(error.message, provider=error.provider)
        if error.kind is ErrorKind.CANCELLED:
            raise GenerationCancelled(error.message)
        raise TransportError(error.message, provider=error.provider)

    # ========================================================================
    # Commands
    # ========================================================================

    async def generate(self, request: GenerationRequest) -> SessionSnapshot:
        """Start a fresh attempt. No-op unless the session is IDLE.

        Raises:
            ValueError: If the request targets another project
        """
        transition = self._get_transition("generate")
        if transition.action is Action.NOOP:
            logger.debug(
                f"generate() ignored for project {self.project_id}: session is {self._status.value}"
            )
            return self.snapshot()

        if request.project_id != self.project_id:
            raise ValueError(
                f"Request for project '{request.project_id}' sent to session "
                f"for project '{self.project_id}'"
            )

        self._request = request
        self._tried.clear()
        provider = self._active_provider or self._selector.pick_weighted(self._catalog)
        return await self._dispatch(transition, provider, request)

    async def retry(self) -> SessionSnapshot:
        """Start over.

        From SUCCEEDED: reset to a clean IDLE session (next generate() is a
        brand-new attempt). From FAILED: discard partial output and re-run the
        last request on the next provider in fallback order.

        Raises:
            InvalidCommand: If called from IDLE or STREAMING
        """
        transition = self._get_transition("retry")

        if transition.action is Action.RESET:
            self._attempt += 1
            self._partial_content = ""
            self._active_provider = self._pinned_provider
            self._final_result = None
            self._last_error = None
            self._handoff_error = None
            self._status_message = ""
            self._tried.clear()
            self._apply(transition)
            return self.snapshot()

        request = self._require_request("retry")
        provider = self._next_provider()
        self._attempt += 1
        self._partial_content = ""
        return await self._dispatch(
            transition, provider, request.model_copy(update={"continuation": ""})
        )

    async def resume_from_partial(self, content: str | None = None) -> SessionSnapshot:
        """Continue an interrupted generation on the next provider.

        Keeps partial output; `content` (default: the current partial output)
        is sent as continuation context and new chunks are appended.

        Raises:
            InvalidCommand: Unless the session is FAILED
        """
        transition = self._get_transition("resume")
        request = self._require_request("resume")
        seed = self._partial_content if content is None else content
        provider = self._next_provider()
        self._attempt += 1
        return await self._dispatch(
            transition, provider, request.model_copy(update={"continuation": seed})
        )

    def cancel(self, reason: str = "Generation cancelled") -> SessionSnapshot:
        """Abort the outstanding stream. No-op unless STREAMING.

        The session lands in FAILED with kind CANCELLED; events still in
        flight from the aborted stream are dropped.
        """
        transition = self._get_transition("cancel")
        if transition.action is Action.NOOP:
            return self.snapshot()

        self._stream_token += 1
        self._record_failure("cancel", ErrorKind.CANCELLED, reason)

        task = self._stream_task
        if task is not None and not task.done():
            task.cancel()
        return self.snapshot()

    # ========================================================================
    # Attempt execution
    # ========================================================================

    async def _dispatch(
        self,
        transition: TransitionResult,
        provider: ProviderDescriptor,
        request: GenerationRequest,
    ) -> SessionSnapshot:
        self._active_provider = provider
        self._tried.add(provider.name)
        self._last_error = None
        self._final_result = None
        self._handoff_error = None
        self._emit(SessionEventType.ATTEMPT_STARTED)
        self._emit(SessionEventType.PROVIDER_SELECTED, model=request.model or provider.default_model)

        credential = self._credentials.resolve(provider.name)
        if not credential:
            self._record_failure(
                "no_provider",
                ErrorKind.NO_PROVIDER,
                f"No API key configured for {provider.name}",
            )
            return self.snapshot()

        self._apply(transition)
        self._status_message = f"Connecting to {provider.name}..."
        self._stream_token += 1
        token = self._stream_token
        self._emit(SessionEventType.STREAM_OPENED, resumed=bool(request.continuation))

        task = asyncio.create_task(self._run_stream(provider, credential, request, token))
        self._stream_task = task
        try:
            await task
        except asyncio.CancelledError:
            if token != self._stream_token:
                # Host called cancel(); state already recorded.
                return self.snapshot()
            # The calling task itself is being cancelled.
            self._stream_token += 1
            self._record_failure("cancel", ErrorKind.CANCELLED, "Generation cancelled")
            raise
        except ConfigurationError:
            # Not an attempt failure; leave the session usable and propagate.
            self._stream_token += 1
            self._apply(self._get_transition("abort"))
            raise
        finally:
            if self._stream_task is task:
                self._stream_task = None

        return self.snapshot()

    async def _run_stream(
        self,
        provider: ProviderDescriptor,
        credential: str,
        request: GenerationRequest,
        token: int,
    ) -> None:
        try:
            if self._response_timeout is None:
                await self._consume(provider, credential, request, token)
            else:
                await asyncio.wait_for(
                    self._consume(provider, credential, request, token),
                    timeout=self._response_timeout,
                )
        except asyncio.TimeoutError:
            self._record_stream_failure(
                token, f"{provider.name} timed out after {self._response_timeout}s"
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning(f"Attempt {self._attempt} on {provider.name} failed: {e}")
            self._record_stream_failure(token, str(e) or type(e).__name__)

    async def _consume(
        self,
        provider: ProviderDescriptor,
        credential: str,
        request: GenerationRequest,
        token: int,
    ) -> None:
        stream = self._transport.open_stream(provider, credential, request)
        try:
            async for event in stream:
                if token != self._stream_token:
                    return

                if isinstance(event, ChunkEvent):
                    self._partial_content += event.text
                elif isinstance(event, StatusEvent):
                    self._status_message = event.text
                    self._emit(SessionEventType.STATUS_UPDATED, message=event.text)
                elif isinstance(event, DoneEvent):
                    await self._record_success(event.result)
                    return
                elif isinstance(event, ErrorEvent):
                    self._record_stream_failure(token, event.reason)
                    return
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        self._record_stream_failure(token, "Stream ended without a terminal event")

    async def _record_success(self, result: GenerationResult) -> None:
        transition = self._get_transition("done")
        self._final_result = result
        self._apply(transition)
        self._status_message = "Complete"
        self._emit(
            SessionEventType.GENERATION_SUCCEEDED,
            files=sorted(result.files),
            preview_url=result.preview_url,
        )
        await self._hand_off(result)

    async def _hand_off(self, result: GenerationResult) -> None:
        if self._result_sink is None:
            return
        try:
            outcome = self._result_sink.save(self.project_id, result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.warning(f"Result hand-off failed for project {self.project_id}: {e}")
            self._handoff_error = str(e)

    def _record_stream_failure(self, token: int, message: str) -> None:
        if token != self._stream_token or self._status is not SessionStatus.STREAMING:
            return
        self._record_failure("error", ErrorKind.TRANSPORT, message)

    def _record_failure(self, command: str, kind: ErrorKind, message: str) -> None:
        transition = self._get_transition(command)
        provider_name = self._active_provider.name if self._active_provider else None
        self._last_error = SessionError(kind=kind, message=message, provider=provider_name)
        self._apply(transition)
        self._status_message = "Cancelled" if kind is ErrorKind.CANCELLED else "Failed"

        event_type = (
            SessionEventType.GENERATION_CANCELLED
            if kind is ErrorKind.CANCELLED
            else SessionEventType.GENERATION_FAILED
        )
        self._emit(event_type, message=message, kind=kind.value)

    # ========================================================================
    # Helpers
    # ========================================================================

    def _get_transition(self, command: str) -> TransitionResult:
        transition = TransitionTable.get_transition(self._status, command)
        if transition is None:
            raise InvalidCommand(command, self._status)
        return transition

    def _apply(self, transition: TransitionResult) -> None:
        if transition.status is not self._status:
            logger.info(
                f"Project {self.project_id} attempt {self._attempt}: "
                f"{self._status.value} -> {transition.status.value} ({transition.action.value})"
            )
        self._status = transition.status

    def _next_provider(self) -> ProviderDescriptor:
        previous = self._active_provider
        provider = self._selector.next_provider(
            self._catalog,
            previous.name if previous is not None else None,
            tried=self._tried,
        )
        if self._tried.issuperset(self._catalog.names()):
            # Every provider has had a turn; the next cascade starts over.
            self._tried.clear()
        return provider

    def _require_request(self, command: str) -> GenerationRequest:
        if self._request is None:
            raise InvalidCommand(command, self._status)
        return self._request

    def _emit(
        self,
        event_type: SessionEventType,
        *,
        message: str | None = None,
        **metadata: Any,
    ) -> None:
        self._event_emitter.emit(
            SessionEvent(
                event_type=event_type,
                project_id=self.project_id,
                timestamp=datetime.now(timezone.utc),
                status=self._status,
                attempt=self._attempt,
                provider=self._active_provider.name if self._active_provider else None,
                message=message,
                metadata=metadata,
            )
        )

    def __repr__(self) -> str:
        provider = self._active_provider.name if self._active_provider else None
        return (
            f"GenerationSession(project_id={self.project_id!r}, status={self._status.value}, "
            f"attempt={self._attempt}, provider={provider!r})"
        )
