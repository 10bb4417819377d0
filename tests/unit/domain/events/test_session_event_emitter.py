from datetime import datetime, timezone
from unittest.mock import Mock

from sitegen.domain.events.emitter import SessionEventEmitter
from sitegen.domain.events.event import SessionEvent
from sitegen.domain.events.event_types import SessionEventType
from sitegen.domain.events.stderr_observer import StderrEventObserver
from sitegen.domain.models.session_state import SessionStatus


def _event(event_type: SessionEventType = SessionEventType.ATTEMPT_STARTED) -> SessionEvent:
    return SessionEvent(
        event_type=event_type,
        project_id="p1",
        timestamp=datetime.now(timezone.utc),
        status=SessionStatus.STREAMING,
        attempt=2,
        provider="openrouter",
        message="Trying openrouter",
    )


class TestSessionEventEmitter:
    def test_global_observer_receives_all_events(self) -> None:
        emitter = SessionEventEmitter()
        observer = Mock()
        emitter.subscribe(observer)

        emitter.emit(_event(SessionEventType.ATTEMPT_STARTED))
        emitter.emit(_event(SessionEventType.GENERATION_FAILED))

        assert observer.on_event.call_count == 2

    def test_typed_subscription_filters(self) -> None:
        emitter = SessionEventEmitter()
        observer = Mock()
        emitter.subscribe(observer, [SessionEventType.GENERATION_SUCCEEDED])

        emitter.emit(_event(SessionEventType.ATTEMPT_STARTED))
        emitter.emit(_event(SessionEventType.GENERATION_SUCCEEDED))

        observer.on_event.assert_called_once()
        assert observer.on_event.call_args[0][0].event_type is SessionEventType.GENERATION_SUCCEEDED

    def test_unsubscribe(self) -> None:
        emitter = SessionEventEmitter()
        observer = Mock()
        emitter.subscribe(observer)
        emitter.subscribe(observer, [SessionEventType.ATTEMPT_STARTED])

        emitter.unsubscribe(observer)
        emitter.emit(_event())

        observer.on_event.assert_not_called()

    def test_failing_observer_does_not_block_others(self, caplog) -> None:
        emitter = SessionEventEmitter()
        broken = Mock()
        broken.on_event.side_effect = RuntimeError("observer exploded")
        healthy = Mock()
        emitter.subscribe(broken)
        emitter.subscribe(healthy)

        emitter.emit(_event())

        healthy.on_event.assert_called_once()
        assert "observer exploded" in caplog.text

    def test_project_subscription_filters(self) -> None:
        emitter = SessionEventEmitter()
        observer = Mock()
        emitter.subscribe(observer, project_id="p2")

        emitter.emit(_event())
        emitter.emit(_event().model_copy(update={"project_id": "p2"}))

        observer.on_event.assert_called_once()
        assert observer.on_event.call_args[0][0].project_id == "p2"

    def test_project_and_type_filters_combine(self) -> None:
        emitter = SessionEventEmitter()
        observer = Mock()
        emitter.subscribe(observer, [SessionEventType.GENERATION_FAILED], project_id="p1")

        emitter.emit(_event(SessionEventType.ATTEMPT_STARTED))
        emitter.emit(_event(SessionEventType.GENERATION_FAILED))
        emitter.emit(
            _event(SessionEventType.GENERATION_FAILED).model_copy(update={"project_id": "p2"})
        )

        observer.on_event.assert_called_once()

    def test_observer_may_unsubscribe_during_emit(self) -> None:
        emitter = SessionEventEmitter()
        later = Mock()

        class OneShot:
            def on_event(self, event) -> None:
                emitter.unsubscribe(self)

        emitter.subscribe(OneShot())
        emitter.subscribe(later)

        emitter.emit(_event())
        emitter.emit(_event())

        assert later.on_event.call_count == 2


def test_stderr_observer_formats_event(capsys) -> None:
    StderrEventObserver().on_event(_event())

    err = capsys.readouterr().err
    assert err.startswith("[EVENT] attempt_started project=p1")
    assert "attempt=2" in err
    assert "provider=openrouter" in err
    assert "status=STREAMING" in err
