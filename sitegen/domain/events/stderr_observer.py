"""Stderr event observer for CLI integration."""

import click

from sitegen.domain.events.event import SessionEvent


class StderrEventObserver:
    """Emits events as structured lines to stderr."""

    def on_event(self, event: SessionEvent) -> None:
        parts = [f"[EVENT] {event.event_type.value}", f"project={event.project_id}"]
        if event.attempt is not None:
            parts.append(f"attempt={event.attempt}")
        if event.provider:
            parts.append(f"provider={event.provider}")
        if event.status:
            parts.append(f"status={event.status.name}")
        if event.message:
            parts.append(f"message={event.message!r}")
        click.echo(" ".join(parts), err=True)
