"""Persistence hand-off contract for finished generations."""

from collections.abc import Awaitable
from typing import Protocol

from sitegen.domain.models.generation import GenerationResult


class ResultSink(Protocol):
    """Receives the final result of a succeeded attempt.

    May be sync or async (return an awaitable).
    """

    def save(self, project_id: str, result: GenerationResult) -> Awaitable[object] | object:
        ...
