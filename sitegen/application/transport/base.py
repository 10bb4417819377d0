"""Streaming transport contract."""

from collections.abc import AsyncIterator
from typing import Protocol

from sitegen.domain.models.generation import GenerationRequest
from sitegen.domain.models.provider_descriptor import ProviderDescriptor
from sitegen.domain.models.stream_events import StreamEvent


class StreamTransport(Protocol):
    """Opens one generation stream against a provider.

    The returned iterator yields chunk/status events and ends with exactly one
    done or error event. Implementations may also raise ProviderError (or any
    transport exception) instead of yielding an error event; the session
    treats both the same way. Closing the iterator early must release the
    underlying connection.
    """

    def open_stream(
        self,
        provider: ProviderDescriptor,
        credential: str,
        request: GenerationRequest,
    ) -> AsyncIterator[StreamEvent]:
        ...
