"""OpenAI-compatible chat-completions streaming transport.

All built-in gateways speak the same `/chat/completions` SSE dialect; they
differ only in base URL, default model and which header carries the key.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx
from pydantic import BaseModel

from sitegen.application.file_extraction import extract_files
from sitegen.application.prompts import build_messages
from sitegen.domain.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_TOKENS,
    DEFAULT_RESPONSE_TIMEOUT,
    DEFAULT_TEMPERATURE,
)
from sitegen.domain.errors import TransportError
from sitegen.domain.models.generation import GenerationRequest, GenerationResult
from sitegen.domain.models.provider_descriptor import ProviderDescriptor
from sitegen.domain.models.stream_events import (
    ChunkEvent,
    DoneEvent,
    ErrorEvent,
    StatusEvent,
    StreamEvent,
)

logger = logging.getLogger(__name__)

SSE_DONE = "[DONE]"


class KeyValidation(BaseModel):
    """Outcome of a credential check against a provider."""

    valid: bool
    error: str | None = None


def build_auth_headers(provider: ProviderDescriptor, credential: str) -> dict[str, str]:
    """Request headers carrying the credential in the provider's auth header.

    `Authorization` gets a Bearer token; any other header gets the raw key.
    """
    headers = {"Content-Type": "application/json"}
    if provider.auth_header_name.lower() == "authorization":
        headers[provider.auth_header_name] = f"Bearer {credential}"
    else:
        headers[provider.auth_header_name] = credential
    return headers


def parse_sse_line(line: str) -> dict[str, Any] | None:
    """Decode one SSE line into its JSON payload.

    Returns None for blank lines, comments, non-data fields, the [DONE]
    sentinel and malformed JSON.
    """
    line = line.strip()
    if not line.startswith("data:"):
        return None
    data = line[len("data:"):].strip()
    if not data or data == SSE_DONE:
        return None
    try:
        parsed = json.loads(data)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed SSE payload: {data[:80]}")
        return None
    return parsed if isinstance(parsed, dict) else None


def _delta_text(payload: dict[str, Any]) -> str:
    choices = payload.get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return ""
    delta = choices[0].get("delta") or {}
    content = delta.get("content") if isinstance(delta, dict) else None
    return content if isinstance(content, str) else ""


def _error_message(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict):
        return error.get("message") or json.dumps(error)
    if isinstance(error, str) and error:
        return error
    message = payload.get("message")
    return message if isinstance(message, str) and message else None


class ChatCompletionsTransport:
    """Streams generations from OpenAI-compatible gateways over httpx.

    Args:
        connect_timeout: Seconds to establish the connection
        response_timeout: Seconds between bytes of the response
        temperature: Sampling temperature sent with each request
        max_tokens: Completion token cap sent with each request
        http_transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._connect_timeout = connect_timeout
        self._response_timeout = response_timeout
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._http_transport = http_transport

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(self._response_timeout, connect=self._connect_timeout)
        return httpx.AsyncClient(timeout=timeout, transport=self._http_transport)

    async def open_stream(
        self,
        provider: ProviderDescriptor,
        credential: str,
        request: GenerationRequest,
    ) -> AsyncIterator[StreamEvent]:
        model = request.model or provider.default_model
        payload = {
            "model": model,
            "messages": build_messages(request),
            "stream": True,
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        url = f"{provider.base_url}/chat/completions"
        full_text = request.continuation

        yield StatusEvent(text=f"Trying {provider.name} ({model})...")

        try:
            async with self._client() as client:
                async with client.stream(
                    "POST", url, json=payload, headers=build_auth_headers(provider, credential)
                ) as response:
                    if response.status_code >= 400:
                        yield ErrorEvent(
                            reason=f"{provider.name} failed with status {response.status_code}"
                        )
                        return

                    async for line in response.aiter_lines():
                        data = parse_sse_line(line)
                        if data is None:
                            continue
                        error = _error_message(data) if "error" in data else None
                        if error:
                            yield ErrorEvent(reason=f"{provider.name} error: {error}")
                            return
                        text = _delta_text(data)
                        if text:
                            full_text += text
                            yield ChunkEvent(text=text)
        except httpx.HTTPError as e:
            raise TransportError(
                f"{provider.name} HTTP error: {e}", provider=provider.name
            ) from e

        if not full_text[len(request.continuation):].strip():
            yield ErrorEvent(reason=f"{provider.name} returned an empty response")
            return

        yield StatusEvent(text="Extracting files...")
        files = extract_files(full_text)
        logger.debug(f"{provider.name} produced files: {sorted(files)}")
        yield DoneEvent(result=GenerationResult(files=files, provider=provider.name, model=model))

    async def validate_credential(
        self,
        provider: ProviderDescriptor,
        credential: str,
        model: str | None = None,
    ) -> KeyValidation:
        """Send a minimal completion to check the credential works."""
        payload = {
            "model": model or provider.default_model,
            "messages": [{"role": "user", "content": "hi"}],
            "max_tokens": 5,
        }
        url = f"{provider.base_url}/chat/completions"
        try:
            async with self._client() as client:
                response = await client.post(
                    url, json=payload, headers=build_auth_headers(provider, credential)
                )
        except httpx.HTTPError as e:
            return KeyValidation(valid=False, error=str(e) or type(e).__name__)

        if response.is_success:
            return KeyValidation(valid=True)

        try:
            data = response.json()
        except ValueError:
            data = {}
        return KeyValidation(
            valid=False,
            error=_error_message(data) or f"HTTP {response.status_code}",
        )
