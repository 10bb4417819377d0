"""Streaming transports for provider generations."""

from .base import StreamTransport
from .chat_completions import ChatCompletionsTransport, KeyValidation

__all__ = ["StreamTransport", "ChatCompletionsTransport", "KeyValidation"]
