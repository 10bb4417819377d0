"""Engine configuration models.

Config structure (.sitegen/config.yml):
    providers:
      - name: openrouter
        weight: 0.4
        credential_ref: OPENROUTER_API_KEY
        auth_header_name: Authorization
        base_url: https://openrouter.ai/api/v1
        default_model: x-ai/grok-4.1-fast:free
    session:
      connect_timeout: 10
      response_timeout: 300
      temperature: 0.7
      max_tokens: 4000
      results_root: .sitegen/results

Omitting `providers` keeps the built-in catalog.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sitegen.domain.constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_TOKENS,
    DEFAULT_RESPONSE_TIMEOUT,
    DEFAULT_RESULTS_ROOT,
    DEFAULT_TEMPERATURE,
)


class ProviderEntry(BaseModel):
    """One provider as written in config (validated again as a descriptor)."""

    model_config = ConfigDict(extra="forbid")

    name: str
    weight: float
    credential_ref: str
    auth_header_name: str = "Authorization"
    base_url: str
    default_model: str


class SessionSettings(BaseModel):
    """Per-attempt transport and storage settings."""

    model_config = ConfigDict(extra="forbid")

    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    response_timeout: float = DEFAULT_RESPONSE_TIMEOUT
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    results_root: Path = DEFAULT_RESULTS_ROOT

    @field_validator("connect_timeout", "response_timeout")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @field_validator("max_tokens")
    @classmethod
    def _max_tokens_ge_1(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_tokens must be >= 1")
        return v


class SitegenConfig(BaseModel):
    """Top-level engine configuration."""

    model_config = ConfigDict(extra="forbid")

    providers: list[ProviderEntry] | None = None
    session: SessionSettings = Field(default_factory=SessionSettings)
