from typing import Literal

from pydantic import BaseModel, Field


class BaseOutput(BaseModel):
    schema_version: int = 1
    command: Literal["providers", "pick", "fallback", "generate", "result", "validate-key"]
    exit_code: int
    error: str | None = None


class ProviderSummary(BaseModel):
    """Summary of a single catalog entry for providers output."""
    name: str
    weight: float
    share: float
    base_url: str
    default_model: str
    auth_header_name: str
    credential_ref: str
    credential_present: bool


class ProvidersOutput(BaseOutput):
    command: Literal["providers"] = "providers"
    providers: list[ProviderSummary] = Field(default_factory=list)


class PickOutput(BaseOutput):
    command: Literal["pick"] = "pick"
    count: int = 0
    picks: dict[str, int] = Field(default_factory=dict)


class FallbackOutput(BaseOutput):
    command: Literal["fallback"] = "fallback"
    exclude: str
    order: list[str] = Field(default_factory=list)


class GenerateOutput(BaseOutput):
    command: Literal["generate"] = "generate"
    project_id: str
    status: str | None = None
    attempt: int | None = None
    provider: str | None = None
    error_kind: str | None = None
    files: list[str] = Field(default_factory=list)
    preview_url: str | None = None
    result_path: str | None = None


class ResultOutput(BaseOutput):
    command: Literal["result"] = "result"
    project_id: str
    available: bool = False
    provider: str | None = None
    model: str | None = None
    files: list[str] = Field(default_factory=list)
    preview_url: str | None = None


class ValidateKeyOutput(BaseOutput):
    command: Literal["validate-key"] = "validate-key"
    provider: str
    valid: bool = False
