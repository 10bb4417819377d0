"""Request and result models for a single generation run."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerationRequest(BaseModel):
    """What the host asks a session to generate.

    `continuation` carries partial output from an interrupted attempt; it is
    set by the session on resume and left empty on fresh attempts.
    """

    model_config = ConfigDict(frozen=True)

    project_id: str
    prompt: str
    model: str | None = None  # None = provider's default model
    continuation: str = ""

    @field_validator("prompt")
    @classmethod
    def _prompt_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("prompt must be non-empty")
        return v


class GenerationResult(BaseModel):
    """Final output of a successful generation.

    - files: path (relative to the site root) -> file content
    - preview_url: live preview location, when a sandbox published one
    """

    files: dict[str, str] = Field(default_factory=dict)
    preview_url: str | None = None
    sandbox_id: str | None = None
    provider: str | None = None
    model: str | None = None
