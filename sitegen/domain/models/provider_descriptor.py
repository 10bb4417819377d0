"""Provider descriptor model for upstream completion gateways."""

import math

from pydantic import BaseModel, ConfigDict, field_validator


class ProviderDescriptor(BaseModel):
    """Static description of one upstream AI completion provider.

    Notes:
    - Immutable once built; catalogs share descriptors freely.
    - `credential_ref` names where the secret lives (an env var key),
      it never holds the secret itself.
    - `weight` is a relative selection probability and need not sum to 1
      across a catalog.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    weight: float
    credential_ref: str
    auth_header_name: str = "Authorization"
    base_url: str
    default_model: str

    @field_validator("name", "credential_ref", "auth_header_name", "default_model")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("must be non-empty")
        return v2

    @field_validator("weight")
    @classmethod
    def _weight_positive(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError("weight must be a finite number > 0")
        return v

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v2 = v.strip().rstrip("/")
        if not v2:
            raise ValueError("base_url must be non-empty")
        return v2
