"""Credential resolution for provider attempts.

Credentials are looked up per attempt and handed straight to the transport;
nothing here caches secrets.
"""

import os
from collections.abc import Mapping
from typing import Protocol

from sitegen.domain.providers.catalog import ProviderCatalog


class CredentialResolver(Protocol):
    """Resolves the secret for a provider, or None when none is configured."""

    def resolve(self, provider_name: str) -> str | None:
        ...


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class EnvCredentialResolver:
    """Reads each provider's `credential_ref` from an environment mapping.

    Unknown providers and blank values resolve to None.
    """

    def __init__(self, catalog: ProviderCatalog, env: Mapping[str, str] | None = None) -> None:
        self._catalog = catalog
        # None = read os.environ at resolve time
        self._env = env

    def resolve(self, provider_name: str) -> str | None:
        provider = self._catalog.get(provider_name)
        if provider is None:
            return None
        env = self._env if self._env is not None else os.environ
        return _clean(env.get(provider.credential_ref))


class StaticCredentialResolver:
    """Explicit per-provider keys (e.g. user-entered settings)."""

    def __init__(self, keys: Mapping[str, str]) -> None:
        self._keys = dict(keys)

    def resolve(self, provider_name: str) -> str | None:
        return _clean(self._keys.get(provider_name))


class ChainedCredentialResolver:
    """First non-empty credential from a sequence of resolvers."""

    def __init__(self, *resolvers: CredentialResolver) -> None:
        self._resolvers = resolvers

    def resolve(self, provider_name: str) -> str | None:
        for resolver in self._resolvers:
            credential = resolver.resolve(provider_name)
            if credential:
                return credential
        return None
