"""Immutable, ordered catalog of upstream providers."""

from collections.abc import Iterable, Iterator
from typing import Any

from pydantic import ValidationError

from sitegen.domain.constants import BUILTIN_PROVIDERS
from sitegen.domain.errors import ConfigurationError
from sitegen.domain.models.provider_descriptor import ProviderDescriptor


class ProviderCatalog:
    """Ordered, read-only list of provider descriptors.

    Built once from static configuration and passed explicitly into the
    selector and sessions. Declared order matters: it breaks weight ties in
    fallback ordering and is the walk order for weighted picks.

    Raises:
        ConfigurationError: If the catalog is empty, names repeat, or a
            weight is not positive
    """

    __slots__ = ("_providers", "_by_name")

    def __init__(self, providers: Iterable[ProviderDescriptor]) -> None:
        entries = tuple(providers)
        if not entries:
            raise ConfigurationError("Provider catalog must contain at least one provider")

        by_name: dict[str, ProviderDescriptor] = {}
        for provider in entries:
            if provider.name in by_name:
                raise ConfigurationError(f"Duplicate provider name in catalog: '{provider.name}'")
            if provider.weight <= 0:
                raise ConfigurationError(
                    f"Provider '{provider.name}' has non-positive weight {provider.weight}"
                )
            by_name[provider.name] = provider

        self._providers = entries
        self._by_name = by_name

    @classmethod
    def from_dicts(cls, entries: Iterable[dict[str, Any]]) -> "ProviderCatalog":
        """Build a catalog from raw config mappings.

        Raises:
            ConfigurationError: If any entry fails validation
        """
        providers = []
        for index, entry in enumerate(entries):
            try:
                providers.append(ProviderDescriptor(**entry))
            except (ValidationError, TypeError) as e:
                label = entry.get("name", f"#{index}") if isinstance(entry, dict) else f"#{index}"
                raise ConfigurationError(f"Invalid provider entry {label}: {e}") from e
        return cls(providers)

    @classmethod
    def default(cls) -> "ProviderCatalog":
        """Catalog of the built-in gateways."""
        return cls.from_dicts(BUILTIN_PROVIDERS)

    @property
    def providers(self) -> tuple[ProviderDescriptor, ...]:
        return self._providers

    @property
    def total_weight(self) -> float:
        return sum(p.weight for p in self._providers)

    def names(self) -> list[str]:
        return [p.name for p in self._providers]

    def get(self, name: str) -> ProviderDescriptor | None:
        return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"ProviderCatalog({self.names()!r})"
