"""Provider selection: weighted-random primary pick, deterministic fallback.

Primary selection spreads load across gateways in proportion to their
weights. Fallback ordering is deterministic and prefers the highest-weight
remaining provider, since a retry should maximise the next attempt's odds
rather than spread load.
"""

import logging
from collections.abc import Collection

from sitegen.domain.errors import ConfigurationError
from sitegen.domain.models.provider_descriptor import ProviderDescriptor
from sitegen.domain.providers.catalog import ProviderCatalog
from sitegen.domain.providers.random_source import RandomSource, system_random

logger = logging.getLogger(__name__)


class ProviderSelector:
    """Stateless selection policy over a catalog.

    The only state is the injected random source; selection never suspends
    and keeps no memory between calls.
    """

    def __init__(self, rng: RandomSource | None = None) -> None:
        self._rng = rng if rng is not None else system_random()

    def pick_weighted(self, catalog: ProviderCatalog) -> ProviderDescriptor:
        """Pick a provider with probability weight / total weight.

        Args:
            catalog: Non-empty provider catalog

        Returns:
            The chosen provider. Floating-point drift that exhausts the walk
            resolves to the first catalog entry.

        Raises:
            ConfigurationError: If the catalog is empty
        """
        providers = list(catalog)
        if not providers:
            raise ConfigurationError("Cannot pick a provider from an empty catalog")

        total = sum(p.weight for p in providers)
        r = self._rng.random() * total

        for provider in providers:
            if r < provider.weight:
                logger.debug(f"Weighted pick: {provider.name} (r={r:.4f}, total={total:.4f})")
                return provider
            r -= provider.weight

        return providers[0]

    @staticmethod
    def fallback_order(catalog: ProviderCatalog, exclude_name: str) -> list[ProviderDescriptor]:
        """Remaining providers, strictly by descending weight.

        Ties keep declared order (sorted() is stable). Unknown names exclude
        nothing.
        """
        remaining = [p for p in catalog if p.name != exclude_name]
        return sorted(remaining, key=lambda p: p.weight, reverse=True)

    def next_provider(
        self,
        catalog: ProviderCatalog,
        failed_name: str | None,
        tried: Collection[str] = (),
    ) -> ProviderDescriptor:
        """Provider for the attempt after a failure on `failed_name`.

        Head of the fallback order, skipping providers already in `tried`;
        a weighted pick over the whole catalog once the fallback list is
        exhausted (or when nothing failed yet).
        """
        if failed_name is None:
            return self.pick_weighted(catalog)

        fallbacks = [p for p in self.fallback_order(catalog, failed_name) if p.name not in tried]
        if fallbacks:
            return fallbacks[0]

        logger.debug(f"Fallbacks after '{failed_name}' exhausted, re-picking from full catalog")
        return self.pick_weighted(catalog)
