"""Build the provider catalog from engine configuration."""

from sitegen.application.config_models import SitegenConfig
from sitegen.domain.providers.catalog import ProviderCatalog


def build_catalog(config: SitegenConfig) -> ProviderCatalog:
    """Catalog from config, or the built-in gateways when none are configured.

    An explicitly empty `providers` list is a configuration error, not a
    request for the defaults.

    Raises:
        ConfigurationError: If the configured catalog is invalid
    """
    if config.providers is None:
        return ProviderCatalog.default()
    return ProviderCatalog.from_dicts(entry.model_dump() for entry in config.providers)
