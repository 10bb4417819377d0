"""Domain-level exceptions for the site generation engine."""


class SitegenError(Exception):
    """Base class for engine errors."""


class ConfigurationError(SitegenError):
    """Raised when the provider catalog or engine config is invalid.

    Fatal and not retryable. Surfaces at startup, never converted into a
    session failure.
    """


class ProviderError(SitegenError):
    """Raised when a provider cannot serve an attempt (auth, network, timeout, etc.)."""

    def __init__(self, message: str, *, provider: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider


class NoProviderAvailable(ProviderError):
    """Raised when no credential can be resolved for the chosen provider."""


class TransportError(ProviderError):
    """Raised when a stream fails mid-flight (network, provider error, timeout)."""


class GenerationCancelled(SitegenError):
    """Raised when an in-flight generation is cancelled by the host."""
