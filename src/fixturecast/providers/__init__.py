"""Provider registry for fixturecast."""

from fixturecast.providers.base import ProviderAdapter, ProviderMetadata
from fixturecast.providers.deepseek import DeepSeekAdapter
from fixturecast.providers.gemini import GeminiAdapter

# Provider registry
_PROVIDERS: dict[str, type[ProviderAdapter]] = {}


def register_provider(cls: type[ProviderAdapter]) -> type[ProviderAdapter]:
    """Decorator to register a provider adapter class.

    Usage:
        @register_provider
        class GeminiAdapter(ProviderAdapter):
            ...
    """
    if not hasattr(cls, "metadata"):
        raise ValueError(f"Provider {cls.__name__} must define metadata ClassVar")

    _PROVIDERS[cls.metadata.id] = cls
    return cls


def get_provider(provider_id: str) -> type[ProviderAdapter] | None:
    """Get a provider adapter class by ID.

    Returns:
        Adapter class or None if not found
    """
    return _PROVIDERS.get(provider_id)


def get_all_providers() -> dict[str, type[ProviderAdapter]]:
    """Get all registered providers."""
    return dict(_PROVIDERS)


def list_provider_ids() -> list[str]:
    """List all registered provider IDs."""
    return list(_PROVIDERS.keys())


def create_adapter(provider_id: str, **kwargs) -> ProviderAdapter:
    """Create an instance of a provider adapter.

    Args:
        provider_id: Provider identifier
        **kwargs: Passed to the adapter (api_key, model, client)

    Raises:
        ValueError: If provider not found
    """
    provider_cls = get_provider(provider_id)
    if provider_cls is None:
        raise ValueError(f"Unknown provider: {provider_id}")
    return provider_cls(**kwargs)


register_provider(GeminiAdapter)
register_provider(DeepSeekAdapter)

__all__ = [
    "ProviderAdapter",
    "ProviderMetadata",
    "GeminiAdapter",
    "DeepSeekAdapter",
    "register_provider",
    "get_provider",
    "get_all_providers",
    "list_provider_ids",
    "create_adapter",
]
