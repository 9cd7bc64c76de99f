"""Provider factory: builds adapters from a type tag."""

from typing import Callable, Dict, List, Optional

from ..config.logging import provider_logger
from ..config.settings import Settings
from ..core.exceptions import ConfigurationError
from ..models.provider import ProviderConfig, ProviderType
from .base import EmbeddingProvider
from .ollama import OllamaProvider
from .openai_compatible import OpenAICompatibleProvider

ProviderFactory = Callable[[ProviderConfig, Settings], EmbeddingProvider]

_PROVIDER_FACTORIES: Dict[str, ProviderFactory] = {
    ProviderType.OLLAMA.value: OllamaProvider,
    ProviderType.OPENAI_COMPATIBLE.value: OpenAICompatibleProvider,
}


def register_provider(provider_type: str, factory: ProviderFactory) -> None:
    """Register (or replace) the adapter factory for a provider type tag."""
    if not provider_type:
        raise ConfigurationError("Provider type cannot be empty", "type")

    _PROVIDER_FACTORIES[provider_type] = factory
    provider_logger.info("Provider type registered", provider_type=provider_type)


def unregister_provider(provider_type: str) -> None:
    """Remove a provider type tag from the registry."""
    _PROVIDER_FACTORIES.pop(provider_type, None)


def available_provider_types() -> List[str]:
    """Registered provider type tags, built-ins first."""
    return list(_PROVIDER_FACTORIES)


def is_provider_type_supported(provider_type: str) -> bool:
    return provider_type in _PROVIDER_FACTORIES


def create_provider(config: ProviderConfig, settings: Optional[Settings] = None) -> EmbeddingProvider:
    """Build an adapter for ``config.type``.

    Raises:
        ConfigurationError: the type tag is not registered or the adapter
            rejected the configuration.
    """
    factory = _PROVIDER_FACTORIES.get(config.type)
    if factory is None:
        raise ConfigurationError(
            f"Unsupported provider type: {config.type} "
            f"(expected one of: {', '.join(available_provider_types())})",
            "type",
        )

    return factory(config, settings or Settings())
