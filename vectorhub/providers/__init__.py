"""
Embedding providers for VectorHub.

This package normalizes heterogeneous embedding backends behind one contract:

- **Contract**: ``EmbeddingProvider`` protocol plus ``ModelCatalog`` lookups
- **Adapters**: ``OllamaProvider`` and ``OpenAICompatibleProvider`` over aiohttp
- **Error mapping**: every failure becomes one of the four provider error kinds
- **Factory**: type tag to adapter lookup table, extensible via ``register_provider``
- **Manager**: ``ProviderManager`` facade holding the current adapter with
  validated hot-swapping
"""

from .base import EmbeddingProvider, ModelCatalog, normalize_model_name
from .factory import (
    available_provider_types,
    create_provider,
    is_provider_type_supported,
    register_provider,
    unregister_provider,
)
from .manager import ProviderManager
from .ollama import OllamaProvider
from .openai_compatible import OpenAICompatibleProvider

__all__ = [
    "EmbeddingProvider",
    "ModelCatalog",
    "normalize_model_name",
    "OllamaProvider",
    "OpenAICompatibleProvider",
    "ProviderManager",
    "available_provider_types",
    "create_provider",
    "is_provider_type_supported",
    "register_provider",
    "unregister_provider",
]
