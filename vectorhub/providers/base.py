"""Embedding provider contract and shared catalog helpers."""

import re
from typing import Any, Awaitable, Callable, List, Optional, Protocol, runtime_checkable

from ..config.logging import LoggerMixin
from ..core.exceptions import ProviderConnectionError, ProviderError
from ..models.provider import EmbeddingResult, ModelInfo, ProviderConfig

_VERSION_TAG = re.compile(r":[\w\-.]+$")

# Vector sizes of widely deployed embedding models
KNOWN_MODEL_DIMENSIONS = {
    "nomic-embed-text": 768,
    "mxbai-embed-large": 1024,
    "all-minilm": 384,
    "snowflake-arctic-embed": 1024,
    "bge-m3": 1024,
    "embeddinggemma": 768,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
    "all-MiniLM-L6-v2": 384,
    "all-mpnet-base-v2": 768,
}


def normalize_model_name(model_name: str) -> str:
    """Strip a trailing version tag such as ``:latest`` or ``:v1.5``."""
    return _VERSION_TAG.sub("", model_name)


def parse_vector(provider: str, raw: Any, model_name: Optional[str] = None) -> List[float]:
    """Decode an embedding array from a provider reply."""
    if not isinstance(raw, list) or not raw:
        raise ProviderConnectionError(provider, "Invalid embedding in provider response", model_name)
    try:
        return [float(value) for value in raw]
    except (TypeError, ValueError) as e:
        raise ProviderConnectionError(
            provider, f"Invalid embedding values in response: {e}", model_name, cause=e
        )


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Contract implemented by every provider adapter."""

    config: ProviderConfig
    default_model: Optional[str]

    @property
    def provider_name(self) -> str:
        """Type tag of this provider."""
        ...

    async def generate_embedding(
        self, text: str, model_name: Optional[str] = None
    ) -> EmbeddingResult:
        """Embed one text, using the configured default model when none is given."""
        ...

    async def list_models(self) -> List[ModelInfo]:
        """Return the provider's model catalog. Raises taxonomy errors."""
        ...

    async def is_model_available(self, model_name: str) -> bool:
        """Whether the catalog lists the model. An unreachable backend counts as empty."""
        ...

    async def get_model_info(self, model_name: str) -> Optional[ModelInfo]:
        """Catalog entry for the model, or None when absent or unreachable."""
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class ModelCatalog(LoggerMixin):
    """Exact, case-sensitive lookups over a provider's model listing.

    A listing that fails is logged and treated as an empty catalog, which
    keeps capability checks from raising for an unreachable backend.
    """

    def __init__(self, provider: str, list_models: Callable[[], Awaitable[List[ModelInfo]]]):
        self.provider = provider
        self._list_models = list_models

    async def _models_or_empty(self) -> List[ModelInfo]:
        try:
            return await self._list_models()
        except ProviderError as e:
            self.logger.warning(
                "Model listing unavailable, treating catalog as empty",
                provider=self.provider,
                error_code=e.error_code,
                error=e.message,
            )
            return []

    async def find(self, model_name: str) -> Optional[ModelInfo]:
        """Entry whose name or full name equals ``model_name``."""
        for model in await self._models_or_empty():
            if model.name == model_name or model.full_name == model_name:
                return model
        return None

    async def contains(self, model_name: str) -> bool:
        return await self.find(model_name) is not None
