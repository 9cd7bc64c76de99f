"""OpenAI-compatible embedding provider (OpenAI, LM Studio, LocalAI, vLLM, ...)."""

from typing import Dict, List, Optional

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import ConfigurationError, ProviderConnectionError, ProviderError, ProviderModelError
from ..models.provider import EmbeddingResult, ModelInfo, ProviderConfig, ProviderType
from .base import KNOWN_MODEL_DIMENSIONS, ModelCatalog, normalize_model_name, parse_vector
from .errors import as_listing_error
from .http import ProviderHttpClient


def api_root(base_url: str) -> str:
    """Base URL without a trailing ``/v1``, so paths are never doubled."""
    root = base_url.rstrip("/")
    if root.endswith("/v1"):
        root = root[: -len("/v1")]
    return root


class OpenAICompatibleProvider(LoggerMixin):
    """Adapter for any endpoint implementing ``/v1/embeddings`` and ``/v1/models``."""

    def __init__(self, config: ProviderConfig, settings: Optional[Settings] = None):
        if not config.base_url:
            raise ConfigurationError(
                "OpenAI-compatible provider requires a base URL", "base_url"
            )

        settings = settings or Settings()
        self.config = config
        self.default_model = config.default_model

        headers: Dict[str, str] = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        headers.update(config.custom_headers)

        self.http = ProviderHttpClient(
            self.provider_name,
            api_root(config.base_url),
            headers=headers,
            request_timeout=settings.PROVIDER_REQUEST_TIMEOUT_SECONDS,
            list_timeout=settings.PROVIDER_LIST_TIMEOUT_SECONDS,
        )
        self._catalog = ModelCatalog(self.provider_name, self.list_models)

    @property
    def provider_name(self) -> str:
        return ProviderType.OPENAI_COMPATIBLE.value

    async def generate_embedding(self, text: str, model_name: Optional[str] = None) -> EmbeddingResult:
        """Generate an embedding for one text."""
        model = model_name or self.default_model
        if not model:
            raise ProviderModelError(
                self.provider_name, "No model specified and no default model configured"
            )

        data = await self.http.post_json(
            "/v1/embeddings", {"model": model, "input": text}, model_name=model
        )

        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list) or not items or not isinstance(items[0], dict):
            raise ProviderConnectionError(
                self.provider_name, "Invalid response format from embeddings endpoint", model
            )

        embedding = parse_vector(self.provider_name, items[0].get("embedding"), model)

        usage = data.get("usage") if isinstance(data.get("usage"), dict) else {}
        tokens = usage.get("total_tokens", usage.get("prompt_tokens"))

        self.logger.debug("Embedding generated", model=model, dimensions=len(embedding))
        return EmbeddingResult(
            embedding=embedding,
            model=model,
            provider=self.provider_name,
            dimensions=len(embedding),
            tokens_used=tokens if isinstance(tokens, int) and tokens >= 0 else None,
        )

    async def list_models(self) -> List[ModelInfo]:
        """List models reported by ``/v1/models``."""
        try:
            data = await self.http.get_json("/v1/models")
        except ProviderError as e:
            raise as_listing_error(e)

        entries = data.get("data") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            return []

        models = []
        for entry in entries:
            model_id = entry.get("id") if isinstance(entry, dict) else None
            if not model_id:
                continue
            name = normalize_model_name(model_id)
            models.append(
                ModelInfo(
                    name=name,
                    provider=self.provider_name,
                    full_name=model_id,
                    dimensions=KNOWN_MODEL_DIMENSIONS.get(name),
                )
            )
        return models

    async def is_model_available(self, model_name: str) -> bool:
        return await self._catalog.contains(model_name)

    async def get_model_info(self, model_name: str) -> Optional[ModelInfo]:
        return await self._catalog.find(model_name)

    async def close(self) -> None:
        await self.http.close()
