"""Ollama embedding provider."""

from typing import List, Optional

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import ProviderConnectionError, ProviderError
from ..models.provider import EmbeddingResult, ModelInfo, ProviderConfig, ProviderType
from .base import KNOWN_MODEL_DIMENSIONS, ModelCatalog, normalize_model_name, parse_vector
from .errors import as_listing_error
from .http import ProviderHttpClient

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "nomic-embed-text"
DEFAULT_MAX_TOKENS = 8192

# Served when the tag listing does not include a models array
STATIC_MODELS = [
    ModelInfo(
        name=DEFAULT_MODEL,
        provider=ProviderType.OLLAMA.value,
        dimensions=768,
        max_tokens=DEFAULT_MAX_TOKENS,
        price_per_token=0.0,
    ),
]


class OllamaProvider(LoggerMixin):
    """Adapter for a local or remote Ollama server.

    Uses ``POST /api/embed`` for embeddings and ``GET /api/tags`` for the
    model catalog. Ollama takes no credentials.
    """

    def __init__(self, config: ProviderConfig, settings: Optional[Settings] = None):
        settings = settings or Settings()
        self.config = config
        self.default_model = config.default_model or DEFAULT_MODEL
        self.http = ProviderHttpClient(
            self.provider_name,
            config.base_url or DEFAULT_BASE_URL,
            headers=config.custom_headers,
            request_timeout=settings.PROVIDER_REQUEST_TIMEOUT_SECONDS,
            list_timeout=settings.PROVIDER_LIST_TIMEOUT_SECONDS,
        )
        self._catalog = ModelCatalog(self.provider_name, self.list_models)

    @property
    def provider_name(self) -> str:
        return ProviderType.OLLAMA.value

    async def generate_embedding(self, text: str, model_name: Optional[str] = None) -> EmbeddingResult:
        """Generate an embedding for one text."""
        model = model_name or self.default_model
        data = await self.http.post_json(
            "/api/embed", {"model": model, "input": [text]}, model_name=model
        )

        embeddings = data.get("embeddings") if isinstance(data, dict) else None
        if not isinstance(embeddings, list) or not embeddings:
            raise ProviderConnectionError(
                self.provider_name, "Invalid response format from Ollama API", model
            )

        embedding = parse_vector(self.provider_name, embeddings[0], model)
        tokens = data.get("prompt_eval_count")

        self.logger.debug("Embedding generated", model=model, dimensions=len(embedding))
        return EmbeddingResult(
            embedding=embedding,
            model=model,
            provider=self.provider_name,
            dimensions=len(embedding),
            tokens_used=tokens if isinstance(tokens, int) and tokens >= 0 else None,
        )

    async def list_models(self) -> List[ModelInfo]:
        """List locally pulled models, names normalized without their tag."""
        try:
            data = await self.http.get_json("/api/tags")
        except ProviderError as e:
            raise as_listing_error(e)

        entries = data.get("models") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            return list(STATIC_MODELS)

        models = []
        for entry in entries:
            full_name = entry.get("name") if isinstance(entry, dict) else None
            if not full_name:
                continue
            name = normalize_model_name(full_name)
            models.append(
                ModelInfo(
                    name=name,
                    provider=self.provider_name,
                    full_name=full_name,
                    dimensions=KNOWN_MODEL_DIMENSIONS.get(name),
                    max_tokens=DEFAULT_MAX_TOKENS,
                    price_per_token=0.0,
                )
            )
        return models

    async def is_model_available(self, model_name: str) -> bool:
        return await self._catalog.contains(model_name)

    async def get_model_info(self, model_name: str) -> Optional[ModelInfo]:
        return await self._catalog.find(model_name)

    async def close(self) -> None:
        await self.http.close()
