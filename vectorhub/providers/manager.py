"""Provider manager: the facade that owns the current provider adapter."""

import asyncio
from typing import Iterable, List, Optional

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import ConfigurationError
from ..models.base import OperationResult
from ..models.provider import EmbeddingResult, ModelInfo, ProviderConfig, ProviderType
from .base import EmbeddingProvider
from .factory import create_provider


class ProviderManager(LoggerMixin):
    """Holds one current provider adapter and hot-swaps it on request.

    Every delegated call captures the current adapter once, so a concurrent
    :meth:`switch_provider` never changes the provider mid-operation.
    """

    def __init__(
        self,
        settings: Settings,
        provider: Optional[EmbeddingProvider] = None,
        configured_types: Optional[Iterable[str]] = None,
    ):
        self.settings = settings
        self._provider: Optional[EmbeddingProvider] = provider
        self._config: Optional[ProviderConfig] = provider.config if provider is not None else None
        self._lock = asyncio.Lock()
        self._configured_types: List[str] = []

        if configured_types is None:
            configured_types = self._types_from_settings()
        for provider_type in configured_types:
            self._remember_type(provider_type)
        if provider is not None:
            self._remember_type(provider.provider_name)

    def _types_from_settings(self) -> List[str]:
        types = [self.settings.DEFAULT_PROVIDER, ProviderType.OLLAMA.value]
        if self.settings.OPENAI_COMPATIBLE_BASE_URL:
            types.append(ProviderType.OPENAI_COMPATIBLE.value)
        return types

    def _remember_type(self, provider_type: str) -> None:
        if provider_type and provider_type not in self._configured_types:
            self._configured_types.append(provider_type)

    @property
    def is_initialized(self) -> bool:
        return self._provider is not None

    async def initialize(self, config: ProviderConfig) -> None:
        """Install the startup adapter without a smoke test.

        An unreachable backend surfaces on the first delegated call.
        """
        provider = create_provider(config, self.settings)

        async with self._lock:
            previous = self._provider
            self._provider = provider
            self._config = config
            self._remember_type(provider.provider_name)

        if previous is not None and previous is not provider:
            await previous.close()

        self.logger.info(
            "Provider manager initialized",
            provider=provider.provider_name,
            base_url=config.base_url,
            default_model=config.default_model,
        )

    def _current(self) -> EmbeddingProvider:
        provider = self._provider
        if provider is None:
            raise ConfigurationError("Provider manager not initialized")
        return provider

    async def switch_provider(self, config: ProviderConfig) -> OperationResult[str]:
        """Validate a new provider configuration and make it current.

        The candidate adapter must answer ``list_models()`` before it replaces
        the current one. On failure the previous adapter stays installed.
        """
        try:
            candidate = create_provider(config, self.settings)
        except Exception as e:
            self.logger.warning("Provider switch rejected", provider=config.type, error=str(e))
            return OperationResult(
                success=False,
                message=getattr(e, "message", str(e)),
                error_code=getattr(e, "error_code", None),
            )

        try:
            models = await candidate.list_models()
        except Exception as e:
            await candidate.close()
            self.logger.warning(
                "Provider smoke test failed, keeping current provider",
                provider=config.type,
                current=self._provider.provider_name if self._provider else None,
                error=str(e),
            )
            return OperationResult(
                success=False,
                message=f"Provider validation failed: {getattr(e, 'message', str(e))}",
                error_code=getattr(e, "error_code", None),
            )

        async with self._lock:
            previous = self._provider
            self._provider = candidate
            self._config = config
            self._remember_type(candidate.provider_name)

        if previous is not None and previous is not candidate:
            await previous.close()

        self.logger.info(
            "Provider switched",
            provider=candidate.provider_name,
            base_url=config.base_url,
            models=len(models),
        )
        return OperationResult(
            success=True,
            data=candidate.provider_name,
            message=f"Switched to {candidate.provider_name} ({len(models)} models available)",
        )

    @property
    def current_config(self) -> Optional[ProviderConfig]:
        """Configuration of the current adapter, credential included."""
        return self._config

    @property
    def default_model(self) -> Optional[str]:
        """Model the current adapter uses when a call names none."""
        return self._current().default_model

    def get_current_provider(self) -> str:
        """Type tag of the current adapter."""
        return self._current().provider_name

    def list_all_providers(self) -> List[str]:
        """Configured provider type tags, in the order they became known."""
        return list(self._configured_types)

    async def generate_embedding(self, text: str, model_name: Optional[str] = None) -> EmbeddingResult:
        return await self._current().generate_embedding(text, model_name)

    async def list_models(self) -> List[ModelInfo]:
        return await self._current().list_models()

    async def is_model_available(self, model_name: str) -> bool:
        return await self._current().is_model_available(model_name)

    async def get_model_info(self, model_name: str) -> Optional[ModelInfo]:
        return await self._current().get_model_info(model_name)

    async def close(self) -> None:
        """Close the current adapter."""
        async with self._lock:
            provider = self._provider
            self._provider = None
            self._config = None

        if provider is not None:
            await provider.close()
        self.logger.info("Provider manager closed")
