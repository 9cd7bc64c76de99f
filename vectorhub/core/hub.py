"""Application container wiring storage, providers and services together."""

import asyncio
from typing import Any, Mapping, Optional, Union

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..connections import ConnectionStore
from ..database import Database
from ..models.connection import (
    ConnectionResponse,
    CreateConnectionRequest,
    UpdateConnectionRequest,
)
from ..models.provider import ProviderConfig
from ..providers.manager import ProviderManager
from ..services import BatchOrchestrator, EmbeddingService
from ..store import EmbeddingStore
from .exceptions import (
    ConfigurationError,
    ConnectionNotFoundError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderModelError,
    ProviderRateLimitError,
)

PROVIDER_ERRORS_BY_CODE = {
    error_cls.default_error_code: error_cls
    for error_cls in (
        ProviderConnectionError,
        ProviderModelError,
        ProviderAuthenticationError,
        ProviderRateLimitError,
    )
}


class VectorHub(LoggerMixin):
    """Owns the database, stores, provider facade and services.

    Components can be injected for tests; anything left out is built from
    ``settings`` during :meth:`initialize`.

    Changes that affect the active connection go through the hub
    (:meth:`activate_connection`, :meth:`create_connection`,
    :meth:`update_connection`, :meth:`delete_connection`). They run one at a
    time, and the facade always serves the stored active connection, or the
    settings default when none is active.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        database: Optional[Database] = None,
        provider_manager: Optional[ProviderManager] = None,
    ):
        self.settings = settings or Settings()
        self.database = database or Database(self.settings)
        self.provider_manager = provider_manager or ProviderManager(self.settings)
        self.connections = ConnectionStore(self.database, self.settings)
        self.embeddings = EmbeddingStore(self.database, self.settings)
        self.service = EmbeddingService(self.provider_manager, self.embeddings, self.settings)
        self.batch = BatchOrchestrator(self.service, self.settings)
        self._activation_lock = asyncio.Lock()
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Open storage and install the provider of the active connection."""
        if self._initialized:
            return

        self.settings.create_directories()
        await self.database.initialize()
        await self.connections.initialize()
        await self.embeddings.initialize()

        if not self.provider_manager.is_initialized:
            config = await self.connections.get_active_config()
            source = "active_connection"
            if config is None:
                config = self.settings.default_provider_config()
                source = "settings"
            await self.provider_manager.initialize(config)
            self.logger.info("Provider configured", provider=config.type, source=source)

        self._initialized = True
        self.logger.info(
            "VectorHub initialized",
            db_path=self.database.db_path,
            provider=self.provider_manager.get_current_provider(),
        )

    async def _switch(self, config: ProviderConfig) -> None:
        """Validate and install an adapter, raising the typed error on failure."""
        result = await self.provider_manager.switch_provider(config)
        if result.success:
            return

        self.logger.warning(
            "Provider switch rejected",
            provider=config.type,
            error_code=result.error_code,
            error=result.message,
        )
        message = result.message or "Provider validation failed"
        if result.error_code == "CONFIGURATION_ERROR":
            raise ConfigurationError(message, "type")
        error_cls = PROVIDER_ERRORS_BY_CODE.get(result.error_code, ProviderConnectionError)
        raise error_cls(config.type, message, config.default_model)

    async def _install(self, config: Optional[ProviderConfig], reason: str) -> None:
        """Install an adapter without a smoke test, as at startup."""
        config = config or self.settings.default_provider_config()
        await self.provider_manager.initialize(config)
        self.logger.info("Provider reinstalled", provider=config.type, reason=reason)

    async def activate_connection(self, connection_id: int) -> ConnectionResponse:
        """Switch the provider to a stored connection, then mark it active.

        The provider is validated first; when validation fails nothing is
        persisted and the previous provider stays current.

        Raises:
            ConnectionNotFoundError: no connection has this id.
            ProviderError: the connection's provider failed validation.
        """
        self._ensure_initialized()

        async with self._activation_lock:
            config = await self.connections.get_config(connection_id)
            if config is None:
                raise ConnectionNotFoundError(connection_id)

            previous = self.provider_manager.current_config
            await self._switch(config)
            try:
                connection = await self.connections.set_active(connection_id)
            except Exception:
                await self._install(previous, "activation_not_persisted")
                raise

        self.logger.info(
            "Connection activated",
            connection_id=connection_id,
            provider=self.provider_manager.get_current_provider(),
        )
        return connection

    async def create_connection(
        self, data: Union[CreateConnectionRequest, Mapping[str, Any]]
    ) -> ConnectionResponse:
        """Persist a connection; one created active is validated and served first."""
        self._ensure_initialized()
        request = self.connections.validate_create(data)

        async with self._activation_lock:
            if not request.is_active:
                return await self.connections.create(request)

            previous = self.provider_manager.current_config
            await self._switch(request.to_provider_config())
            try:
                return await self.connections.create(request)
            except Exception:
                await self._install(previous, "creation_failed")
                raise

    async def update_connection(
        self,
        connection_id: int,
        patch: Union[UpdateConnectionRequest, Mapping[str, Any]],
    ) -> Optional[ConnectionResponse]:
        """Apply a partial patch, keeping the facade on the active connection.

        Activating a connection, or changing the provider settings of the
        active one, validates the resulting provider before anything is
        written. Deactivating the active connection falls back to the
        settings default. Returns None for an unknown id.
        """
        self._ensure_initialized()
        request = self.connections.validate_update(patch)

        async with self._activation_lock:
            stored = await self.connections.get_config(connection_id)
            current = await self.connections.get(connection_id)
            patched = await self.connections.preview_update(connection_id, request)
            if stored is None or current is None or patched is None:
                return None

            target = patched.to_provider_config()
            if patched.is_active and (not current.is_active or target != stored):
                previous = self.provider_manager.current_config
                await self._switch(target)
                try:
                    return await self.connections.update(connection_id, request)
                except Exception:
                    await self._install(previous, "update_failed")
                    raise

            updated = await self.connections.update(connection_id, request)
            if current.is_active and not patched.is_active:
                await self._install(None, "connection_deactivated")
            return updated

    async def delete_connection(self, connection_id: int) -> bool:
        """Delete a connection. Deleting the active one falls back to the settings default."""
        self._ensure_initialized()

        async with self._activation_lock:
            current = await self.connections.get(connection_id)
            deleted = await self.connections.delete(connection_id)
            if deleted and current is not None and current.is_active:
                await self._install(None, "connection_deleted")
            return deleted

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise ConfigurationError("VectorHub not initialized")

    async def close(self) -> None:
        """Release the provider session and the database connection."""
        await self.provider_manager.close()
        await self.embeddings.close()
        await self.database.close()
        self._initialized = False
        self.logger.info("VectorHub closed")

    async def __aenter__(self) -> "VectorHub":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
