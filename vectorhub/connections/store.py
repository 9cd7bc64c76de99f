"""Persisted provider connections with a single-active invariant."""

import json
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import (
    ConnectionNotFoundError,
    StorageError,
    ValidationError,
    VectorHubError,
)
from ..database import Database
from ..models.connection import (
    Connection,
    ConnectionResponse,
    ConnectionTestRequest,
    ConnectionTestResponse,
    CreateConnectionRequest,
    UpdateConnectionRequest,
)
from ..models.provider import ProviderConfig
from ..providers.base import EmbeddingProvider
from ..providers.factory import available_provider_types, create_provider
from ..utils.date_utils import parse_timestamp, utc_timestamp
from ..utils.validation import validate_connection_data, validate_provider_type, validate_url

M = TypeVar("M", bound=BaseModel)

SELECT_COLUMNS = (
    "id, name, type, base_url, api_key, default_model, metadata, is_active, created_at, updated_at"
)


def coerce_request(model_cls: Type[M], data: Union[M, Mapping[str, Any]]) -> M:
    """Build a request model, reporting the first problem as a ValidationError."""
    if isinstance(data, model_cls):
        return data

    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or None
        raise ValidationError(f"Invalid {field or 'request'}: {error.get('msg')}", field)


def row_to_connection(row) -> Connection:
    """Convert a database row to a Connection."""
    return Connection(
        id=row["id"],
        name=row["name"],
        type=row["type"],
        base_url=row["base_url"],
        api_key=row["api_key"],
        default_model=row["default_model"],
        metadata=json.loads(row["metadata"]) if row["metadata"] else {},
        is_active=bool(row["is_active"]),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


class ConnectionStore(LoggerMixin):
    """CRUD over provider connections, at most one of which is active.

    Activation clears every other active flag and sets the new one in a
    single write transaction; a partial unique index on ``is_active`` backs
    the invariant in storage. Read projections never include the API key.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings,
        provider_factory: Callable[[ProviderConfig, Settings], EmbeddingProvider] = create_provider,
    ):
        self.database = database
        self.settings = settings
        self.provider_factory = provider_factory

    async def initialize(self) -> None:
        await self.database.initialize()
        self.logger.info("Connection store initialized")

    async def _load(self, connection_id: int) -> Optional[Connection]:
        try:
            row = await self.database.fetch_one(
                f"SELECT {SELECT_COLUMNS} FROM connection_configs WHERE id = ?", (connection_id,)
            )
        except Exception as e:
            self.logger.error("Failed to load connection", connection_id=connection_id, error=str(e))
            raise StorageError(f"Failed to load connection: {e}", query="get", cause=e)

        return row_to_connection(row) if row else None

    async def _load_active(self) -> Optional[Connection]:
        try:
            row = await self.database.fetch_one(
                f"SELECT {SELECT_COLUMNS} FROM connection_configs WHERE is_active = 1 LIMIT 1"
            )
        except Exception as e:
            self.logger.error("Failed to load active connection", error=str(e))
            raise StorageError(f"Failed to load active connection: {e}", query="get_active", cause=e)

        return row_to_connection(row) if row else None

    async def list(self) -> List[ConnectionResponse]:
        """All connections, newest first."""
        try:
            rows = await self.database.fetch_all(
                f"SELECT {SELECT_COLUMNS} FROM connection_configs ORDER BY created_at DESC, id DESC"
            )
        except Exception as e:
            self.logger.error("Failed to list connections", error=str(e))
            raise StorageError(f"Failed to list connections: {e}", query="list", cause=e)

        return [row_to_connection(row).to_response() for row in rows]

    async def get(self, connection_id: int) -> Optional[ConnectionResponse]:
        connection = await self._load(connection_id)
        return connection.to_response() if connection else None

    async def get_active(self) -> Optional[ConnectionResponse]:
        """The active connection, or None."""
        connection = await self._load_active()
        return connection.to_response() if connection else None

    async def get_config(self, connection_id: int) -> Optional[ProviderConfig]:
        """Provider configuration of a connection, credential included."""
        connection = await self._load(connection_id)
        return connection.to_provider_config() if connection else None

    async def get_active_config(self) -> Optional[ProviderConfig]:
        """Provider configuration of the active connection, credential included."""
        connection = await self._load_active()
        return connection.to_provider_config() if connection else None

    def validate_create(
        self, data: Union[CreateConnectionRequest, Mapping[str, Any]]
    ) -> CreateConnectionRequest:
        """Coerce and validate a create payload without persisting it."""
        request = coerce_request(CreateConnectionRequest, data)
        validate_connection_data(request.model_dump(), available_provider_types())
        return request

    def validate_update(
        self, patch: Union[UpdateConnectionRequest, Mapping[str, Any]]
    ) -> UpdateConnectionRequest:
        """Coerce and validate a partial patch without persisting it."""
        request = coerce_request(UpdateConnectionRequest, patch)
        changes = request.changes()
        validate_connection_data(changes, available_provider_types())

        for field in ("name", "type", "base_url", "is_active"):
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null", field)
        return request

    async def preview_update(
        self,
        connection_id: int,
        patch: Union[UpdateConnectionRequest, Mapping[str, Any]],
    ) -> Optional[Connection]:
        """The stored connection as it would read after ``patch``, or None for an unknown id.

        Only the patched row is shown; activating it would also deactivate
        whichever connection is active now.
        """
        changes = self.validate_update(patch).changes()
        connection = await self._load(connection_id)
        if connection is None:
            return None

        if "metadata" in changes:
            changes["metadata"] = changes["metadata"] or {}
        return connection.model_copy(update=changes)

    async def create(
        self, data: Union[CreateConnectionRequest, Mapping[str, Any]]
    ) -> ConnectionResponse:
        """Validate and persist a new connection."""
        request = self.validate_create(data)

        now = utc_timestamp()
        try:
            async with self.database.transaction() as connection:
                if request.is_active:
                    await connection.execute(
                        "UPDATE connection_configs SET is_active = 0, updated_at = ? WHERE is_active = 1",
                        (now,),
                    )
                cursor = await connection.execute(
                    "INSERT INTO connection_configs "
                    "(name, type, base_url, api_key, default_model, metadata, is_active, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) RETURNING id",
                    (
                        request.name,
                        request.type,
                        request.base_url,
                        request.api_key,
                        request.default_model,
                        json.dumps(request.metadata),
                        int(request.is_active),
                        now,
                        now,
                    ),
                )
                row = await cursor.fetchone()
                await cursor.close()

        except VectorHubError:
            raise
        except Exception as e:
            self.logger.error("Failed to create connection", name=request.name, error=str(e))
            raise StorageError(f"Failed to create connection: {e}", query="create", cause=e)

        self.logger.info(
            "Connection created",
            connection_id=row["id"],
            name=request.name,
            type=request.type,
            is_active=request.is_active,
        )
        return await self.get(row["id"])

    async def update(
        self,
        connection_id: int,
        patch: Union[UpdateConnectionRequest, Mapping[str, Any]],
    ) -> Optional[ConnectionResponse]:
        """Apply a partial patch. Returns None for an unknown id."""
        changes: Dict[str, Any] = self.validate_update(patch).changes()

        now = utc_timestamp()
        try:
            async with self.database.transaction() as connection:
                cursor = await connection.execute(
                    "SELECT id FROM connection_configs WHERE id = ?", (connection_id,)
                )
                exists = await cursor.fetchone()
                await cursor.close()
                if exists is None:
                    return None

                if changes.get("is_active"):
                    await connection.execute(
                        "UPDATE connection_configs SET is_active = 0, updated_at = ? "
                        "WHERE is_active = 1 AND id != ?",
                        (now, connection_id),
                    )

                assignments = []
                values: List[Any] = []
                for field, value in changes.items():
                    if field == "metadata":
                        value = json.dumps(value or {})
                    elif field == "is_active":
                        value = int(value)
                    assignments.append(f"{field} = ?")
                    values.append(value)
                assignments.append("updated_at = ?")
                values.extend([now, connection_id])

                await connection.execute(
                    f"UPDATE connection_configs SET {', '.join(assignments)} WHERE id = ?",
                    values,
                )

        except VectorHubError:
            raise
        except Exception as e:
            self.logger.error("Failed to update connection", connection_id=connection_id, error=str(e))
            raise StorageError(f"Failed to update connection: {e}", query="update", cause=e)

        self.logger.info(
            "Connection updated",
            connection_id=connection_id,
            fields=sorted(field for field in changes if field != "api_key"),
        )
        return await self.get(connection_id)

    async def delete(self, connection_id: int) -> bool:
        """Delete a connection. False for an unknown id."""
        try:
            async with self.database.transaction() as connection:
                cursor = await connection.execute(
                    "DELETE FROM connection_configs WHERE id = ?", (connection_id,)
                )
                deleted = cursor.rowcount > 0
                await cursor.close()

        except Exception as e:
            self.logger.error("Failed to delete connection", connection_id=connection_id, error=str(e))
            raise StorageError(f"Failed to delete connection: {e}", query="delete", cause=e)

        if deleted:
            self.logger.info("Connection deleted", connection_id=connection_id)
        return deleted

    async def set_active(self, connection_id: int) -> ConnectionResponse:
        """Make one connection the only active one.

        Raises:
            ConnectionNotFoundError: no connection has this id.
        """
        now = utc_timestamp()
        try:
            async with self.database.transaction() as connection:
                cursor = await connection.execute(
                    "SELECT id FROM connection_configs WHERE id = ?", (connection_id,)
                )
                exists = await cursor.fetchone()
                await cursor.close()
                if exists is None:
                    raise ConnectionNotFoundError(connection_id)

                await connection.execute(
                    "UPDATE connection_configs SET is_active = 0, updated_at = ? "
                    "WHERE is_active = 1 AND id != ?",
                    (now, connection_id),
                )
                await connection.execute(
                    "UPDATE connection_configs SET is_active = 1, updated_at = ? WHERE id = ?",
                    (now, connection_id),
                )

        except VectorHubError:
            raise
        except Exception as e:
            self.logger.error("Failed to activate connection", connection_id=connection_id, error=str(e))
            raise StorageError(f"Failed to activate connection: {e}", query="set_active", cause=e)

        self.logger.info("Connection activated", connection_id=connection_id)
        return await self.get(connection_id)

    async def _resolve_test_config(self, request: ConnectionTestRequest) -> ProviderConfig:
        if request.id is not None:
            config = await self.get_config(request.id)
            if config is None:
                raise ConnectionNotFoundError(request.id)
            return config

        if not request.type or not request.base_url:
            raise ValidationError(
                "Either an existing connection id or type and base_url are required"
            )

        validate_provider_type(request.type, available_provider_types())
        validate_url(request.base_url)
        return ProviderConfig(type=request.type, base_url=request.base_url, api_key=request.api_key)

    async def test_connection(
        self, request: Union[ConnectionTestRequest, Mapping[str, Any]]
    ) -> ConnectionTestResponse:
        """Check a provider by listing its models. Never raises, never persists."""
        try:
            config = await self._resolve_test_config(coerce_request(ConnectionTestRequest, request))
            provider = self.provider_factory(config, self.settings)
            try:
                models = await provider.list_models()
            finally:
                await provider.close()

        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            self.logger.warning("Connection test failed", error=message)
            return ConnectionTestResponse(success=False, message=f"Connection failed: {message}")

        names = [model.name for model in models]
        self.logger.info("Connection test succeeded", provider=config.type, models=len(names))
        return ConnectionTestResponse(
            success=True,
            message=f"Connection successful, {len(names)} models available",
            models=names,
        )
