"""SQLite database lifecycle and transaction management."""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, List, Optional, Union

import aiosqlite

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import StorageError
from .schema import create_schema

MEMORY_DATABASE = ":memory:"


class Database(LoggerMixin):
    """Single shared aiosqlite connection with serialized access.

    The connection runs in autocommit mode; every write goes through
    :meth:`transaction`, which holds the lock and wraps the work in
    ``BEGIN IMMEDIATE`` ... ``COMMIT``. Reads take the same lock, so they
    only ever see committed state. Do not call :meth:`fetch_one` or
    :meth:`fetch_all` inside a transaction block; use the yielded
    connection there.
    """

    def __init__(self, settings: Settings, db_path: Optional[Union[str, Path]] = None):
        self.settings = settings
        self.db_path = str(db_path if db_path is not None else settings.SQLITE_DATABASE_PATH)
        self._connection: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._connection is not None

    async def initialize(self) -> None:
        """Open the connection and ensure the schema exists."""
        if self._connection is not None:
            return

        try:
            if self.db_path != MEMORY_DATABASE:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            self._connection = await aiosqlite.connect(self.db_path, isolation_level=None)
            self._connection.row_factory = aiosqlite.Row
            if self.db_path != MEMORY_DATABASE:
                await self._connection.execute("PRAGMA journal_mode=WAL")
            await create_schema(self._connection)

            self.logger.info("Database initialized", db_path=self.db_path)

        except Exception as e:
            self.logger.error("Failed to initialize database", db_path=self.db_path, error=str(e))
            if self._connection is not None:
                await self._connection.close()
                self._connection = None
            raise StorageError(f"Failed to initialize database: {e}", cause=e)

    async def close(self) -> None:
        """Close the connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            self.logger.info("Database closed", db_path=self.db_path)

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StorageError("Database not initialized")
        return self._connection

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Run a block of writes atomically under the lock."""
        async with self._lock:
            connection = self.connection
            await connection.execute("BEGIN IMMEDIATE")
            try:
                yield connection
            except BaseException:
                if connection.in_transaction:
                    await connection.execute("ROLLBACK")
                raise
            else:
                await connection.execute("COMMIT")

    async def fetch_one(self, sql: str, params: Iterable[Any] = ()) -> Optional[aiosqlite.Row]:
        async with self._lock:
            async with self.connection.execute(sql, tuple(params)) as cursor:
                return await cursor.fetchone()

    async def fetch_all(self, sql: str, params: Iterable[Any] = ()) -> List[aiosqlite.Row]:
        async with self._lock:
            async with self.connection.execute(sql, tuple(params)) as cursor:
                return list(await cursor.fetchall())

    async def __aenter__(self) -> "Database":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
