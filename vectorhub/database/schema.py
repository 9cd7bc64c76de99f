"""SQLite schema for VectorHub."""

import aiosqlite

from ..config.logging import storage_logger

CREATE_EMBEDDINGS_TABLE = """
CREATE TABLE IF NOT EXISTS embeddings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uri TEXT NOT NULL,
    text TEXT NOT NULL,
    model_name TEXT NOT NULL,
    embedding BLOB NOT NULL,
    dimensions INTEGER NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(uri, model_name)
)
"""

CREATE_CONNECTIONS_TABLE = """
CREATE TABLE IF NOT EXISTS connection_configs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    base_url TEXT NOT NULL,
    api_key TEXT,
    default_model TEXT,
    metadata TEXT,
    is_active INTEGER NOT NULL DEFAULT 0,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
)
"""

CREATE_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_embeddings_model_name ON embeddings(model_name);
CREATE INDEX IF NOT EXISTS idx_embeddings_uri ON embeddings(uri);
CREATE INDEX IF NOT EXISTS idx_embeddings_created_at ON embeddings(created_at);
CREATE UNIQUE INDEX IF NOT EXISTS idx_connection_configs_single_active
    ON connection_configs(is_active) WHERE is_active = 1;
"""


async def create_schema(connection: aiosqlite.Connection) -> None:
    """Create tables and indexes if they do not exist."""
    await connection.execute(CREATE_EMBEDDINGS_TABLE)
    await connection.execute(CREATE_CONNECTIONS_TABLE)
    await connection.executescript(CREATE_INDEXES)
    storage_logger.debug("Database schema ensured")
