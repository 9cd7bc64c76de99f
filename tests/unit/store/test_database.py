"""Tests for the shared SQLite database."""

import asyncio
import sqlite3

import pytest

from vectorhub.core.exceptions import StorageError
from vectorhub.database import MEMORY_DATABASE, Database


class TestDatabase:
    async def test_initialize_creates_schema(self, database):
        rows = await database.fetch_all(
            "SELECT name FROM sqlite_master WHERE type IN ('table', 'index') ORDER BY name"
        )
        names = {row["name"] for row in rows}

        assert {"embeddings", "connection_configs", "idx_connection_configs_single_active"} <= names

    async def test_initialize_is_idempotent(self, database):
        connection = database.connection

        await database.initialize()

        assert database.connection is connection

    async def test_creates_parent_directory(self, temp_dir, test_settings):
        db = Database(test_settings, temp_dir / "nested" / "dir" / "vectors.db")
        await db.initialize()
        try:
            assert (temp_dir / "nested" / "dir" / "vectors.db").exists()
        finally:
            await db.close()

    async def test_memory_database(self, test_settings):
        async with Database(test_settings, MEMORY_DATABASE) as db:
            row = await db.fetch_one("SELECT COUNT(*) AS total FROM embeddings")
            assert row["total"] == 0

    async def test_connection_before_initialize(self, test_settings):
        db = Database(test_settings)

        assert not db.is_initialized
        with pytest.raises(StorageError):
            db.connection

    async def test_transaction_commits(self, database):
        async with database.transaction() as connection:
            await connection.execute(
                "INSERT INTO connection_configs (name, type, base_url) VALUES ('a', 'fake', 'http://a')"
            )

        row = await database.fetch_one("SELECT COUNT(*) AS total FROM connection_configs")
        assert row["total"] == 1

    async def test_transaction_rolls_back_on_error(self, database):
        with pytest.raises(RuntimeError):
            async with database.transaction() as connection:
                await connection.execute(
                    "INSERT INTO connection_configs (name, type, base_url) VALUES ('a', 'fake', 'http://a')"
                )
                raise RuntimeError("abort")

        row = await database.fetch_one("SELECT COUNT(*) AS total FROM connection_configs")
        assert row["total"] == 0
        assert not database.connection.in_transaction

    async def test_single_active_index(self, database):
        async with database.transaction() as connection:
            await connection.execute(
                "INSERT INTO connection_configs (name, type, base_url, is_active) "
                "VALUES ('a', 'fake', 'http://a', 1), ('b', 'fake', 'http://b', 0)"
            )

        with pytest.raises(sqlite3.IntegrityError):
            async with database.transaction() as connection:
                await connection.execute("UPDATE connection_configs SET is_active = 1 WHERE name = 'b'")

    async def test_reopen_keeps_data(self, test_settings):
        async with Database(test_settings) as db:
            async with db.transaction() as connection:
                await connection.execute(
                    "INSERT INTO connection_configs (name, type, base_url) VALUES ('a', 'fake', 'http://a')"
                )

        async with Database(test_settings) as db:
            row = await db.fetch_one("SELECT name FROM connection_configs")
            assert row["name"] == "a"

    async def test_reads_wait_for_open_transaction(self, database):
        written = asyncio.Event()

        async def write_then_abort():
            with pytest.raises(RuntimeError):
                async with database.transaction() as connection:
                    await connection.execute(
                        "INSERT INTO connection_configs (name, type, base_url) VALUES ('a', 'fake', 'http://a')"
                    )
                    written.set()
                    await asyncio.sleep(0.05)
                    raise RuntimeError("abort")

        async def read_count():
            await written.wait()
            row = await database.fetch_one("SELECT COUNT(*) AS total FROM connection_configs")
            return row["total"]

        _, total = await asyncio.gather(write_then_abort(), read_count())

        assert total == 0
