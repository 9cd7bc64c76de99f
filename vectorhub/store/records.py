"""Embedding CRUD operations handler."""

import math
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from ..config.settings import Settings
from ..core.exceptions import StorageError, ValidationError
from ..database import Database
from ..models.embedding import (
    MAX_PAGE_SIZE,
    EmbeddingListQuery,
    EmbeddingListResult,
    EmbeddingRecord,
    SaveResult,
    UriMatch,
)
from ..utils.date_utils import parse_timestamp, utc_timestamp
from ..utils.validation import validate_vector
from .similarity import decode_vector, decode_vector_list, encode_vector

UPSERT_SQL = """
INSERT INTO embeddings (uri, text, model_name, embedding, dimensions, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(uri, model_name) DO UPDATE SET
    text = excluded.text,
    embedding = excluded.embedding,
    dimensions = excluded.dimensions,
    updated_at = excluded.updated_at
RETURNING id
"""

SELECT_COLUMNS = "id, uri, text, model_name, embedding, dimensions, created_at, updated_at"


def prepare_vector(vector: Sequence[Any]) -> Tuple[bytes, int]:
    """Validate a vector and encode it for storage.

    Raises:
        StorageError: the vector is empty, non-numeric, or not representable
            as finite float32 values.
    """
    try:
        values = validate_vector(vector)
    except ValidationError as e:
        raise StorageError(f"Invalid embedding vector: {e.message}")

    blob = encode_vector(values)
    if not np.isfinite(decode_vector(blob)).all():
        raise StorageError("Invalid embedding vector: component out of float32 range")

    return blob, len(values)


def row_to_record(row) -> EmbeddingRecord:
    """Convert a database row to an EmbeddingRecord."""
    return EmbeddingRecord(
        id=row["id"],
        uri=row["uri"],
        text=row["text"],
        model_name=row["model_name"],
        embedding=decode_vector_list(row["embedding"]),
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


class RecordOperations:
    """Handles save, lookup, listing and deletion of embedding rows."""

    def __init__(self, database: Database, settings: Settings, logger):
        self.database = database
        self.settings = settings
        self.logger = logger

    async def _check_dimensions(
        self, connection, model_name: str, dimensions: int, exclude_sql: str, exclude_value: Any
    ) -> None:
        """Reject a vector whose length differs from other rows of the same model."""
        cursor = await connection.execute(
            f"SELECT dimensions FROM embeddings WHERE model_name = ? AND {exclude_sql} LIMIT 1",
            (model_name, exclude_value),
        )
        row = await cursor.fetchone()
        await cursor.close()
        if row is not None and row["dimensions"] != dimensions:
            raise StorageError(
                f"Embedding dimension mismatch for model {model_name}: "
                f"expected {row['dimensions']}, got {dimensions}"
            )

    async def save(self, uri: str, text: str, model_name: str, vector: Sequence[float]) -> SaveResult:
        """Insert or update the embedding keyed by (uri, model_name)."""
        blob, dimensions = prepare_vector(vector)
        now = utc_timestamp()

        try:
            async with self.database.transaction() as connection:
                await self._check_dimensions(connection, model_name, dimensions, "uri != ?", uri)
                cursor = await connection.execute(
                    UPSERT_SQL, (uri, text, model_name, blob, dimensions, now, now)
                )
                row = await cursor.fetchone()
                await cursor.close()

            self.logger.debug(
                "Embedding saved", embedding_id=row["id"], uri=uri, model_name=model_name
            )
            return SaveResult(id=row["id"])

        except StorageError:
            raise
        except Exception as e:
            self.logger.error("Failed to save embedding", uri=uri, model_name=model_name, error=str(e))
            raise StorageError(f"Failed to save embedding: {e}", query="save", cause=e)

    async def find_by_uri(self, uri: str, model_name: str) -> Optional[EmbeddingRecord]:
        """Get the embedding for (uri, model_name)."""
        try:
            row = await self.database.fetch_one(
                f"SELECT {SELECT_COLUMNS} FROM embeddings WHERE uri = ? AND model_name = ?",
                (uri, model_name),
            )
            return row_to_record(row) if row else None

        except Exception as e:
            self.logger.error("Failed to find embedding", uri=uri, model_name=model_name, error=str(e))
            raise StorageError(f"Failed to find embedding: {e}", query="find_by_uri", cause=e)

    async def find_by_id(self, embedding_id: int) -> Optional[EmbeddingRecord]:
        """Get an embedding by id."""
        try:
            row = await self.database.fetch_one(
                f"SELECT {SELECT_COLUMNS} FROM embeddings WHERE id = ?", (embedding_id,)
            )
            return row_to_record(row) if row else None

        except Exception as e:
            self.logger.error("Failed to find embedding", embedding_id=embedding_id, error=str(e))
            raise StorageError(f"Failed to find embedding: {e}", query="find_by_id", cause=e)

    def _resolve_page(self, query: EmbeddingListQuery) -> Tuple[int, int]:
        limit = query.limit if query.limit is not None else self.settings.DEFAULT_PAGE_SIZE
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        page = max(1, query.page)
        return page, limit

    async def find_all(self, query: Optional[EmbeddingListQuery] = None) -> EmbeddingListResult:
        """List embeddings with optional uri and model filters, paginated."""
        query = query or EmbeddingListQuery()
        page, limit = self._resolve_page(query)

        conditions: List[str] = []
        values: List[Any] = []

        if query.uri:
            match = UriMatch(query.uri_match)
            if match == UriMatch.EXACT:
                conditions.append("uri = ?")
                values.append(query.uri)
            elif match == UriMatch.PREFIX:
                conditions.append("substr(uri, 1, length(?)) = ?")
                values.extend([query.uri, query.uri])
            else:
                conditions.append("instr(uri, ?) > 0")
                values.append(query.uri)

        if query.model_name:
            conditions.append("model_name = ?")
            values.append(query.model_name)

        where_clause = " AND ".join(conditions) if conditions else "1=1"

        try:
            count_row = await self.database.fetch_one(
                f"SELECT COUNT(*) AS total FROM embeddings WHERE {where_clause}", values
            )
            total = count_row["total"]

            rows = await self.database.fetch_all(
                f"SELECT {SELECT_COLUMNS} FROM embeddings WHERE {where_clause} "
                "ORDER BY created_at ASC, id ASC LIMIT ? OFFSET ?",
                [*values, limit, (page - 1) * limit],
            )

        except Exception as e:
            self.logger.error("Failed to list embeddings", error=str(e))
            raise StorageError(f"Failed to list embeddings: {e}", query="find_all", cause=e)

        embeddings = [row_to_record(row) for row in rows]
        total_pages = math.ceil(total / limit) if total else 0

        return EmbeddingListResult(
            embeddings=embeddings,
            count=len(embeddings),
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    async def update_by_id(self, embedding_id: int, text: str, vector: Sequence[float]) -> bool:
        """Replace text and vector of an existing row. False when the id is unknown."""
        blob, dimensions = prepare_vector(vector)

        try:
            async with self.database.transaction() as connection:
                cursor = await connection.execute(
                    "SELECT model_name FROM embeddings WHERE id = ?", (embedding_id,)
                )
                row = await cursor.fetchone()
                await cursor.close()
                if row is None:
                    return False

                await self._check_dimensions(
                    connection, row["model_name"], dimensions, "id != ?", embedding_id
                )
                cursor = await connection.execute(
                    "UPDATE embeddings SET text = ?, embedding = ?, dimensions = ?, updated_at = ? "
                    "WHERE id = ?",
                    (text, blob, dimensions, utc_timestamp(), embedding_id),
                )
                updated = cursor.rowcount > 0
                await cursor.close()

            self.logger.debug("Embedding updated", embedding_id=embedding_id, updated=updated)
            return updated

        except StorageError:
            raise
        except Exception as e:
            self.logger.error("Failed to update embedding", embedding_id=embedding_id, error=str(e))
            raise StorageError(f"Failed to update embedding: {e}", query="update_by_id", cause=e)

    async def delete_by_id(self, embedding_id: int) -> bool:
        """Delete one row. False when the id is unknown."""
        try:
            async with self.database.transaction() as connection:
                cursor = await connection.execute(
                    "DELETE FROM embeddings WHERE id = ?", (embedding_id,)
                )
                deleted = cursor.rowcount > 0
                await cursor.close()

            self.logger.debug("Embedding delete", embedding_id=embedding_id, deleted=deleted)
            return deleted

        except Exception as e:
            self.logger.error("Failed to delete embedding", embedding_id=embedding_id, error=str(e))
            raise StorageError(f"Failed to delete embedding: {e}", query="delete_by_id", cause=e)

    async def delete_all(self, model_name: Optional[str] = None) -> int:
        """Delete every row, or every row of one model. Returns the number removed."""
        try:
            async with self.database.transaction() as connection:
                if model_name:
                    cursor = await connection.execute(
                        "DELETE FROM embeddings WHERE model_name = ?", (model_name,)
                    )
                else:
                    cursor = await connection.execute("DELETE FROM embeddings")
                deleted = cursor.rowcount
                await cursor.close()

            self.logger.info("Embeddings deleted", model_name=model_name, count=deleted)
            return deleted

        except Exception as e:
            self.logger.error("Failed to delete embeddings", model_name=model_name, error=str(e))
            raise StorageError(f"Failed to delete embeddings: {e}", query="delete_all", cause=e)
