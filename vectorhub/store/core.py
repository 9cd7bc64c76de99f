"""Embedding store with lifecycle management and coordination."""

from typing import List, Optional, Sequence

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import StorageError
from ..database import Database
from ..models.embedding import (
    EmbeddingListQuery,
    EmbeddingListResult,
    EmbeddingRecord,
    EmbeddingStats,
    SaveResult,
    SimilarEmbedding,
    SimilaritySearchQuery,
)
from .records import RecordOperations
from .search import SearchOperations
from .stats import StatsOperations


class EmbeddingStore(LoggerMixin):
    """Persistence and similarity search over (uri, model_name, vector) records."""

    def __init__(self, database: Database, settings: Settings):
        self.database = database
        self.settings = settings
        self._initialized = False

        # Delegate operation handlers
        self._records: Optional[RecordOperations] = None
        self._search: Optional[SearchOperations] = None
        self._stats: Optional[StatsOperations] = None

    async def initialize(self) -> None:
        """Initialize the embedding store."""
        try:
            await self.database.initialize()

            # Initialize operation handlers
            self._records = RecordOperations(self.database, self.settings, self.logger)
            self._search = SearchOperations(self.database, self.settings, self.logger)
            self._stats = StatsOperations(self.database, self.settings, self.logger)

            self._initialized = True
            self.logger.info("Embedding store initialized", db_path=self.database.db_path)

        except StorageError:
            raise
        except Exception as e:
            self.logger.error("Failed to initialize embedding store", error=str(e))
            raise StorageError(f"Embedding store initialization failed: {e}", cause=e)

    async def close(self) -> None:
        """Detach the operation handlers. The shared database is closed by its owner."""
        self._records = None
        self._search = None
        self._stats = None
        self._initialized = False
        self.logger.info("Embedding store closed")

    def _ensure_initialized(self) -> None:
        """Ensure the store is initialized."""
        if not self._initialized or not self._records or not self._search or not self._stats:
            raise StorageError("Embedding store not initialized")

    # Record Operations - delegated to RecordOperations
    async def save(self, uri: str, text: str, model_name: str, vector: Sequence[float]) -> SaveResult:
        """Insert or update the embedding keyed by (uri, model_name)."""
        self._ensure_initialized()
        return await self._records.save(uri, text, model_name, vector)

    async def find_by_uri(self, uri: str, model_name: str) -> Optional[EmbeddingRecord]:
        """Get the embedding stored for (uri, model_name)."""
        self._ensure_initialized()
        return await self._records.find_by_uri(uri, model_name)

    async def find_by_id(self, embedding_id: int) -> Optional[EmbeddingRecord]:
        """Get an embedding by id."""
        self._ensure_initialized()
        return await self._records.find_by_id(embedding_id)

    async def find_all(self, query: Optional[EmbeddingListQuery] = None) -> EmbeddingListResult:
        """List embeddings, filtered and paginated."""
        self._ensure_initialized()
        return await self._records.find_all(query)

    async def update_by_id(self, embedding_id: int, text: str, vector: Sequence[float]) -> bool:
        """Replace text and vector of an existing embedding."""
        self._ensure_initialized()
        return await self._records.update_by_id(embedding_id, text, vector)

    async def delete_by_id(self, embedding_id: int) -> bool:
        """Delete an embedding by id."""
        self._ensure_initialized()
        return await self._records.delete_by_id(embedding_id)

    async def delete_all(self, model_name: Optional[str] = None) -> int:
        """Delete all embeddings, optionally only those of one model."""
        self._ensure_initialized()
        return await self._records.delete_all(model_name)

    # Search Operations - delegated to SearchOperations
    async def search_similar(self, query: SimilaritySearchQuery) -> List[SimilarEmbedding]:
        """Rank stored embeddings by similarity to a query vector."""
        self._ensure_initialized()
        return await self._search.search_similar(query)

    # Statistics Operations - delegated to StatsOperations
    async def get_stats(self) -> EmbeddingStats:
        """Get statistics about stored embeddings."""
        self._ensure_initialized()
        return await self._stats.get_stats()
