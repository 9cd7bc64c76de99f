"""Statistics operations handler for the embedding store."""

from ..config.settings import Settings
from ..core.exceptions import StorageError
from ..database import Database
from ..models.embedding import EmbeddingStats, ModelUsage


class StatsOperations:
    """Handles statistics over the embedding table."""

    def __init__(self, database: Database, settings: Settings, logger):
        self.database = database
        self.settings = settings
        self.logger = logger

    async def get_stats(self) -> EmbeddingStats:
        """Get totals and per-model figures."""
        try:
            totals = await self.database.fetch_one(
                "SELECT COUNT(*) AS total, COALESCE(SUM(LENGTH(text)), 0) AS text_length "
                "FROM embeddings"
            )
            rows = await self.database.fetch_all(
                "SELECT model_name, COUNT(*) AS count, MAX(dimensions) AS dimensions "
                "FROM embeddings GROUP BY model_name ORDER BY model_name"
            )

            return EmbeddingStats(
                total_embeddings=totals["total"],
                total_text_length=totals["text_length"],
                models=[
                    ModelUsage(
                        model_name=row["model_name"],
                        count=row["count"],
                        dimensions=row["dimensions"],
                    )
                    for row in rows
                ],
            )

        except Exception as e:
            self.logger.error("Failed to get embedding stats", error=str(e))
            raise StorageError(f"Failed to get embedding stats: {e}", query="get_stats", cause=e)
