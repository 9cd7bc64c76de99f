"""Similarity search operations handler."""

import asyncio
from functools import partial
from typing import List

import numpy as np

from ..config.settings import Settings
from ..core.exceptions import StorageError, ValidationError
from ..database import Database
from ..models.embedding import SimilarEmbedding, SimilaritySearchQuery
from ..utils.date_utils import parse_timestamp
from ..utils.validation import validate_similarity_threshold, validate_vector
from .similarity import compute_similarities, decode_vector


class SearchOperations:
    """Exact nearest-neighbour search over the stored vectors of one model."""

    def __init__(self, database: Database, settings: Settings, logger):
        self.database = database
        self.settings = settings
        self.logger = logger

    async def search_similar(self, query: SimilaritySearchQuery) -> List[SimilarEmbedding]:
        """Rank stored embeddings of ``query.model_name`` by similarity.

        Results are filtered to ``similarity >= threshold`` (no filtering when
        the threshold is unset or 0), sorted by similarity descending with
        ties broken by lowest id, and truncated to ``query.limit``.
        """
        query_vector = validate_vector(query.query_embedding, "query_embedding")
        validate_similarity_threshold(query.threshold)

        try:
            rows = await self.database.fetch_all(
                "SELECT id, uri, text, model_name, embedding, dimensions, created_at, updated_at "
                "FROM embeddings WHERE model_name = ?",
                (query.model_name,),
            )
        except Exception as e:
            self.logger.error("Failed to load search candidates", model_name=query.model_name, error=str(e))
            raise StorageError(f"Failed to search embeddings: {e}", query="search_similar", cause=e)

        if not rows:
            return []

        mismatched = {row["dimensions"] for row in rows if row["dimensions"] != len(query_vector)}
        if mismatched:
            raise ValidationError(
                f"Query embedding has {len(query_vector)} dimensions but model "
                f"{query.model_name} stores {sorted(mismatched)[0]}",
                "query_embedding",
            )

        matrix = np.vstack([decode_vector(row["embedding"]) for row in rows])

        loop = asyncio.get_running_loop()
        scores = await loop.run_in_executor(
            None, partial(compute_similarities, query.metric, query_vector, matrix)
        )

        threshold = query.threshold
        hits = []
        for row, score in zip(rows, scores.tolist()):
            if threshold and score < threshold:
                continue
            hits.append((score, row))

        hits.sort(key=lambda hit: (-hit[0], hit[1]["id"]))

        results = [
            SimilarEmbedding(
                id=row["id"],
                uri=row["uri"],
                text=row["text"],
                model_name=row["model_name"],
                similarity=score,
                created_at=parse_timestamp(row["created_at"]),
                updated_at=parse_timestamp(row["updated_at"]),
            )
            for score, row in hits[: query.limit]
        ]

        self.logger.info(
            "Similarity search completed",
            model_name=query.model_name,
            metric=query.metric.value,
            candidates=len(rows),
            results=len(results),
        )
        return results
