"""Application services composing providers and storage."""

from .batch import BatchOrchestrator
from .embedding import EmbeddingService

__all__ = ["BatchOrchestrator", "EmbeddingService"]
