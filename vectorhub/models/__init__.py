"""VectorHub domain models."""

from .base import (
    IdentifiedModel,
    OperationResult,
    TimestampedModel,
    VectorHubBaseModel,
    utc_now,
)
from .batch import BatchItem, BatchItemResult, BatchResult, MigrationResult
from .connection import (
    Connection,
    ConnectionResponse,
    ConnectionTestRequest,
    ConnectionTestResponse,
    CreateConnectionRequest,
    UpdateConnectionRequest,
)
from .embedding import (
    MAX_PAGE_SIZE,
    CreateEmbeddingResponse,
    EmbeddingListQuery,
    EmbeddingListResult,
    EmbeddingRecord,
    EmbeddingStats,
    ModelCompatibility,
    ModelUsage,
    SaveResult,
    SearchEmbeddingResponse,
    SimilarEmbedding,
    SimilarityMetric,
    SimilaritySearchQuery,
    TaskType,
    UriMatch,
)
from .provider import EmbeddingResult, ModelInfo, ProviderConfig, ProviderType

__all__ = [
    # Base models
    "VectorHubBaseModel",
    "TimestampedModel",
    "IdentifiedModel",
    "OperationResult",
    "utc_now",

    # Provider models
    "ProviderType",
    "ProviderConfig",
    "ModelInfo",
    "EmbeddingResult",

    # Embedding models
    "MAX_PAGE_SIZE",
    "SimilarityMetric",
    "UriMatch",
    "TaskType",
    "EmbeddingRecord",
    "SaveResult",
    "EmbeddingListQuery",
    "EmbeddingListResult",
    "SimilaritySearchQuery",
    "SimilarEmbedding",
    "ModelUsage",
    "EmbeddingStats",
    "ModelCompatibility",
    "CreateEmbeddingResponse",
    "SearchEmbeddingResponse",

    # Connection models
    "Connection",
    "ConnectionResponse",
    "CreateConnectionRequest",
    "UpdateConnectionRequest",
    "ConnectionTestRequest",
    "ConnectionTestResponse",

    # Batch models
    "BatchItem",
    "BatchItemResult",
    "BatchResult",
    "MigrationResult",
]
