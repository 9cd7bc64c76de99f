"""Embedding domain models for VectorHub."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from .base import IdentifiedModel, VectorHubBaseModel

MAX_PAGE_SIZE = 100


class SimilarityMetric(str, Enum):
    """Distance functions available for similarity search."""

    COSINE = "cosine"
    EUCLIDEAN = "euclidean"
    DOT_PRODUCT = "dot_product"


class UriMatch(str, Enum):
    """How the uri filter of a listing query is applied."""

    EXACT = "exact"
    PREFIX = "prefix"
    CONTAINS = "contains"


class TaskType(str, Enum):
    """Intended use of an embedding, for models that take task prompts."""

    RETRIEVAL_QUERY = "retrieval_query"
    RETRIEVAL_DOCUMENT = "retrieval_document"
    QUESTION_ANSWERING = "question_answering"
    FACT_VERIFICATION = "fact_verification"
    CLASSIFICATION = "classification"
    CLUSTERING = "clustering"
    SEMANTIC_SIMILARITY = "semantic_similarity"
    CODE_RETRIEVAL = "code_retrieval"


class EmbeddingRecord(IdentifiedModel):
    """A stored embedding, unique per (uri, model_name)."""

    uri: str = Field(description="Caller-supplied identifier of the embedded content")
    text: str = Field(description="Embedded source text")
    model_name: str = Field(description="Model that produced the vector")
    embedding: List[float] = Field(description="Embedding vector")

    @property
    def dimensions(self) -> int:
        """Number of vector components."""
        return len(self.embedding)


class SaveResult(VectorHubBaseModel):
    """Identifier of a saved embedding row."""

    id: int = Field(ge=1, description="Row id, unchanged when an existing row was updated")


class EmbeddingListQuery(VectorHubBaseModel):
    """Filters and pagination for listing embeddings."""

    uri: Optional[str] = Field(default=None, description="Filter by uri")
    uri_match: UriMatch = Field(default=UriMatch.EXACT, description="How the uri filter matches")
    model_name: Optional[str] = Field(default=None, description="Filter by model name")
    page: int = Field(default=1, description="1-based page number")
    limit: Optional[int] = Field(default=None, description="Page size, clamped to 100")


class EmbeddingListResult(VectorHubBaseModel):
    """A page of stored embeddings."""

    embeddings: List[EmbeddingRecord] = Field(description="Embeddings on this page")
    count: int = Field(ge=0, description="Number of embeddings on this page")
    page: int = Field(ge=1, description="1-based page number")
    limit: int = Field(ge=1, le=MAX_PAGE_SIZE, description="Page size")
    total: int = Field(ge=0, description="Total matching embeddings")
    total_pages: int = Field(ge=0, description="Total number of pages")
    has_next: bool = Field(description="Whether a following page exists")
    has_prev: bool = Field(description="Whether a preceding page exists")


class SimilaritySearchQuery(VectorHubBaseModel):
    """Parameters of a nearest-neighbour search over stored vectors."""

    query_embedding: List[float] = Field(min_length=1, description="Query vector")
    model_name: str = Field(min_length=1, description="Only vectors of this model are compared")
    limit: int = Field(default=10, ge=1, description="Maximum results to return")
    threshold: Optional[float] = Field(
        default=None, description="Minimum similarity; unset or 0 disables filtering"
    )
    metric: SimilarityMetric = Field(default=SimilarityMetric.COSINE, description="Similarity metric")


class SimilarEmbedding(VectorHubBaseModel):
    """A single similarity search hit."""

    id: int = Field(description="Row id")
    uri: str = Field(description="Row uri")
    text: str = Field(description="Row text")
    model_name: str = Field(description="Row model")
    similarity: float = Field(description="Similarity score, higher is closer")
    created_at: Optional[datetime] = Field(default=None, description="Row creation time")
    updated_at: Optional[datetime] = Field(default=None, description="Row update time")


class ModelUsage(VectorHubBaseModel):
    """Per-model storage figures."""

    model_name: str = Field(description="Model name")
    count: int = Field(ge=0, description="Stored embeddings for this model")
    dimensions: int = Field(ge=0, description="Vector length used by this model")


class EmbeddingStats(VectorHubBaseModel):
    """Statistics about the embedding table."""

    total_embeddings: int = Field(ge=0, description="Total stored embeddings")
    models: List[ModelUsage] = Field(default_factory=list, description="Per-model figures")
    total_text_length: int = Field(ge=0, description="Sum of stored text lengths")

    @property
    def counts_by_model(self) -> Dict[str, int]:
        """Embedding counts keyed by model name."""
        return {usage.model_name: usage.count for usage in self.models}


class CreateEmbeddingResponse(VectorHubBaseModel):
    """Outcome of creating one embedding through a provider."""

    id: int = Field(description="Saved row id")
    uri: str = Field(description="Saved uri")
    model_name: str = Field(description="Model that produced the vector")
    message: str = Field(description="Human-readable outcome")


class SearchEmbeddingResponse(VectorHubBaseModel):
    """Outcome of a text similarity search."""

    results: List[SimilarEmbedding] = Field(description="Ranked hits")
    query: str = Field(description="Original query text")
    model_name: str = Field(description="Model used for the query vector")
    metric: SimilarityMetric = Field(description="Metric used for ranking")
    count: int = Field(ge=0, description="Number of hits")
    threshold: Optional[float] = Field(default=None, description="Threshold applied")


class ModelCompatibility(VectorHubBaseModel):
    """Whether embeddings of one model can stand in for another's."""

    source_model: str = Field(description="Model embeddings are migrated from")
    target_model: str = Field(description="Model embeddings are migrated to")
    compatible: bool = Field(description="Whether both models produce vectors of the same length")
    source_dimensions: Optional[int] = Field(default=None, description="Vector length of the source model")
    target_dimensions: Optional[int] = Field(default=None, description="Vector length of the target model")
    reason: Optional[str] = Field(default=None, description="Why the models are incompatible")
