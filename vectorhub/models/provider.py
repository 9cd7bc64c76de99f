"""Provider domain models for VectorHub."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field

from .base import VectorHubBaseModel


class ProviderType(str, Enum):
    """Built-in embedding provider types."""

    OLLAMA = "ollama"
    OPENAI_COMPATIBLE = "openai-compatible"


class ProviderConfig(VectorHubBaseModel):
    """Configuration used to build a provider adapter."""

    type: str = Field(min_length=1, description="Provider type tag")
    base_url: Optional[str] = Field(default=None, description="Provider API base URL")
    api_key: Optional[str] = Field(default=None, repr=False, description="Provider API key")
    default_model: Optional[str] = Field(
        default=None, description="Model used when a request does not name one"
    )
    custom_headers: Dict[str, str] = Field(
        default_factory=dict, description="Extra HTTP headers sent with every request"
    )


class ModelInfo(VectorHubBaseModel):
    """Descriptive metadata about an embedding model."""

    model_config = ConfigDict(frozen=True, extra='forbid')

    name: str = Field(description="Model name as recognized by the provider, without version tag")
    provider: str = Field(description="Provider offering this model")
    full_name: Optional[str] = Field(
        default=None, description="Model name including version tag, for display"
    )
    dimensions: Optional[int] = Field(default=None, ge=1, description="Embedding vector length")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="Maximum input tokens")
    price_per_token: Optional[float] = Field(default=None, ge=0.0, description="Cost per token")


class EmbeddingResult(VectorHubBaseModel):
    """An embedding produced by a provider."""

    embedding: List[float] = Field(description="Generated embedding vector")
    model: str = Field(description="Model that generated the embedding")
    provider: str = Field(description="Provider that generated the embedding")
    dimensions: int = Field(ge=1, description="Number of vector components")
    tokens_used: Optional[int] = Field(
        default=None, ge=0, description="Tokens consumed, when the provider reports it"
    )
