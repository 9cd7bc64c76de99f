"""Configuration settings for VectorHub."""

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.provider import ProviderConfig, ProviderType


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Runtime Configuration
    DEBUG: bool = Field(default=False, description="Debug mode")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_DIR: Optional[Path] = Field(
        default=None, description="Directory for the log file (console only when unset)"
    )

    # Database Configuration
    SQLITE_DATABASE_PATH: Path = Field(
        default=Path("./data/vectorhub.db"), description="SQLite database path"
    )

    # Provider Configuration
    DEFAULT_PROVIDER: str = Field(
        default=ProviderType.OLLAMA.value,
        description="Provider type used when no connection is active",
    )
    OLLAMA_BASE_URL: str = Field(
        default="http://localhost:11434", description="Ollama API base URL"
    )
    OLLAMA_DEFAULT_MODEL: str = Field(
        default="nomic-embed-text", description="Default Ollama embedding model"
    )
    OPENAI_COMPATIBLE_BASE_URL: Optional[str] = Field(
        default=None, description="OpenAI-compatible API base URL (e.g., http://localhost:1234)"
    )
    OPENAI_COMPATIBLE_API_KEY: Optional[str] = Field(
        default=None, description="OpenAI-compatible API key"
    )
    OPENAI_COMPATIBLE_DEFAULT_MODEL: Optional[str] = Field(
        default=None, description="Default OpenAI-compatible embedding model"
    )
    PROVIDER_REQUEST_TIMEOUT_SECONDS: float = Field(
        default=600.0, gt=0, description="Timeout for embedding requests in seconds"
    )
    PROVIDER_LIST_TIMEOUT_SECONDS: float = Field(
        default=5.0, gt=0, description="Timeout for model listing requests in seconds"
    )

    # Batch Configuration
    BATCH_CONCURRENCY: int = Field(
        default=4, ge=1, description="Maximum batch items processed concurrently"
    )

    # Query Configuration
    DEFAULT_PAGE_SIZE: int = Field(
        default=10, ge=1, le=100, description="Default page size for listing embeddings"
    )
    DEFAULT_SEARCH_LIMIT: int = Field(
        default=10, ge=1, description="Default number of similarity search results"
    )

    def create_directories(self) -> None:
        """Create necessary directories."""
        self.SQLITE_DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)
        if self.LOG_DIR:
            self.LOG_DIR.mkdir(parents=True, exist_ok=True)

    def default_provider_config(self) -> ProviderConfig:
        """Build the provider configuration used when no connection is active."""
        if self.DEFAULT_PROVIDER == ProviderType.OPENAI_COMPATIBLE.value:
            return ProviderConfig(
                type=ProviderType.OPENAI_COMPATIBLE.value,
                base_url=self.OPENAI_COMPATIBLE_BASE_URL,
                api_key=self.OPENAI_COMPATIBLE_API_KEY,
                default_model=self.OPENAI_COMPATIBLE_DEFAULT_MODEL,
            )

        return ProviderConfig(
            type=self.DEFAULT_PROVIDER,
            base_url=self.OLLAMA_BASE_URL,
            default_model=self.OLLAMA_DEFAULT_MODEL,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary, without credentials."""
        return self.model_dump(exclude={"OPENAI_COMPATIBLE_API_KEY"})

    def __repr__(self) -> str:
        """String representation of settings."""
        return (
            f"Settings(provider={self.DEFAULT_PROVIDER}, "
            f"database={self.SQLITE_DATABASE_PATH}, debug={self.DEBUG})"
        )
