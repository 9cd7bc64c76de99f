"""Tests for VectorHub domain models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from vectorhub.core.exceptions import (
    ConnectionNotFoundError,
    ProviderRateLimitError,
    StorageError,
)
from vectorhub.models import (
    BatchItemResult,
    BatchResult,
    Connection,
    EmbeddingRecord,
    ModelInfo,
    OperationResult,
    SimilaritySearchQuery,
    UpdateConnectionRequest,
)


class TestConnectionModels:
    @pytest.fixture
    def connection(self) -> Connection:
        return Connection(
            id=3,
            name="openai",
            type="openai-compatible",
            base_url="https://api.example.com/v1",
            api_key="sk-live-123",
            default_model="text-embedding-3-small",
            metadata={"custom_headers": {"X-Request-Source": "vectorhub"}, "owner": "search"},
            is_active=True,
        )

    def test_response_drops_api_key(self, connection):
        response = connection.to_response()

        assert "api_key" not in response.model_dump()
        assert response.metadata == connection.metadata
        assert response.is_active

    def test_repr_hides_api_key(self, connection):
        assert "sk-live-123" not in repr(connection)

    def test_provider_config(self, connection):
        config = connection.to_provider_config()

        assert config.api_key == "sk-live-123"
        assert config.custom_headers == {"X-Request-Source": "vectorhub"}
        assert config.default_model == "text-embedding-3-small"

    def test_update_changes_only_set_fields(self):
        assert UpdateConnectionRequest(name="renamed").changes() == {"name": "renamed"}
        assert UpdateConnectionRequest(api_key=None, default_model=None).changes() == {"default_model": None}
        assert UpdateConnectionRequest().changes() == {}


class TestEmbeddingModels:
    def test_record_dimensions(self):
        record = EmbeddingRecord(id=1, uri="doc", text="t", model_name="m", embedding=[0.1, 0.2])

        assert record.dimensions == 2

    def test_search_query_requires_vector_and_model(self):
        with pytest.raises(PydanticValidationError):
            SimilaritySearchQuery(query_embedding=[], model_name="m")
        with pytest.raises(PydanticValidationError):
            SimilaritySearchQuery(query_embedding=[1.0], model_name="")
        with pytest.raises(PydanticValidationError):
            SimilaritySearchQuery(query_embedding=[1.0], model_name="m", limit=0)

    def test_model_info_is_frozen(self):
        info = ModelInfo(name="nomic-embed-text", provider="ollama", dimensions=768)

        with pytest.raises(PydanticValidationError):
            info.dimensions = 1024


class TestBatchModels:
    def test_summary_counts(self):
        result = BatchResult(
            results=[
                BatchItemResult.ok(1, "a", "m"),
                BatchItemResult.failure("b", "boom"),
                BatchItemResult.ok(2, "c", "m"),
            ]
        )

        assert (result.total, result.successful, result.failed) == (3, 2, 1)
        assert result.results[1].error == "boom"
        assert result.results[1].id is None

    def test_operation_result(self):
        result = OperationResult[str](success=True, data="ollama")

        assert result.data == "ollama"
        assert result.error_code is None


class TestExceptions:
    def test_error_dict(self):
        error = StorageError("Failed to save embedding", query="save")

        assert error.to_dict() == {
            "error": "Failed to save embedding",
            "error_code": "STORAGE_ERROR",
            "details": {"query": "save"},
        }
        assert str(error) == "Failed to save embedding (code: STORAGE_ERROR)"

    def test_connection_not_found(self):
        error = ConnectionNotFoundError(5)

        assert error.details == {"connection_id": 5}
        assert error.error_code == "CONNECTION_NOT_FOUND"

    def test_rate_limit_details(self):
        error = ProviderRateLimitError("openai-compatible", "slow down", "m", retry_after=3.0)

        assert error.details == {"provider": "openai-compatible", "model_name": "m", "retry_after": 3.0}
