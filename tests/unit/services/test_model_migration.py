"""Tests for model compatibility checks and embedding migration."""

import pytest
import pytest_asyncio

from vectorhub.core.exceptions import ValidationError
from vectorhub.providers.manager import ProviderManager
from vectorhub.services import EmbeddingService
from tests.utils import FakeEmbeddingProvider


@pytest.fixture
def catalog_provider() -> FakeEmbeddingProvider:
    """Provider listing two models of the same vector length."""
    return FakeEmbeddingProvider(models=["old-model", "new-model"], failing_texts={"reject me"})


@pytest_asyncio.fixture
async def service(test_settings, embedding_store, catalog_provider):
    manager = ProviderManager(test_settings, provider=catalog_provider)
    yield EmbeddingService(manager, embedding_store, test_settings)
    await manager.close()


class TestModelCompatibility:
    async def test_same_dimensions(self, service):
        result = await service.check_model_compatibility("old-model", "new-model")

        assert result.compatible
        assert (result.source_dimensions, result.target_dimensions) == (3, 3)
        assert result.reason is None

    async def test_known_model_dimensions(self, service):
        result = await service.check_model_compatibility("old-model", "text-embedding-3-large")

        assert not result.compatible
        assert result.target_dimensions == 3072
        assert result.reason == "Different vector dimensions: 3 vs 3072"

    async def test_stored_rows_supply_dimensions(self, service, embedding_store):
        await embedding_store.save("doc-1", "text", "legacy-model", [1.0, 2.0])

        result = await service.check_model_compatibility("legacy-model", "new-model")

        assert not result.compatible
        assert result.source_dimensions == 2

    async def test_unknown_model(self, service):
        result = await service.check_model_compatibility("mystery-model", "new-model")

        assert not result.compatible
        assert result.source_dimensions is None
        assert result.reason == "Unknown vector dimensions for model mystery-model"


class TestMigrateEmbeddings:
    async def test_moves_rows_to_target_model(self, service, embedding_store, catalog_provider):
        for index in range(3):
            await service.create_embedding(f"doc-{index}", f"text {index}", "old-model")

        result = await service.migrate_embeddings("old-model", "new-model")

        assert (result.total, result.successful, result.failed) == (3, 3, 0)
        assert [item.uri for item in result.results] == ["doc-0", "doc-1", "doc-2"]
        assert all(item.model_name == "new-model" for item in result.results)
        assert (await embedding_store.get_stats()).counts_by_model == {"new-model": 3}
        assert ("text 0", "new-model") in catalog_provider.calls

    async def test_preserve_original(self, service, embedding_store):
        await service.create_embedding("doc-1", "text", "old-model")

        result = await service.migrate_embeddings("old-model", "new-model", preserve_original=True)

        assert result.preserved_original
        assert (await embedding_store.get_stats()).counts_by_model == {"new-model": 1, "old-model": 1}

    async def test_failed_rows_keep_their_source(self, service, embedding_store):
        await service.create_embedding("doc-ok", "fine", "old-model")
        await embedding_store.save("doc-bad", "reject me", "old-model", [1.0, 2.0, 3.0])

        result = await service.migrate_embeddings("old-model", "new-model")

        assert (result.total, result.successful, result.failed) == (2, 1, 1)
        failure = result.results[1]
        assert failure.uri == "doc-bad"
        assert "Model rejected input" in failure.error
        assert await embedding_store.find_by_uri("doc-bad", "old-model") is not None
        assert await embedding_store.find_by_uri("doc-ok", "old-model") is None

    async def test_walks_every_page(self, service, embedding_store):
        for index in range(105):
            await embedding_store.save(f"doc-{index}", f"text {index}", "old-model", [1.0, 2.0, 3.0])

        result = await service.migrate_embeddings("old-model", "new-model")

        assert result.successful == 105
        assert (await embedding_store.get_stats()).counts_by_model == {"new-model": 105}

    async def test_empty_source(self, service):
        result = await service.migrate_embeddings("old-model", "new-model")

        assert result.total == 0

    async def test_same_model_rejected(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.migrate_embeddings("old-model", "old-model")

        assert exc_info.value.field == "to_model"

    async def test_incompatible_models(self, service, embedding_store):
        await service.create_embedding("doc-1", "text", "old-model")

        with pytest.raises(ValidationError) as exc_info:
            await service.migrate_embeddings("old-model", "text-embedding-3-large")

        assert "Different vector dimensions" in exc_info.value.message
        assert (await embedding_store.get_stats()).counts_by_model == {"old-model": 1}

        result = await service.migrate_embeddings(
            "old-model", "text-embedding-3-large", require_compatible=False
        )

        assert result.successful == 1
        assert (await embedding_store.get_stats()).counts_by_model == {"text-embedding-3-large": 1}
