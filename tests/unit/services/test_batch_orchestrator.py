"""Tests for batch embedding orchestration."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from vectorhub.core.exceptions import StorageError
from vectorhub.models.batch import BatchItem, BatchResult
from vectorhub.models.embedding import CreateEmbeddingResponse
from vectorhub.providers.manager import ProviderManager
from vectorhub.services import BatchOrchestrator, EmbeddingService
from vectorhub.utils import gather_with_concurrency
from tests.utils import FAKE_MODEL, FakeEmbeddingProvider


class TestBatchOrchestrator:
    async def test_scenario_mixed_batch(self, batch_orchestrator, embedding_store):
        result = await batch_orchestrator.run(
            [
                {"uri": "a", "text": "apples"},
                {"uri": "", "text": "orphan"},
                {"uri": "c", "text": "fruit"},
            ]
        )

        assert isinstance(result, BatchResult)
        assert (result.total, result.successful, result.failed) == (3, 2, 1)
        assert [item.uri for item in result.results] == ["a", "", "c"]
        assert [item.success for item in result.results] == [True, False, True]

        failed = result.results[1]
        assert failed.id is None
        assert "URI" in failed.error

        ok = result.results[0]
        assert ok.model_name == FAKE_MODEL
        assert (await embedding_store.find_by_uri("a", FAKE_MODEL)).id == ok.id

    async def test_summary_serialized(self, batch_orchestrator):
        result = await batch_orchestrator.run([BatchItem(uri="a", text="apples")])

        data = result.model_dump()

        assert data["total"] == 1
        assert data["successful"] == 1
        assert data["failed"] == 0

    async def test_empty_batch(self, batch_orchestrator):
        result = await batch_orchestrator.run([])

        assert result.total == 0
        assert result.results == []

    async def test_provider_failures_isolated(self, batch_orchestrator):
        result = await batch_orchestrator.run(
            [
                {"uri": "a", "text": "apples"},
                {"uri": "b", "text": "reject me"},
                {"uri": "c", "text": "oranges"},
            ]
        )

        assert [item.success for item in result.results] == [True, False, True]
        assert "Model rejected input" in result.results[1].error

    async def test_malformed_items(self, batch_orchestrator):
        result = await batch_orchestrator.run(
            [
                {"uri": "a"},
                {"uri": "b", "text": "apples", "colour": "red"},
                {"uri": 5, "text": "apples"},
                {"uri": "d", "text": "apples"},
            ]
        )

        assert [item.success for item in result.results] == [False, False, False, True]
        assert result.results[0].uri == "a"
        assert "text" in result.results[0].error
        assert result.results[2].uri == ""

    async def test_batch_and_item_models(self, batch_orchestrator, fake_provider):
        await batch_orchestrator.run(
            [
                {"uri": "a", "text": "apples"},
                {"uri": "b", "text": "oranges", "model_name": "item-model"},
            ],
            model_name="batch-model",
        )

        assert sorted(fake_provider.calls) == [("apples", "batch-model"), ("oranges", "item-model")]

    async def test_duplicate_uris_keep_last_entry(self, batch_orchestrator, embedding_store):
        result = await batch_orchestrator.run(
            [
                {"uri": "dup", "text": "apples"},
                {"uri": "other", "text": "fruit"},
                {"uri": "dup", "text": "oranges"},
            ]
        )

        assert result.successful == 3
        assert result.results[0].id == result.results[2].id

        record = await embedding_store.find_by_uri("dup", FAKE_MODEL)
        assert record.text == "oranges"

    async def test_unexpected_errors_become_failures(self, test_settings):
        service = AsyncMock(spec=EmbeddingService)
        service.create_embedding.side_effect = [
            CreateEmbeddingResponse(id=1, uri="a", model_name="m", message="ok"),
            RuntimeError("socket vanished"),
            StorageError("disk full"),
        ]
        orchestrator = BatchOrchestrator(service, test_settings)

        result = await orchestrator.run(
            [{"uri": "a", "text": "x"}, {"uri": "b", "text": "y"}, {"uri": "c", "text": "z"}]
        )

        assert [item.error for item in result.results] == [None, "socket vanished", "disk full"]

    async def test_concurrency_bounded(self, embedding_store, test_settings):
        provider = FakeEmbeddingProvider(delay=0.02)
        in_flight = 0
        peak = 0
        original = provider.generate_embedding

        async def tracking(text, model_name=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            try:
                return await original(text, model_name)
            finally:
                in_flight -= 1

        provider.generate_embedding = tracking

        manager = ProviderManager(test_settings, provider=provider)
        service = EmbeddingService(manager, embedding_store, test_settings)
        orchestrator = BatchOrchestrator(service, test_settings)

        result = await orchestrator.run([{"uri": f"doc-{i}", "text": f"text {i}"} for i in range(8)])

        assert result.successful == 8
        assert peak == test_settings.BATCH_CONCURRENCY


@pytest.mark.parametrize("limit", [1, 3, 10])
async def test_gather_with_concurrency_preserves_order(limit):
    async def value(i):
        await asyncio.sleep(0.001 * (5 - i))
        return i

    assert await gather_with_concurrency([value(i) for i in range(5)], max_concurrency=limit) == [0, 1, 2, 3, 4]
