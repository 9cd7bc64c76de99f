"""Pytest configuration and shared fixtures for VectorHub tests."""

import tempfile
from pathlib import Path
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio

from vectorhub.config.settings import Settings
from vectorhub.connections import ConnectionStore
from vectorhub.database import Database
from vectorhub.providers.factory import register_provider, unregister_provider
from vectorhub.providers.manager import ProviderManager
from vectorhub.services import BatchOrchestrator, EmbeddingService
from vectorhub.store import EmbeddingStore
from tests.utils import FAKE_PROVIDER_TYPE, FakeEmbeddingProvider, FakeProviderApi


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def test_settings(temp_dir: Path) -> Settings:
    """Create test settings with a temporary database."""
    return Settings(
        DEBUG=True,
        LOG_DIR=None,
        SQLITE_DATABASE_PATH=temp_dir / "test.db",
        DEFAULT_PROVIDER=FAKE_PROVIDER_TYPE,
        OLLAMA_BASE_URL="http://default.fake.test",
        BATCH_CONCURRENCY=2,
        DEFAULT_PAGE_SIZE=10,
        DEFAULT_SEARCH_LIMIT=10,
        PROVIDER_LIST_TIMEOUT_SECONDS=2.0,
        PROVIDER_REQUEST_TIMEOUT_SECONDS=2.0,
    )


@pytest.fixture(autouse=True)
def fake_provider_type() -> Generator[str, None, None]:
    """Register the in-memory provider under its own type tag."""
    FakeEmbeddingProvider.instances.clear()
    register_provider(FAKE_PROVIDER_TYPE, FakeEmbeddingProvider)
    yield FAKE_PROVIDER_TYPE
    unregister_provider(FAKE_PROVIDER_TYPE)
    FakeEmbeddingProvider.instances.clear()


@pytest_asyncio.fixture
async def database(test_settings: Settings) -> AsyncGenerator[Database, None]:
    """Create and initialize a test database."""
    db = Database(test_settings)
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def embedding_store(database: Database, test_settings: Settings) -> AsyncGenerator[EmbeddingStore, None]:
    """Create and initialize an embedding store on the test database."""
    store = EmbeddingStore(database, test_settings)
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def connection_store(database: Database, test_settings: Settings) -> ConnectionStore:
    """Create and initialize a connection store on the test database."""
    store = ConnectionStore(database, test_settings)
    await store.initialize()
    return store


@pytest.fixture
def fake_provider() -> FakeEmbeddingProvider:
    """In-memory provider with a few fixed vectors."""
    return FakeEmbeddingProvider(
        vectors={
            "apples": [1.0, 0.0, 0.0],
            "oranges": [0.0, 1.0, 0.0],
            "fruit": [0.9, 0.1, 0.0],
        },
        failing_texts={"reject me"},
    )


@pytest_asyncio.fixture
async def provider_manager(
    test_settings: Settings, fake_provider: FakeEmbeddingProvider
) -> AsyncGenerator[ProviderManager, None]:
    """Provider manager serving the in-memory provider."""
    manager = ProviderManager(test_settings, provider=fake_provider)
    yield manager
    await manager.close()


@pytest.fixture
def embedding_service(
    provider_manager: ProviderManager, embedding_store: EmbeddingStore, test_settings: Settings
) -> EmbeddingService:
    return EmbeddingService(provider_manager, embedding_store, test_settings)


@pytest.fixture
def batch_orchestrator(embedding_service: EmbeddingService, test_settings: Settings) -> BatchOrchestrator:
    return BatchOrchestrator(embedding_service, test_settings)


@pytest_asyncio.fixture
async def fake_api() -> AsyncGenerator[FakeProviderApi, None]:
    """Running in-process HTTP provider backend."""
    api = FakeProviderApi()
    await api.start()
    yield api
    await api.close()
