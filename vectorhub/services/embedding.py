"""Embedding service: text to provider to store."""

from typing import List, Optional, Union

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import ValidationError, VectorHubError
from ..models.batch import BatchItemResult, MigrationResult
from ..models.embedding import (
    MAX_PAGE_SIZE,
    CreateEmbeddingResponse,
    EmbeddingListQuery,
    EmbeddingListResult,
    EmbeddingRecord,
    EmbeddingStats,
    ModelCompatibility,
    SearchEmbeddingResponse,
    SimilarityMetric,
    SimilaritySearchQuery,
    TaskType,
    UriMatch,
)
from ..providers.base import KNOWN_MODEL_DIMENSIONS, normalize_model_name
from ..providers.manager import ProviderManager
from ..providers.task_types import format_text_with_task_type, supported_task_types
from ..store import EmbeddingStore
from ..utils.async_utils import gather_with_concurrency
from ..utils.validation import (
    validate_embedding_input,
    validate_limit,
    validate_non_blank,
    validate_search_query,
    validate_similarity_threshold,
    validate_task_type,
    validate_text,
)


class EmbeddingService(LoggerMixin):
    """Creates, searches and maintains embeddings through the current provider."""

    def __init__(self, provider_manager: ProviderManager, store: EmbeddingStore, settings: Settings):
        self.provider_manager = provider_manager
        self.store = store
        self.settings = settings

    def _prompt(
        self,
        text: str,
        model_name: Optional[str],
        task_type: Optional[TaskType],
        title: Optional[str] = None,
    ) -> str:
        """Text as sent to the provider, wrapped in the model's task prompt if it has one."""
        if task_type is None:
            return text

        model = model_name or self.provider_manager.default_model
        if not model:
            return text
        return format_text_with_task_type(model, text, task_type, title)

    async def create_embedding(
        self,
        uri: str,
        text: str,
        model_name: Optional[str] = None,
        task_type: Union[TaskType, str, None] = None,
        title: Optional[str] = None,
    ) -> CreateEmbeddingResponse:
        """Embed ``text`` and upsert it under (uri, model).

        With a ``task_type``, models that take task prompts embed the prompted
        text; the stored text is always the original.
        """
        validate_embedding_input(uri, text)
        task = validate_task_type(task_type)

        prompt = self._prompt(text, model_name, task, title)
        result = await self.provider_manager.generate_embedding(prompt, model_name)
        saved = await self.store.save(uri, text, result.model, result.embedding)

        self.logger.info(
            "Embedding created",
            embedding_id=saved.id,
            uri=uri,
            model_name=result.model,
            provider=result.provider,
            dimensions=result.dimensions,
        )
        return CreateEmbeddingResponse(
            id=saved.id,
            uri=uri,
            model_name=result.model,
            message="Embedding created successfully",
        )

    async def search(
        self,
        query: str,
        model_name: Optional[str] = None,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
        metric: Union[SimilarityMetric, str] = SimilarityMetric.COSINE,
        task_type: Union[TaskType, str, None] = None,
    ) -> SearchEmbeddingResponse:
        """Embed the query text and rank stored embeddings of the same model."""
        validate_search_query(query)
        validate_limit(limit)
        validate_similarity_threshold(threshold)
        task = validate_task_type(task_type)

        try:
            metric = SimilarityMetric(metric)
        except ValueError:
            raise ValidationError(f"Unsupported similarity metric: {metric}", "metric")

        prompt = self._prompt(query, model_name, task)
        result = await self.provider_manager.generate_embedding(prompt, model_name)
        hits = await self.store.search_similar(
            SimilaritySearchQuery(
                query_embedding=result.embedding,
                model_name=result.model,
                limit=limit or self.settings.DEFAULT_SEARCH_LIMIT,
                threshold=threshold,
                metric=metric,
            )
        )

        return SearchEmbeddingResponse(
            results=hits,
            query=query,
            model_name=result.model,
            metric=metric,
            count=len(hits),
            threshold=threshold,
        )

    async def update_embedding(
        self, embedding_id: int, text: str, model_name: Optional[str] = None
    ) -> bool:
        """Re-embed new text for an existing row. False when the id is unknown."""
        validate_text(text)

        record = await self.store.find_by_id(embedding_id)
        if record is None:
            return False

        if model_name and model_name != record.model_name:
            raise ValidationError(
                f"Embedding {embedding_id} belongs to model {record.model_name}, not {model_name}",
                "model_name",
            )

        result = await self.provider_manager.generate_embedding(text, record.model_name)
        updated = await self.store.update_by_id(embedding_id, text, result.embedding)

        self.logger.info("Embedding updated", embedding_id=embedding_id, updated=updated)
        return updated

    async def get_embedding(self, uri: str, model_name: str) -> Optional[EmbeddingRecord]:
        return await self.store.find_by_uri(uri, model_name)

    async def get_embedding_by_id(self, embedding_id: int) -> Optional[EmbeddingRecord]:
        return await self.store.find_by_id(embedding_id)

    async def list_embeddings(
        self,
        uri: Optional[str] = None,
        model_name: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
        uri_match: Union[UriMatch, str] = UriMatch.EXACT,
    ) -> EmbeddingListResult:
        return await self.store.find_all(
            EmbeddingListQuery(
                uri=uri, model_name=model_name, page=page, limit=limit, uri_match=uri_match
            )
        )

    async def delete_embedding(self, embedding_id: int) -> bool:
        return await self.store.delete_by_id(embedding_id)

    async def delete_all_embeddings(self, model_name: Optional[str] = None) -> int:
        return await self.store.delete_all(model_name)

    async def get_stats(self) -> EmbeddingStats:
        return await self.store.get_stats()

    async def list_models(self) -> List[str]:
        """Names of the models offered by the current provider."""
        return [model.name for model in await self.provider_manager.list_models()]

    def list_task_types(self, model_name: Optional[str] = None) -> List[TaskType]:
        """Task types the model handles, defaulting to the current provider's model."""
        model = model_name or self.provider_manager.default_model
        return supported_task_types(model) if model else []

    async def _model_dimensions(self, model_name: str) -> Optional[int]:
        """Vector length of a model: provider catalog, then stored rows, then known models."""
        info = await self.provider_manager.get_model_info(model_name)
        if info is not None and info.dimensions:
            return info.dimensions

        stats = await self.store.get_stats()
        for usage in stats.models:
            if usage.model_name == model_name:
                return usage.dimensions

        return KNOWN_MODEL_DIMENSIONS.get(normalize_model_name(model_name))

    async def check_model_compatibility(self, source_model: str, target_model: str) -> ModelCompatibility:
        """Compare the vector lengths of two models."""
        validate_non_blank(source_model, "source_model", "Source model")
        validate_non_blank(target_model, "target_model", "Target model")

        source_dimensions = await self._model_dimensions(source_model)
        target_dimensions = await self._model_dimensions(target_model)

        reason = None
        if source_dimensions is None or target_dimensions is None:
            unknown = source_model if source_dimensions is None else target_model
            reason = f"Unknown vector dimensions for model {unknown}"
        elif source_dimensions != target_dimensions:
            reason = f"Different vector dimensions: {source_dimensions} vs {target_dimensions}"

        return ModelCompatibility(
            source_model=source_model,
            target_model=target_model,
            compatible=reason is None,
            source_dimensions=source_dimensions,
            target_dimensions=target_dimensions,
            reason=reason,
        )

    async def _records_of_model(self, model_name: str) -> List[EmbeddingRecord]:
        records: List[EmbeddingRecord] = []
        page = 1
        while True:
            listing = await self.store.find_all(
                EmbeddingListQuery(model_name=model_name, page=page, limit=MAX_PAGE_SIZE)
            )
            records.extend(listing.embeddings)
            if not listing.has_next:
                return records
            page += 1

    async def _migrate_record(
        self, record: EmbeddingRecord, to_model: str, preserve_original: bool
    ) -> BatchItemResult:
        try:
            result = await self.provider_manager.generate_embedding(record.text, to_model)
            saved = await self.store.save(record.uri, record.text, result.model, result.embedding)
            if not preserve_original and saved.id != record.id:
                await self.store.delete_by_id(record.id)
            return BatchItemResult.ok(saved.id, record.uri, result.model)

        except VectorHubError as e:
            self.logger.warning(
                "Embedding migration failed",
                embedding_id=record.id,
                uri=record.uri,
                error_code=e.error_code,
                error=e.message,
            )
            return BatchItemResult.failure(record.uri, e.message)
        except Exception as e:
            self.logger.error(
                "Unexpected embedding migration failure", embedding_id=record.id, error=str(e)
            )
            return BatchItemResult.failure(record.uri, str(e))

    async def migrate_embeddings(
        self,
        from_model: str,
        to_model: str,
        preserve_original: bool = False,
        require_compatible: bool = True,
    ) -> MigrationResult:
        """Re-embed every row of ``from_model`` with ``to_model``.

        Each row is upserted under the target model and, unless
        ``preserve_original`` is set, its source row is removed once the new
        one is saved. A row that fails keeps its source row and is reported
        in the result.

        Raises:
            ValidationError: the models are the same, or incompatible while
                ``require_compatible`` is set.
        """
        validate_non_blank(from_model, "from_model", "Source model")
        validate_non_blank(to_model, "to_model", "Target model")
        if from_model == to_model:
            raise ValidationError("Source and target models must differ", "to_model")

        if require_compatible:
            compatibility = await self.check_model_compatibility(from_model, to_model)
            if not compatibility.compatible:
                raise ValidationError(
                    f"Cannot migrate from {from_model} to {to_model}: {compatibility.reason}",
                    "to_model",
                )

        records = await self._records_of_model(from_model)
        results = await gather_with_concurrency(
            [self._migrate_record(record, to_model, preserve_original) for record in records],
            max_concurrency=self.settings.BATCH_CONCURRENCY,
        )

        migration = MigrationResult(
            results=results,
            from_model=from_model,
            to_model=to_model,
            preserved_original=preserve_original,
        )
        self.logger.info(
            "Embeddings migrated",
            from_model=from_model,
            to_model=to_model,
            total=migration.total,
            successful=migration.successful,
            failed=migration.failed,
        )
        return migration
