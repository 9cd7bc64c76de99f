"""Batch embedding orchestration."""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from ..config.logging import LoggerMixin
from ..config.settings import Settings
from ..core.exceptions import VectorHubError
from ..models.batch import BatchItem, BatchItemResult, BatchResult
from ..utils.async_utils import gather_with_concurrency
from .embedding import EmbeddingService

BatchInput = Union[BatchItem, Mapping[str, Any]]


def _coerce_item(raw: BatchInput) -> Tuple[Optional[BatchItem], str, Optional[str]]:
    """Return (item, uri, error) for one raw batch input."""
    if isinstance(raw, BatchItem):
        return raw, raw.uri, None

    uri = raw.get("uri") if isinstance(raw, Mapping) else None
    uri = uri if isinstance(uri, str) else ""
    try:
        return BatchItem.model_validate(raw), uri, None
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or "item"
        return None, uri, f"Invalid {field}: {error.get('msg')}"


class BatchOrchestrator(LoggerMixin):
    """Embeds many inputs with bounded concurrency and per-item failure isolation.

    Items sharing a uri form one chain processed sequentially in input order,
    so the last entry for a uri is the one that remains stored. Results are
    returned in input order.
    """

    def __init__(self, service: EmbeddingService, settings: Settings):
        self.service = service
        self.settings = settings

    async def _process(self, item: BatchItem, default_model: Optional[str]) -> BatchItemResult:
        try:
            created = await self.service.create_embedding(
                item.uri, item.text, item.model_name or default_model
            )
            return BatchItemResult.ok(created.id, created.uri, created.model_name)

        except VectorHubError as e:
            self.logger.warning(
                "Batch item failed", uri=item.uri, error_code=e.error_code, error=e.message
            )
            return BatchItemResult.failure(item.uri, e.message)
        except Exception as e:
            self.logger.error("Unexpected batch item failure", uri=item.uri, error=str(e))
            return BatchItemResult.failure(item.uri, str(e))

    async def _process_chain(
        self,
        chain: List[Tuple[int, BatchItem]],
        default_model: Optional[str],
    ) -> List[Tuple[int, BatchItemResult]]:
        results = []
        for index, item in chain:
            results.append((index, await self._process(item, default_model)))
        return results

    async def run(
        self,
        items: Sequence[BatchInput],
        model_name: Optional[str] = None,
    ) -> BatchResult:
        """Embed and store every item, collecting one result per input."""
        results: List[Optional[BatchItemResult]] = [None] * len(items)
        chains: Dict[str, List[Tuple[int, BatchItem]]] = {}

        for index, raw in enumerate(items):
            item, uri, error = _coerce_item(raw)
            if item is None:
                results[index] = BatchItemResult.failure(uri, error)
                continue
            chains.setdefault(item.uri, []).append((index, item))

        chain_results = await gather_with_concurrency(
            [self._process_chain(chain, model_name) for chain in chains.values()],
            max_concurrency=self.settings.BATCH_CONCURRENCY,
        )
        for chain_result in chain_results:
            for index, result in chain_result:
                results[index] = result

        batch = BatchResult(results=results)
        self.logger.info(
            "Batch completed",
            total=batch.total,
            successful=batch.successful,
            failed=batch.failed,
        )
        return batch
