"""Batch embedding models for VectorHub."""

from typing import List, Optional

from pydantic import Field, computed_field

from .base import VectorHubBaseModel


class BatchItem(VectorHubBaseModel):
    """One input of a batch request.

    Empty values are accepted here and rejected per item by the orchestrator,
    so one bad entry does not fail the whole request.
    """

    uri: str = Field(description="Identifier of the content")
    text: str = Field(description="Text to embed")
    model_name: Optional[str] = Field(default=None, description="Per-item model override")


class BatchItemResult(VectorHubBaseModel):
    """Per-input outcome, success or failure."""

    success: bool = Field(description="Whether the item was embedded and saved")
    uri: str = Field(description="Input uri")
    id: Optional[int] = Field(default=None, description="Saved row id, on success")
    model_name: Optional[str] = Field(default=None, description="Model used, on success")
    error: Optional[str] = Field(default=None, description="Failure message")

    @classmethod
    def ok(cls, id: int, uri: str, model_name: str) -> "BatchItemResult":
        return cls(success=True, uri=uri, id=id, model_name=model_name)

    @classmethod
    def failure(cls, uri: str, error: str) -> "BatchItemResult":
        return cls(success=False, uri=uri, error=error)


class BatchResult(VectorHubBaseModel):
    """Ordered per-item results plus derived summary counts."""

    results: List[BatchItemResult] = Field(default_factory=list, description="Results in input order")

    @computed_field
    @property
    def total(self) -> int:
        return len(self.results)

    @computed_field
    @property
    def successful(self) -> int:
        return sum(1 for result in self.results if result.success)

    @computed_field
    @property
    def failed(self) -> int:
        return self.total - self.successful


class MigrationResult(BatchResult):
    """Per-row outcome of re-embedding one model's rows with another model."""

    from_model: str = Field(description="Source model")
    to_model: str = Field(description="Target model")
    preserved_original: bool = Field(default=False, description="Whether source rows were kept")
