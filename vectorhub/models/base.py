"""Base model classes and generics for VectorHub."""

from datetime import datetime, UTC
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# Type variables for generics
T = TypeVar('T')


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class VectorHubBaseModel(BaseModel):
    """Base model with common configuration for all VectorHub models."""

    model_config = ConfigDict(
        # Keep enum objects in memory, serialize values only when needed
        use_enum_values=False,
        # Allow population by field name or alias
        populate_by_name=True,
        # Validate assignment after model creation
        validate_assignment=True,
        # Include extra validation info in errors
        extra='forbid',
        # Fields such as model_name are part of the domain vocabulary
        protected_namespaces=(),
    )


class TimestampedModel(VectorHubBaseModel):
    """Base model for entities with timestamps."""

    created_at: Optional[datetime] = Field(
        default=None,
        description="When the entity was created"
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        description="When the entity was last updated"
    )


class IdentifiedModel(TimestampedModel):
    """Base model for persisted entities with a numeric id and timestamps."""

    id: int = Field(ge=1, description="Database-assigned identifier")


class OperationResult(VectorHubBaseModel, Generic[T]):
    """Generic result wrapper for operations."""

    success: bool = Field(description="Whether the operation succeeded")
    data: Optional[T] = Field(default=None, description="Operation result data")
    message: Optional[str] = Field(default=None, description="Success or error message")
    error_code: Optional[str] = Field(default=None, description="Error code if operation failed")
