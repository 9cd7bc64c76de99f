"""Connection domain models for VectorHub.

A connection is a persisted, user-configured provider instance. The stored
row (:class:`Connection`) carries the API key; every read projection
(:class:`ConnectionResponse`) is built without it.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import IdentifiedModel, VectorHubBaseModel
from .provider import ProviderConfig


def build_provider_config(
    provider_type: str,
    base_url: str,
    api_key: Optional[str],
    default_model: Optional[str],
    metadata: Optional[Dict[str, Any]],
) -> ProviderConfig:
    """Adapter configuration from connection fields. Custom headers live in metadata."""
    headers = (metadata or {}).get("custom_headers") or {}
    return ProviderConfig(
        type=provider_type,
        base_url=base_url,
        api_key=api_key,
        default_model=default_model,
        custom_headers={str(k): str(v) for k, v in dict(headers).items()},
    )


class Connection(IdentifiedModel):
    """A stored connection row, including its credential."""

    name: str = Field(description="Display label")
    type: str = Field(description="Provider type tag")
    base_url: str = Field(description="Provider API base URL")
    api_key: Optional[str] = Field(default=None, repr=False, description="Provider API key")
    default_model: Optional[str] = Field(default=None, description="Default embedding model")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Open key-value settings")
    is_active: bool = Field(default=False, description="Whether this connection serves traffic")

    def to_response(self) -> "ConnectionResponse":
        """Public projection without the API key."""
        return ConnectionResponse(
            id=self.id,
            name=self.name,
            type=self.type,
            base_url=self.base_url,
            default_model=self.default_model,
            metadata=dict(self.metadata),
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_provider_config(self) -> ProviderConfig:
        """Provider configuration for building this connection's adapter."""
        return build_provider_config(
            self.type, self.base_url, self.api_key, self.default_model, self.metadata
        )


class ConnectionResponse(IdentifiedModel):
    """Read projection of a connection. Never carries the API key."""

    name: str = Field(description="Display label")
    type: str = Field(description="Provider type tag")
    base_url: str = Field(description="Provider API base URL")
    default_model: Optional[str] = Field(default=None, description="Default embedding model")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Open key-value settings")
    is_active: bool = Field(description="Whether this connection serves traffic")


class CreateConnectionRequest(VectorHubBaseModel):
    """Fields accepted when creating a connection."""

    name: str = Field(min_length=1, description="Display label")
    type: str = Field(min_length=1, description="Provider type tag")
    base_url: str = Field(min_length=1, description="Provider API base URL")
    api_key: Optional[str] = Field(default=None, repr=False, description="Provider API key")
    default_model: Optional[str] = Field(default=None, description="Default embedding model")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Open key-value settings")
    is_active: bool = Field(default=False, description="Activate on creation")

    def to_provider_config(self) -> ProviderConfig:
        return build_provider_config(
            self.type, self.base_url, self.api_key, self.default_model, self.metadata
        )


class UpdateConnectionRequest(VectorHubBaseModel):
    """Partial patch for a connection.

    Only fields explicitly set on the request are written; everything else
    keeps its stored value.
    """

    name: Optional[str] = Field(default=None, min_length=1, description="Display label")
    type: Optional[str] = Field(default=None, min_length=1, description="Provider type tag")
    base_url: Optional[str] = Field(default=None, min_length=1, description="Provider API base URL")
    api_key: Optional[str] = Field(default=None, repr=False, description="Provider API key")
    default_model: Optional[str] = Field(default=None, description="Default embedding model")
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Open key-value settings")
    is_active: Optional[bool] = Field(default=None, description="Activate or deactivate")

    def changes(self) -> Dict[str, Any]:
        """Explicitly provided fields, with an unset API key dropped."""
        data = self.model_dump(exclude_unset=True)
        if data.get("api_key") is None:
            data.pop("api_key", None)
        return data


class ConnectionTestRequest(VectorHubBaseModel):
    """Either an existing connection id or an inline provider configuration."""

    id: Optional[int] = Field(default=None, description="Existing connection to test")
    type: Optional[str] = Field(default=None, description="Provider type tag")
    base_url: Optional[str] = Field(default=None, description="Provider API base URL")
    api_key: Optional[str] = Field(default=None, repr=False, description="Provider API key")


class ConnectionTestResponse(VectorHubBaseModel):
    """Outcome of testing a provider."""

    success: bool = Field(description="Whether the provider answered a model listing")
    message: str = Field(description="Human-readable outcome")
    models: Optional[List[str]] = Field(default=None, description="Model names, on success")
