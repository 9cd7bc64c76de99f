"""Core VectorHub components."""

from .exceptions import (
    ConfigurationError,
    ConnectionNotFoundError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderModelError,
    ProviderRateLimitError,
    StorageError,
    ValidationError,
    VectorHubError,
)

__all__ = [
    "VectorHubError",
    "ConfigurationError",
    "ValidationError",
    "StorageError",
    "ConnectionNotFoundError",
    "ProviderError",
    "ProviderConnectionError",
    "ProviderModelError",
    "ProviderAuthenticationError",
    "ProviderRateLimitError",
]
