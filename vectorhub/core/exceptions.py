"""Custom exceptions for VectorHub."""

from typing import Any, Dict, Optional


class VectorHubError(Exception):
    """Base exception for all VectorHub errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [self.message]
        if self.error_code:
            parts.append(f"(code: {self.error_code})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class ConfigurationError(VectorHubError):
    """Raised when there's a configuration issue."""

    def __init__(self, message: str, config_key: Optional[str] = None) -> None:
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class ValidationError(VectorHubError):
    """Raised when data validation fails."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class StorageError(VectorHubError):
    """Raised when a persistence operation fails."""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        details = {"query": query} if query else {}
        super().__init__(message, "STORAGE_ERROR", details)
        self.query = query
        self.cause = cause


class ConnectionNotFoundError(VectorHubError):
    """Raised when a connection id does not exist."""

    def __init__(self, connection_id: int) -> None:
        super().__init__(
            f"Connection not found: {connection_id}",
            "CONNECTION_NOT_FOUND",
            {"connection_id": connection_id},
        )
        self.connection_id = connection_id


class ProviderError(VectorHubError):
    """Base class for failures reported by an embedding provider.

    Every provider adapter maps its failures onto exactly one subclass, so
    callers only ever deal with these four kinds.
    """

    default_error_code = "PROVIDER_ERROR"

    def __init__(
        self,
        provider: str,
        message: str,
        model_name: Optional[str] = None,
        error_code: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        details: Dict[str, Any] = {"provider": provider}
        if model_name:
            details["model_name"] = model_name
        super().__init__(message, error_code or self.default_error_code, details)
        self.provider = provider
        self.model_name = model_name
        self.cause = cause


class ProviderConnectionError(ProviderError):
    """Network or transport failure reaching the provider."""

    default_error_code = "CONNECTION_ERROR"


class ProviderModelError(ProviderError):
    """The requested model is unknown, unsupported or rejected by the provider."""

    default_error_code = "MODEL_ERROR"


class ProviderAuthenticationError(ProviderError):
    """Credential missing, invalid or expired."""

    default_error_code = "UNAUTHORIZED"


class ProviderRateLimitError(ProviderError):
    """The provider signalled throttling."""

    default_error_code = "RATE_LIMITED"

    def __init__(
        self,
        provider: str,
        message: str,
        model_name: Optional[str] = None,
        error_code: Optional[str] = None,
        cause: Optional[BaseException] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(provider, message, model_name, error_code, cause)
        self.retry_after = retry_after
        if retry_after is not None:
            self.details["retry_after"] = retry_after
