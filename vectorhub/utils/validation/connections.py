"""Connection-related validation utilities."""

from typing import Any, Dict, Iterable, Optional

from ...core.exceptions import ValidationError
from .common import validate_json_object, validate_non_blank, validate_url

MAX_CONNECTION_NAME_LENGTH = 255


def validate_connection_name(name: Optional[str]) -> None:
    """Validate a connection display name."""
    validate_non_blank(name, "name")

    if len(name) > MAX_CONNECTION_NAME_LENGTH:
        raise ValidationError(
            f"Name too long (max {MAX_CONNECTION_NAME_LENGTH} characters)", "name"
        )


def validate_provider_type(provider_type: Optional[str], known_types: Iterable[str]) -> None:
    """Validate that a provider type tag is registered."""
    validate_non_blank(provider_type, "type")

    known = list(known_types)
    if provider_type not in known:
        raise ValidationError(
            f"Unsupported provider type: {provider_type} (expected one of: {', '.join(known)})",
            "type",
        )


def validate_connection_data(data: Dict[str, Any], known_types: Iterable[str]) -> None:
    """Validate the fields present in a connection create or update payload."""
    if "name" in data:
        validate_connection_name(data["name"])
    if "type" in data:
        validate_provider_type(data["type"], known_types)
    if "base_url" in data:
        validate_url(data["base_url"])
    if "metadata" in data:
        validate_json_object(data["metadata"])
