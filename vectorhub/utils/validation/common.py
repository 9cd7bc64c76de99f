"""Common validation utilities."""

import json
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from ...core.exceptions import ValidationError


def validate_url(url: Optional[str], field: str = "base_url") -> None:
    """Validate that a URL uses http or https and names a host."""
    if not url or not url.strip():
        raise ValidationError("URL cannot be empty", field)

    try:
        parsed = urlparse(url.strip())
        # Accessing port validates it is numeric and in range
        parsed.port
    except ValueError as e:
        raise ValidationError(f"Invalid URL format: {e}", field)

    if parsed.scheme not in ("http", "https"):
        raise ValidationError("URL scheme must be http or https", field)

    if not parsed.hostname:
        raise ValidationError("URL must include a host", field)


def validate_non_blank(value: Optional[str], field: str, label: Optional[str] = None) -> None:
    """Validate that a string is present and not only whitespace."""
    if not isinstance(value, str):
        raise ValidationError(f"{label or field.capitalize()} must be a string", field)

    if not value.strip():
        raise ValidationError(f"{label or field.capitalize()} cannot be empty", field)


def validate_json_object(value: Optional[Dict[str, Any]], field: str = "metadata") -> None:
    """Validate that a value is a JSON-serializable dictionary."""
    if value is None:
        return

    if not isinstance(value, dict):
        raise ValidationError(f"{field.capitalize()} must be a dictionary", field)

    try:
        json.dumps(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{field.capitalize()} not JSON serializable: {e}", field)
