"""Mapping of provider failures onto the VectorHub error taxonomy.

Adapters funnel every failure through :func:`classify_http_error` (for
non-2xx responses) or :func:`classify_exception` (for everything raised
while talking to the backend), so callers only ever see one of the four
``ProviderError`` kinds.
"""

import asyncio
import json
from datetime import datetime, UTC
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import aiohttp

from ..core.exceptions import (
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderModelError,
    ProviderRateLimitError,
)

MODEL_ERROR_STATUSES = frozenset({400, 404, 422})
AUTH_ERROR_STATUSES = frozenset({401, 403})
RATE_LIMIT_STATUS = 429

# Upper bound on how much of an error body is echoed into messages
MAX_BODY_EXCERPT = 500


def extract_error_message(body: Optional[str]) -> Optional[str]:
    """Pull a human-readable message out of a provider error body.

    Understands ``{"error": "..."}``, ``{"error": {"message": "..."}}`` and
    ``{"message": "..."}``; anything else is returned as a trimmed excerpt.
    """
    if not body:
        return None

    try:
        payload: Any = json.loads(body)
    except ValueError:
        return body.strip()[:MAX_BODY_EXCERPT] or None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error:
            return error
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if payload.get("message"):
            return str(payload["message"])
        if payload.get("detail"):
            return str(payload["detail"])

    return body.strip()[:MAX_BODY_EXCERPT] or None


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a ``Retry-After`` header given as seconds or as an HTTP date."""
    if not value:
        return None

    value = value.strip()
    try:
        seconds = float(value)
    except ValueError:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=UTC)
        seconds = (when - datetime.now(UTC)).total_seconds()

    return max(0.0, seconds)


def classify_http_error(
    provider: str,
    status: int,
    body: Optional[str] = None,
    model_name: Optional[str] = None,
    retry_after: Optional[str] = None,
) -> ProviderError:
    """Map a non-success HTTP response onto exactly one provider error kind."""
    detail = extract_error_message(body)
    message = f"HTTP {status}: {detail}" if detail else f"HTTP {status}"

    if status in AUTH_ERROR_STATUSES:
        return ProviderAuthenticationError(provider, f"Authentication failed: {message}", model_name)

    if status == RATE_LIMIT_STATUS:
        return ProviderRateLimitError(
            provider,
            f"Rate limit exceeded: {message}",
            model_name,
            retry_after=parse_retry_after(retry_after),
        )

    if status in MODEL_ERROR_STATUSES:
        return ProviderModelError(
            provider,
            f"Model not found or request rejected: {message}",
            model_name,
        )

    return ProviderConnectionError(provider, f"Provider request failed: {message}", model_name)


def classify_exception(
    provider: str,
    error: BaseException,
    model_name: Optional[str] = None,
    operation: str = "request",
) -> ProviderError:
    """Map an exception raised while talking to a provider onto the taxonomy.

    Existing provider errors pass through unchanged. Timeouts, transport
    errors, undecodable bodies and anything unrecognised become connection
    errors.
    """
    if isinstance(error, ProviderError):
        return error

    if isinstance(error, asyncio.TimeoutError):
        return ProviderConnectionError(
            provider, f"Timed out during {operation}", model_name, cause=error
        )

    if isinstance(error, (aiohttp.ContentTypeError, ValueError)):
        return ProviderConnectionError(
            provider, f"Malformed response during {operation}: {error}", model_name, cause=error
        )

    if isinstance(error, aiohttp.ClientError):
        return ProviderConnectionError(
            provider, f"Failed to connect during {operation}: {error}", model_name, cause=error
        )

    return ProviderConnectionError(
        provider, f"Unexpected error during {operation}: {error}", model_name, cause=error
    )


def as_listing_error(error: ProviderError) -> ProviderError:
    """Narrow a model-listing failure to a connection or authentication error.

    A listing names no model, so model and rate-limit classifications are
    reported as the backend being unusable.
    """
    if isinstance(error, (ProviderConnectionError, ProviderAuthenticationError)):
        return error

    return ProviderConnectionError(
        error.provider,
        error.message,
        error.model_name,
        cause=error.cause or error,
    )
