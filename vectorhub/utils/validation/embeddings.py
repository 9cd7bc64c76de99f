"""Embedding and search validation utilities."""

import math
from numbers import Real
from typing import Any, List, Optional, Sequence, Union

from ...core.exceptions import ValidationError
from ...models.embedding import TaskType
from .common import validate_non_blank

MAX_URI_LENGTH = 2048


def validate_uri(uri: Optional[str]) -> None:
    """Validate an embedding uri."""
    validate_non_blank(uri, "uri", "URI")

    if len(uri) > MAX_URI_LENGTH:
        raise ValidationError(f"URI too long (max {MAX_URI_LENGTH} characters)", "uri")


def validate_text(text: Optional[str]) -> None:
    """Validate text to be embedded."""
    validate_non_blank(text, "text", "Text")


def validate_embedding_input(uri: Optional[str], text: Optional[str]) -> None:
    """Validate a (uri, text) pair before it is sent to a provider."""
    validate_uri(uri)
    validate_text(text)


def validate_search_query(query: Optional[str]) -> None:
    """Validate search query text."""
    validate_non_blank(query, "query", "Search query")


def validate_vector(vector: Sequence[Any], field: str = "embedding") -> List[float]:
    """Validate an embedding vector and return it as a list of floats.

    Rejects empty vectors, non-numeric components (booleans included) and
    NaN or infinite values.
    """
    if vector is None or isinstance(vector, (str, bytes)):
        raise ValidationError("Embedding must be a sequence of numbers", field)

    values = list(vector)
    if not values:
        raise ValidationError("Embedding cannot be empty", field)

    result = []
    for index, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ValidationError(f"Embedding component {index} is not a number", field)
        number = float(value)
        if not math.isfinite(number):
            raise ValidationError(f"Embedding component {index} is not finite", field)
        result.append(number)

    return result


def validate_limit(limit: Optional[int]) -> None:
    """Validate a result limit."""
    if limit is None:
        return

    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError("Limit must be an integer", "limit")

    if limit < 1:
        raise ValidationError("Limit must be positive", "limit")


def validate_similarity_threshold(threshold: Optional[float]) -> None:
    """Validate a similarity threshold.

    The admissible range depends on the metric (dot products are unbounded),
    so only finiteness is checked.
    """
    if threshold is None:
        return

    if isinstance(threshold, bool) or not isinstance(threshold, Real):
        raise ValidationError("Similarity threshold must be a number", "threshold")

    if not math.isfinite(float(threshold)):
        raise ValidationError("Similarity threshold must be finite", "threshold")


def validate_task_type(task_type: Union[TaskType, str, None]) -> Optional[TaskType]:
    """Validate an optional task type and return it as a TaskType."""
    if task_type is None:
        return None

    try:
        return TaskType(task_type)
    except ValueError:
        raise ValidationError(
            f"Unsupported task type: {task_type} "
            f"(expected one of: {', '.join(t.value for t in TaskType)})",
            "task_type",
        )
