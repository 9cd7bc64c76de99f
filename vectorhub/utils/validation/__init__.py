"""Validation utilities package.

Domain-specific validation functions organized by concern:
- embeddings: uris, texts, vectors, search parameters, task types
- connections: connection names, provider types, connection payloads
- common: URLs, non-blank strings, JSON objects
"""

from .common import validate_json_object, validate_non_blank, validate_url
from .connections import (
    validate_connection_data,
    validate_connection_name,
    validate_provider_type,
)
from .embeddings import (
    MAX_URI_LENGTH,
    validate_embedding_input,
    validate_limit,
    validate_search_query,
    validate_similarity_threshold,
    validate_task_type,
    validate_text,
    validate_uri,
    validate_vector,
)

__all__ = [
    # Embedding validation
    "MAX_URI_LENGTH",
    "validate_uri",
    "validate_text",
    "validate_embedding_input",
    "validate_search_query",
    "validate_vector",
    "validate_limit",
    "validate_similarity_threshold",
    "validate_task_type",

    # Connection validation
    "validate_connection_name",
    "validate_provider_type",
    "validate_connection_data",

    # Common validation
    "validate_url",
    "validate_non_blank",
    "validate_json_object",
]
