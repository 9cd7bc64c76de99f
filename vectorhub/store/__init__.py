"""
Embedding store backed by SQLite with exact similarity search.

This package provides:

- **Core Management**: ``EmbeddingStore`` coordinating the operation handlers
- **Record Operations**: upsert keyed by (uri, model_name), lookup, listing, deletion
- **Search Operations**: exact cosine, euclidean and dot-product ranking with numpy
- **Statistics**: totals and per-model figures

Vectors are stored as float32 blobs next to their dimensionality.
"""

from .core import EmbeddingStore
from .similarity import compute_similarities

__all__ = ["EmbeddingStore", "compute_similarities"]
