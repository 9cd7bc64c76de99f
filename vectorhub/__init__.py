"""
VectorHub - Text embeddings from interchangeable providers, stored and searchable.

This package provides:
- A provider abstraction over Ollama and OpenAI-compatible embedding APIs
- A SQLite embedding store with exact cosine, euclidean and dot-product search
- Persisted provider connections with a single active connection
- Batch embedding with bounded concurrency and per-item failure isolation
"""

__version__ = "0.1.0"

from .config.settings import Settings
from .core.hub import VectorHub

__all__ = ["VectorHub", "Settings"]
