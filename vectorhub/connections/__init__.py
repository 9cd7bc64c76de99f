"""Connection management for VectorHub."""

from .store import ConnectionStore

__all__ = ["ConnectionStore"]
