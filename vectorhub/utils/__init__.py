"""Utility functions for VectorHub."""

from .async_utils import gather_with_concurrency

__all__ = ["gather_with_concurrency"]
