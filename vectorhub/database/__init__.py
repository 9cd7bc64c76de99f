"""SQLite persistence shared by the embedding and connection stores."""

from .core import MEMORY_DATABASE, Database
from .schema import create_schema

__all__ = ["Database", "MEMORY_DATABASE", "create_schema"]
