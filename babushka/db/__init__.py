"""Storage package for babushka.

Exports the storage port and its in-memory and DuckDB implementations.
"""

from .storage import DuckDBStorage, MemoryStorage, StoragePort

__all__ = ["DuckDBStorage", "MemoryStorage", "StoragePort"]
