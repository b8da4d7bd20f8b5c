"""
Durable key/value storage ports.

The deck store only needs ``get`` and ``set`` on string keys, the same
shape as browser local storage. ``MemoryStorage`` backs tests and throwaway
sessions; ``DuckDBStorage`` persists to a DuckDB file.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

import duckdb

from ..exceptions import StorageError
from .connection import ConnectionHandler

logger = logging.getLogger(__name__)

KV_SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS kv_store (
        key VARCHAR PRIMARY KEY,
        value VARCHAR NOT NULL
    );
"""


class StoragePort(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage that lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value


class DuckDBStorage:
    """
    Key/value storage in a single DuckDB table.

    Each write runs in its own transaction and is committed before the call
    returns. Intended for use as a context manager.
    """

    def __init__(self, db_path: Union[str, Path]):
        self._handler = ConnectionHandler(db_path=db_path)
        self._schema_ready = False

    @property
    def db_path_resolved(self) -> Path:
        return self._handler.db_path_resolved

    def _connection(self) -> duckdb.DuckDBPyConnection:
        conn = self._handler.get_connection()
        if not self._schema_ready:
            try:
                conn.execute(KV_SCHEMA_SQL)
            except duckdb.Error as e:
                raise StorageError(
                    f"Failed to initialize storage schema: {e}",
                    original_exception=e,
                ) from e
            self._schema_ready = True
        return conn

    def get(self, key: str) -> Optional[str]:
        try:
            row = (
                self._connection()
                .execute("SELECT value FROM kv_store WHERE key = $1", [key])
                .fetchone()
            )
        except duckdb.Error as e:
            raise StorageError(
                f"Failed to read key '{key}': {e}", original_exception=e
            ) from e
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        conn = self._connection()
        try:
            conn.begin()
            conn.execute(
                "INSERT INTO kv_store (key, value) VALUES ($1, $2) "
                "ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value",
                [key, value],
            )
            conn.commit()
        except duckdb.Error as e:
            logger.error(f"Failed to write key '{key}': {e}")
            try:
                conn.rollback()
            except duckdb.Error as rb_err:
                logger.error(f"Failed to rollback transaction: {rb_err}")
            raise StorageError(
                f"Failed to write key '{key}': {e}", original_exception=e
            ) from e
        logger.debug(f"Stored {len(value)} characters under '{key}'.")

    def close(self) -> None:
        self._handler.close_connection()
        self._schema_ready = False

    def __enter__(self) -> "DuckDBStorage":
        self._connection()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
