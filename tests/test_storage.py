from pathlib import Path

import pytest

from babushka.db import DuckDBStorage, MemoryStorage
from babushka.db.connection import ConnectionHandler
from babushka.exceptions import StorageConnectionError


class TestMemoryStorage:
    def test_get_and_set(self):
        storage = MemoryStorage({"a": "1"})
        assert storage.get("a") == "1"
        assert storage.get("b") is None
        storage.set("b", "2")
        storage.set("a", "3")
        assert storage.get("b") == "2"
        assert storage.get("a") == "3"

    def test_initial_mapping_is_copied(self):
        initial = {"a": "1"}
        storage = MemoryStorage(initial)
        storage.set("a", "2")
        assert initial["a"] == "1"


class TestDuckDBStorage:
    def test_value_survives_reopen(self, tmp_path: Path):
        db_file = tmp_path / "nested" / "babushka.db"
        with DuckDBStorage(db_file) as storage:
            storage.set("units", '{"custom_1": "Привет"}')
        assert db_file.exists()

        with DuckDBStorage(db_file) as storage:
            assert storage.get("units") == '{"custom_1": "Привет"}'

    def test_set_overwrites(self):
        with DuckDBStorage(":memory:") as storage:
            storage.set("k", "one")
            storage.set("k", "two")
            assert storage.get("k") == "two"

    def test_missing_key(self):
        with DuckDBStorage(":memory:") as storage:
            assert storage.get("nothing") is None

    def test_reconnects_after_close(self, tmp_path: Path):
        storage = DuckDBStorage(tmp_path / "db.duckdb")
        storage.set("k", "v")
        storage.close()
        assert storage.get("k") == "v"
        storage.close()

    def test_unreachable_path_raises(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        storage = DuckDBStorage(blocker / "babushka.db")
        with pytest.raises(StorageConnectionError):
            storage.get("k")


class TestConnectionHandler:
    def test_memory_path(self):
        handler = ConnectionHandler(":MEMORY:")
        assert handler.is_memory
        with handler as conn:
            assert conn.execute("SELECT 1").fetchone() == (1,)
        assert handler._connection is None

    def test_file_path_is_resolved(self, tmp_path: Path):
        handler = ConnectionHandler(tmp_path / "x.db")
        assert not handler.is_memory
        assert handler.db_path_resolved == (tmp_path / "x.db").resolve()
