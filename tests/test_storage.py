"""
Storage Tests
=============
"""

import pytest

from pagepix.errors import ErrorCode, StorageError
from pagepix.storage import MemoryStore, SQLiteKeyValueStore


@pytest.fixture
def sqlite_store(tmp_path):
    return SQLiteKeyValueStore(tmp_path / "nested" / "pagepix.db")


class TestSQLiteKeyValueStore:
    def test_creates_parent_directory(self, tmp_path, sqlite_store):
        assert (tmp_path / "nested" / "pagepix.db").exists()

    def test_get_missing_is_none(self, sqlite_store):
        assert sqlite_store.get("absent") is None

    def test_set_then_get(self, sqlite_store):
        sqlite_store.set("pagepix-theme", "dark")
        assert sqlite_store.get("pagepix-theme") == "dark"

    def test_set_overwrites(self, sqlite_store):
        sqlite_store.set("k", "1")
        sqlite_store.set("k", "2")
        assert sqlite_store.get("k") == "2"

    def test_remove(self, sqlite_store):
        sqlite_store.set("k", "1")
        sqlite_store.remove("k")
        sqlite_store.remove("k")
        assert sqlite_store.get("k") is None

    def test_persists_across_instances(self, tmp_path, sqlite_store):
        sqlite_store.set("k", '{"a": 1}')
        again = SQLiteKeyValueStore(tmp_path / "nested" / "pagepix.db")
        assert again.get("k") == '{"a": 1}'

    def test_directory_path_raises_storage_error(self, tmp_path):
        target = tmp_path / "a_directory"
        target.mkdir()
        with pytest.raises(StorageError) as exc_info:
            SQLiteKeyValueStore(target)
        assert exc_info.value.code is ErrorCode.E201


class TestMemoryStore:
    def test_initial_contents_are_copied(self):
        initial = {"k": "v"}
        store = MemoryStore(initial)
        store.set("other", "x")
        assert "other" not in initial
        assert store.keys() == ["k", "other"]

    def test_remove_absent_is_ok(self):
        MemoryStore().remove("nothing")
