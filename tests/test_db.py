import sqlite3
import pytest
from unittest.mock import patch

from db import Store, STORAGE_KEYS
from errors import InvalidInput, StorageError

# run via: pytest tests/test_db.py -v


class TestLoadSave:

    def test_unsaved_collection_is_empty(self, store):
        assert store.load("members") == []
        assert store.load("payments") == []

    def test_save_replaces_whole_collection(self, store):
        store.save("members", [{"id": "a"}, {"id": "b"}])
        store.save("members", [{"id": "c"}])
        assert store.load("members") == [{"id": "c"}]

    def test_collections_are_independent(self, store):
        store.save("members", [{"id": "m"}])
        store.save("payments", [{"id": "p"}])
        assert store.load("members") == [{"id": "m"}]
        assert store.load("memberships") == []
        assert store.load("payments") == [{"id": "p"}]

    def test_order_is_preserved(self, store):
        records = [{"id": str(i)} for i in range(10)]
        store.save("memberships", records)
        assert store.load("memberships") == records

    def test_data_survives_new_store_on_same_file(self, tmp_path):
        path = tmp_path / "data.db"
        Store(path).save("members", [{"id": "x"}])
        assert Store(path).load("members") == [{"id": "x"}]

    def test_storage_keys(self):
        assert STORAGE_KEYS == {
            "members": "church_members",
            "memberships": "church_memberships",
            "payments": "church_payments",
        }


class TestErrors:

    def test_unknown_collection_load(self, store):
        with pytest.raises(InvalidInput):
            store.load("coaches")

    def test_unknown_collection_save(self, store):
        with pytest.raises(InvalidInput):
            store.save("coaches", [])

    def test_unknown_collection_in_save_many_writes_nothing(self, store):
        with pytest.raises(InvalidInput):
            store.save_many({"members": [{"id": "m"}], "coaches": []})
        assert store.load("members") == []

    def test_sqlite_error_surfaces_as_storage_error(self, store):
        with patch("db.sqlite3.connect", side_effect=sqlite3.OperationalError("unable to open database file")):
            with pytest.raises(StorageError):
                store.save("members", [{"id": "m"}])

    def test_failed_save_many_keeps_previous_state(self, store):
        store.save_many({"members": [{"id": "m1"}], "payments": [{"id": "p1"}]})

        real_connect = sqlite3.connect

        class FailingConn:
            def __init__(self, conn):
                self._conn = conn

            def executemany(self, sql, rows):
                rows = list(rows)
                self._conn.execute(sql, rows[0])
                raise sqlite3.OperationalError("disk I/O error")

            def __getattr__(self, name):
                return getattr(self._conn, name)

        with patch("db.sqlite3.connect", side_effect=lambda *a, **kw: FailingConn(real_connect(*a, **kw))):
            with pytest.raises(StorageError):
                store.save_many({"members": [], "payments": []})

        assert store.load("members") == [{"id": "m1"}]
        assert store.load("payments") == [{"id": "p1"}]
