"""
db.py
SQLite-backed collection store. Each collection (members, memberships,
payments) is kept as one JSON payload under its storage key and is always
replaced whole.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from config import settings
from errors import InvalidInput, StorageError
from log import get_logger

logger = get_logger(__name__)

STORAGE_KEYS = {
    "members": "church_members",
    "memberships": "church_memberships",
    "payments": "church_payments",
}


def _key(collection: str) -> str:
    try:
        return STORAGE_KEYS[collection]
    except KeyError:
        raise InvalidInput(f"Unknown collection: {collection!r}") from None


class Store:
    def __init__(self, db_file: str | Path | None = None):
        self.db_file = Path(db_file) if db_file else settings.DB_FILE
        self._create_tables()

    @contextmanager
    def get_conn(self):
        try:
            conn = sqlite3.connect(self.db_file)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self.db_file}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def _create_tables(self) -> None:
        with self.get_conn() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS collections (
                    key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL
                )
                """
            )

    def load(self, collection: str) -> list[dict]:
        key = _key(collection)
        with self.get_conn() as conn:
            row = conn.execute("SELECT payload FROM collections WHERE key = ?", (key,)).fetchone()
        if not row:
            return []
        return json.loads(row[0])

    def save(self, collection: str, records: list[dict]) -> None:
        self.save_many({collection: records})

    def save_many(self, collections: dict[str, list[dict]]) -> None:
        """
        Replace several collections in one transaction: either every
        collection is written or none is.
        """
        rows = [(_key(name), json.dumps(records)) for name, records in collections.items()]
        with self.get_conn() as conn:
            conn.executemany(
                """
                INSERT INTO collections(key, payload) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET payload=excluded.payload
                """,
                rows,
            )
        logger.debug("saved collections %s", ", ".join(collections))
