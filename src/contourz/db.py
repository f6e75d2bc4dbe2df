from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from contourz.config import DEFAULT_DB_PATH

DB_PATH = DEFAULT_DB_PATH

SCHEMA = """\
CREATE TABLE IF NOT EXISTS auth_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path or DB_PATH))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path | None = None) -> None:
    target = db_path or DB_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    conn = _connect(target)
    conn.executescript(SCHEMA)
    conn.close()


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    conn = _connect(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


class SessionStorage:
    """Key/value storage for the persisted auth session."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path
        init_db(db_path)

    def get_item(self, key: str) -> str | None:
        with get_db(self.db_path) as db:
            row = db.execute(
                "SELECT value FROM auth_storage WHERE key = ?", (key,)
            ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        with get_db(self.db_path) as db:
            db.execute(
                """INSERT INTO auth_storage (key, value) VALUES (?, ?)
                   ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                  updated_at = datetime('now')""",
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with get_db(self.db_path) as db:
            db.execute("DELETE FROM auth_storage WHERE key = ?", (key,))


class MemoryStorage:
    """In-process storage, used when nothing should touch disk."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
