from __future__ import annotations

import pytest

from contourz.db import MemoryStorage, SessionStorage, get_db, init_db


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "test.db"
    init_db(path)
    return path


def test_schema_creation(db_path):
    with get_db(db_path) as db:
        tables = db.execute(
            "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
        ).fetchall()
    names = [t["name"] for t in tables]
    assert "auth_storage" in names


def test_init_db_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "contourz.db"
    init_db(path)
    assert path.exists()


def test_get_db_rolls_back_on_error(db_path):
    with pytest.raises(RuntimeError):
        with get_db(db_path) as db:
            db.execute("INSERT INTO auth_storage (key, value) VALUES ('k', 'v')")
            raise RuntimeError("boom")

    with get_db(db_path) as db:
        count = db.execute("SELECT COUNT(*) FROM auth_storage").fetchone()[0]
    assert count == 0


def test_session_storage_roundtrip(db_path):
    storage = SessionStorage(db_path)
    assert storage.get_item("session") is None

    storage.set_item("session", "first")
    storage.set_item("session", "second")
    assert storage.get_item("session") == "second"

    storage.remove_item("session")
    assert storage.get_item("session") is None


def test_session_storage_persists_across_instances(db_path):
    SessionStorage(db_path).set_item("session", '{"access_token": "abc"}')
    assert SessionStorage(db_path).get_item("session") == '{"access_token": "abc"}'


def test_remove_missing_key_is_noop(db_path):
    storage = SessionStorage(db_path)
    storage.remove_item("nothing")
    assert storage.get_item("nothing") is None


def test_memory_storage():
    storage = MemoryStorage()
    storage.set_item("a", "1")
    assert storage.get_item("a") == "1"
    storage.remove_item("a")
    storage.remove_item("a")
    assert storage.get_item("a") is None
