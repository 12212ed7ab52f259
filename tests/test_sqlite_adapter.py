import sqlite3

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from dbvalidator.record_exists import NoRecordExists, RecordExists


def test_execute_returns_rows_and_columns(sqlite_adapter):
    rows, cols = sqlite_adapter.execute(
        "SELECT id, email FROM users WHERE id = ?", [1]
    )
    assert rows == [(1, "alice@example.com")]
    assert cols == ["id", "email"]


def test_fetch_one(sqlite_adapter):
    assert sqlite_adapter.fetch_one("SELECT email FROM users WHERE id = ?", [2]) == (
        "bob@example.com",
    )
    assert sqlite_adapter.fetch_one("SELECT email FROM users WHERE id = ?", [9]) is None


def test_only_select_is_allowed(sqlite_adapter):
    with pytest.raises(ValueError):
        sqlite_adapter.execute("DELETE FROM users")


def test_missing_file_raises(tmp_path):
    adapter = SQLiteAdapter(str(tmp_path / "nope.db"))
    with pytest.raises(FileNotFoundError):
        adapter.fetch_one("SELECT 1")


def test_in_memory_adapter():
    adapter = SQLiteAdapter(":memory:")
    try:
        adapter.connection.execute("CREATE TABLE tags(name TEXT)")
        adapter.connection.execute("INSERT INTO tags VALUES ('python')")
        v = NoRecordExists(table="tags", field="name", adapter=adapter)
        assert v.is_valid("rust")
        assert not v.is_valid("python")
    finally:
        adapter.close()


def _spy_connections(monkeypatch, adapter):
    opened = []
    connect = adapter._connect

    def spy():
        conn = connect()
        opened.append(conn)
        return conn

    monkeypatch.setattr(adapter, "_connect", spy)
    return opened


def _is_closed(conn: sqlite3.Connection) -> bool:
    try:
        conn.execute("SELECT 1")
    except sqlite3.ProgrammingError:
        return True
    return False


def test_connection_closed_after_failed_lookup(monkeypatch, sqlite_adapter):
    opened = _spy_connections(monkeypatch, sqlite_adapter)
    v = RecordExists(table="missing", field="email", adapter=sqlite_adapter)
    with pytest.raises(sqlite3.OperationalError):
        v.is_valid("x")
    assert len(opened) == 1
    assert _is_closed(opened[0])


def test_connection_closed_after_rejected_statement(monkeypatch, sqlite_adapter):
    opened = _spy_connections(monkeypatch, sqlite_adapter)
    with pytest.raises(ValueError):
        sqlite_adapter.execute("DELETE FROM users")
    assert all(_is_closed(c) for c in opened)


def test_connection_closed_after_successful_lookup(monkeypatch, sqlite_adapter):
    opened = _spy_connections(monkeypatch, sqlite_adapter)
    assert sqlite_adapter.fetch_one("SELECT id FROM users WHERE id = ?", [1]) == (1,)
    assert len(opened) == 1
    assert _is_closed(opened[0])
