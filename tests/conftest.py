from __future__ import annotations

import sqlite3
from typing import Any, List, Optional, Sequence, Tuple

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from dbvalidator.sql.platform import Sql92Platform


class FakeAdapter:
    """In-memory adapter double: records every call and returns a canned row."""

    name = "fake"
    dialect = "sql92"

    def __init__(self, row: Optional[Tuple[Any, ...]] = None):
        self.platform = Sql92Platform()
        self.row = row
        self.calls: List[Tuple[str, List[Any]]] = []

    def execute(self, sql: str, params: Sequence[Any] = ()):
        self.calls.append((sql, list(params)))
        rows = [self.row] if self.row is not None else []
        return rows, ["one"]

    def fetch_one(self, sql: str, params: Sequence[Any] = ()):
        self.calls.append((sql, list(params)))
        return self.row


@pytest.fixture
def has_result() -> FakeAdapter:
    return FakeAdapter(row=("one",))


@pytest.fixture
def no_result() -> FakeAdapter:
    return FakeAdapter(row=None)


@pytest.fixture
def users_db_path(tmp_path) -> str:
    p = tmp_path / "users.db"
    conn = sqlite3.connect(str(p))
    try:
        conn.executescript(
            """
            CREATE TABLE users(id INTEGER PRIMARY KEY, email TEXT, username TEXT);
            INSERT INTO users VALUES (1, 'alice@example.com', 'alice');
            INSERT INTO users VALUES (2, 'bob@example.com', 'bob');
            INSERT INTO users VALUES (3, 'carol@example.com', NULL);
            """
        )
        conn.commit()
    finally:
        conn.close()
    return str(p)


@pytest.fixture
def sqlite_adapter(users_db_path: str) -> SQLiteAdapter:
    return SQLiteAdapter(users_db_path)
