import sqlite3
import logging
from contextlib import closing
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from adapters.db.base import DBAdapter, ensure_select
from dbvalidator.sql.platform import SqlitePlatform

log = logging.getLogger(__name__)

MEMORY = ":memory:"


class SQLiteAdapter(DBAdapter):
    name = "sqlite"
    dialect = "sqlite"

    def __init__(self, path: str, timeout: float = 3.0):
        self.platform = SqlitePlatform()
        self.timeout = timeout
        self._memory: Optional[sqlite3.Connection] = None
        if path == MEMORY:
            # an in-memory DB only lives as long as its connection
            self.path = None
            self._memory = sqlite3.connect(MEMORY, check_same_thread=False)
            log.info("SQLiteAdapter initialized with in-memory DB")
        else:
            # resolve absolute path for safety
            self.path = Path(path).resolve()
            log.info("SQLiteAdapter initialized with DB path: %s", self.path)

    @property
    def connection(self) -> Optional[sqlite3.Connection]:
        """The shared in-memory connection (None for file-backed DBs)."""
        return self._memory

    def _connect(self) -> sqlite3.Connection:
        if self.path is None:
            raise RuntimeError("In-memory SQLite adapter has no file path")
        if not self.path.exists():
            raise FileNotFoundError(f"SQLite DB does not exist: {self.path}")
        # use proper SQLite URI (not .as_uri())
        uri = f"file:{self.path}?mode=ro"
        log.debug("SQLiteAdapter opening read-only connection to: %s", uri)
        return sqlite3.connect(uri, uri=True, timeout=self.timeout)

    def _run(
        self, conn: sqlite3.Connection, sql: str, params: Sequence[Any], one: bool
    ) -> Tuple[List[Tuple[Any, ...]], List[str]]:
        ensure_select(sql)
        log.debug(
            "Executing SQL: %s",
            sql.strip().replace("\n", " "),
            extra={"param_count": len(params)},
        )
        cur = conn.execute(sql, tuple(params))
        rows: List[Tuple[Any, ...]]
        if one:
            row = cur.fetchone()
            rows = [tuple(row)] if row is not None else []
        else:
            rows = [tuple(r) for r in cur.fetchall()]
        cols = [desc[0] for desc in (cur.description or ())]
        return rows, cols

    def execute(
        self, sql: str, params: Sequence[Any] = ()
    ) -> Tuple[List[Tuple[Any, ...]], List[str]]:
        if self._memory is not None:
            return self._run(self._memory, sql, params, one=False)
        with closing(self._connect()) as conn:
            rows, cols = self._run(conn, sql, params, one=False)
        log.info("Query executed successfully. Returned %d rows.", len(rows))
        return rows, cols

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Tuple[Any, ...]]:
        if self._memory is not None:
            rows, _ = self._run(self._memory, sql, params, one=True)
        else:
            with closing(self._connect()) as conn:
                rows, _ = self._run(conn, sql, params, one=True)
        return rows[0] if rows else None

    def close(self) -> None:
        if self._memory is not None:
            self._memory.close()
            self._memory = None
