import logging
from typing import Any, List, Optional, Sequence, Tuple

import psycopg

from adapters.db.base import DBAdapter, ensure_select
from dbvalidator.sql.platform import PostgresPlatform

log = logging.getLogger(__name__)


class PostgresAdapter(DBAdapter):
    name = "postgres"
    dialect = "postgres"

    def __init__(self, dsn: str):
        """
        DSN example:
        "dbname=demo user=postgres password=postgres host=localhost port=5432"
        """
        if not dsn:
            raise ValueError("PostgresAdapter requires a non-empty DSN")
        self.dsn = dsn
        self.platform = PostgresPlatform()

    def _run(
        self, sql: str, params: Sequence[Any], one: bool
    ) -> Tuple[List[Tuple[Any, ...]], List[str]]:
        ensure_select(sql)
        with psycopg.connect(self.dsn) as conn:
            # Make it explicitly read-only at the session level
            conn.read_only = True
            with conn.cursor() as cur:
                log.debug(
                    "Executing SQL: %s",
                    sql.strip().replace("\n", " "),
                    extra={"param_count": len(params)},
                )
                cur.execute(sql, tuple(params))
                if one:
                    row = cur.fetchone()
                    rows = [tuple(row)] if row is not None else []
                else:
                    rows = [tuple(r) for r in (cur.fetchall() or [])]
                desc = cur.description or ()
                cols: List[str] = [d[0] for d in desc if d]
                return rows, cols

    def execute(
        self, sql: str, params: Sequence[Any] = ()
    ) -> Tuple[List[Tuple[Any, ...]], List[str]]:
        """
        Execute a read-only SELECT query and return (rows, columns).
        """
        return self._run(sql, params, one=False)

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Tuple[Any, ...]]:
        rows, _ = self._run(sql, params, one=True)
        return rows[0] if rows else None
