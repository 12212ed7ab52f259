from typing import Any, List, Optional, Protocol, Sequence, Tuple

from dbvalidator.sql.platform import Platform


class DBAdapter(Protocol):
    """Database adapter for read-only, parameterized lookups."""

    name: str
    dialect: str
    platform: Platform

    def execute(
        self, sql: str, params: Sequence[Any] = ()
    ) -> Tuple[List[Tuple[Any, ...]], List[str]]:
        """Execute a SELECT query and return (rows, columns)."""

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Tuple[Any, ...]]:
        """Execute a SELECT query and return the first row, or None."""


def ensure_select(sql: str) -> str:
    if not sql or not sql.strip().lower().startswith("select"):
        raise ValueError("Only SELECT statements are allowed.")
    return sql
