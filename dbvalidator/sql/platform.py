"""
SQL dialect rendering on top of sqlglot.

A Platform never talks to a database. Adapters expose the platform matching
their driver, so statements can be rendered in the right sqlglot dialect
with the driver's parameter markers.
"""

from __future__ import annotations

import re
from typing import Dict, Optional, Type

from sqlglot import exp

from dbvalidator.errors.exceptions import InvalidArgumentError

# NUL can't occur in SQL text accepted by sqlite3 or libpq, so a marker
# wrapped in it never collides with a quoted identifier or literal.
_MARK = "\x00"
_MARKER_RE = re.compile(f"{_MARK}([^{_MARK}]+){_MARK}")


class Platform:
    name = "sql92"
    dialect: Optional[str] = None  # sqlglot dialect; None is generic SQL

    def bind_marker(self, name: str) -> exp.Expression:
        """Tree node standing in for a bound parameter until render()."""
        return exp.Var(this=f"{_MARK}{name}{_MARK}")

    def placeholder(self, name: str) -> str:
        return "?"

    def render(self, tree: exp.Expression, *, prepared: bool = False) -> str:
        sql = tree.sql(dialect=self.dialect)
        if not prepared:
            return sql
        return _MARKER_RE.sub(lambda m: self.placeholder(m.group(1)), self.escape(sql))

    def escape(self, sql: str) -> str:
        """Escape SQL text that is sent alongside bound parameters."""
        return sql


class Sql92Platform(Platform):
    name = "sql92"


class SqlitePlatform(Platform):
    name = "sqlite"
    dialect = "sqlite"


class PostgresPlatform(Platform):
    name = "postgres"
    dialect = "postgres"

    def placeholder(self, name: str) -> str:
        # psycopg "format" paramstyle
        return "%s"

    def escape(self, sql: str) -> str:
        # psycopg reads every % in the query text as a parameter marker
        return sql.replace("%", "%%")


PLATFORMS: Dict[str, Type[Platform]] = {
    "sql92": Sql92Platform,
    "sqlite": SqlitePlatform,
    "postgres": PostgresPlatform,
    "postgresql": PostgresPlatform,
}


def platform_for(dialect: str) -> Platform:
    key = (dialect or "").strip().lower()
    cls = PLATFORMS.get(key)
    if cls is None:
        raise InvalidArgumentError(f"Unknown SQL dialect: {dialect!r}")
    return cls()
