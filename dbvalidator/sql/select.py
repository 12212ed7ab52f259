from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from sqlglot import exp

from dbvalidator.errors.exceptions import InvalidArgumentError
from dbvalidator.sql.platform import Platform
from dbvalidator.sql.predicates import (
    Expression,
    ParameterContainer,
    Predicate,
    Where,
)

WhereClause = Union[str, Predicate, Callable[[Where], Any], Mapping[str, Any]]


class TableIdentifier:
    def __init__(self, table: str, schema: Optional[str] = None):
        if not isinstance(table, str) or not table:
            raise InvalidArgumentError("Table name must be a non-empty string")
        self._table = table
        self._schema = schema or None

    def get_table(self) -> str:
        return self._table

    def get_schema(self) -> Optional[str]:
        return self._schema

    def get_table_and_schema(self) -> Tuple[str, Optional[str]]:
        return self._table, self._schema

    def to_table(self) -> exp.Table:
        return exp.table_(self._table, db=self._schema, quoted=True)

    def column(self, name: str) -> exp.Column:
        return exp.Column(
            this=exp.Star() if name == "*" else exp.to_identifier(name, quoted=True),
            table=exp.to_identifier(self._table, quoted=True),
            db=exp.to_identifier(self._schema, quoted=True) if self._schema else None,
        )

    def render(self, platform: Platform) -> str:
        return platform.render(self.to_table())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TableIdentifier):
            return NotImplemented
        return self.get_table_and_schema() == other.get_table_and_schema()

    def __hash__(self) -> int:
        return hash(self.get_table_and_schema())

    def __repr__(self) -> str:
        return f"TableIdentifier({self._table!r}, {self._schema!r})"


@dataclass(frozen=True)
class PreparedStatement:
    """SQL with driver placeholders plus the parameters to bind, in order."""

    sql: str
    parameters: ParameterContainer

    def values(self) -> List[Any]:
        return self.parameters.positional()


class Select:
    """
    Minimal SELECT builder: one table, a column list and an AND-ed WHERE set.

    Each render builds a fresh sqlglot tree, so the same instance can be
    prepared repeatedly (e.g. one validator checking many values).
    """

    def __init__(self, table: Union[str, TableIdentifier, None] = None):
        self._table: Optional[TableIdentifier] = None
        self._columns: List[str] = ["*"]
        self.where = Where()
        if table is not None:
            self.from_(table)

    def from_(self, table: Union[str, TableIdentifier]) -> "Select":
        self._table = table if isinstance(table, TableIdentifier) else TableIdentifier(table)
        return self

    def columns(self, columns: List[str]) -> "Select":
        if not columns:
            raise InvalidArgumentError("Select requires at least one column")
        self._columns = [str(c) for c in columns]
        return self

    def add_where(self, clause: WhereClause) -> "Select":
        if isinstance(clause, Predicate):
            self.where.add_predicate(clause)
        elif isinstance(clause, str):
            self.where.add_predicate(Expression(clause))
        elif isinstance(clause, Mapping):
            for identifier, value in clause.items():
                if value is None:
                    self.where.is_null(str(identifier))
                else:
                    self.where.equal_to(str(identifier), value)
        elif callable(clause):
            clause(self.where)
        else:
            raise InvalidArgumentError(
                f"Unsupported where clause: {type(clause).__name__}"
            )
        return self

    def get_raw_state(self, key: Optional[str] = None) -> Any:
        state: Dict[str, Any] = {
            "table": self._table,
            "columns": list(self._columns),
            "where": self.where,
        }
        if key is None:
            return state
        if key not in state:
            raise InvalidArgumentError(f"Unknown select state key: {key!r}")
        return state[key]

    # ------------------------------ rendering ------------------------------ #
    def build(self, platform: Platform, params: Optional[ParameterContainer]) -> exp.Select:
        if self._table is None:
            raise InvalidArgumentError("Select has no table")

        projections: List[exp.Expression] = []
        for c in self._columns:
            col = self._table.column(c)
            projections.append(col if c == "*" else exp.alias_(col, c, quoted=True))

        tree = exp.select(*projections).from_(self._table.to_table())
        condition = self.where.build(platform, params)
        if condition is not None:
            tree = tree.where(condition)
        return tree

    def get_sql_string(self, platform: Platform) -> str:
        """SQL with values inlined as literals. For logs and debugging only."""
        return platform.render(self.build(platform, None))

    def prepare(self, platform: Platform) -> PreparedStatement:
        params = ParameterContainer()
        sql = platform.render(self.build(platform, params), prepared=True)
        return PreparedStatement(sql=sql, parameters=params)
