from __future__ import annotations

from abc import ABC, abstractmethod
from functools import reduce
from typing import Any, Dict, List, Optional, Type

from sqlglot import exp
from sqlglot.errors import ParseError

from dbvalidator.errors.exceptions import InvalidArgumentError
from dbvalidator.sql.platform import Platform

OPERATORS: Dict[str, Type[exp.Binary]] = {
    "=": exp.EQ,
    "!=": exp.NEQ,
    "<>": exp.NEQ,
    "<": exp.LT,
    "<=": exp.LTE,
    ">": exp.GT,
    ">=": exp.GTE,
}


class ParameterContainer(dict):
    """
    Ordered name -> value mapping of bound parameters.

    Names are generated as where1, where2, ... in render order, so the
    value list can be handed to a positional-paramstyle driver as-is.
    """

    prefix = "where"

    def bind(self, value: Any) -> str:
        name = f"{self.prefix}{len(self) + 1}"
        self[name] = value
        return name

    def positional(self) -> List[Any]:
        return list(self.values())


class Predicate(ABC):
    @abstractmethod
    def build(self, platform: Platform, params: Optional[ParameterContainer]) -> exp.Expression:
        """
        Build the sqlglot condition. With params=None values are inlined as
        literals (debug output); otherwise they are bound into params.
        """

    def render(self, platform: Platform, params: Optional[ParameterContainer] = None) -> str:
        return platform.render(self.build(platform, params), prepared=params is not None)


def column(identifier: str) -> exp.Column:
    """Quoted column for "col", "table.col", "schema.table.col" or "catalog.schema.table.col"."""
    parts = str(identifier).split(".")
    if not all(parts) or len(parts) > 4:
        raise InvalidArgumentError(f"Invalid column identifier: {identifier!r}")
    name = parts.pop()
    qualifiers = {
        key: exp.to_identifier(part, quoted=True)
        for key, part in zip(("table", "db", "catalog"), reversed(parts))
    }
    return exp.Column(this=exp.to_identifier(name, quoted=True), **qualifiers)


def value_node(platform: Platform, params: Optional[ParameterContainer], value: Any) -> exp.Expression:
    if params is None:
        return exp.convert(value)
    return platform.bind_marker(params.bind(value))


class Operator(Predicate):
    def __init__(self, identifier: str, operator: str, value: Any):
        if not identifier:
            raise InvalidArgumentError("Predicate identifier must be a non-empty string")
        if operator not in OPERATORS:
            raise InvalidArgumentError(f"Unsupported operator: {operator!r}")
        self.identifier = identifier
        self.operator = operator
        self.value = value

    def build(self, platform: Platform, params: Optional[ParameterContainer]) -> exp.Expression:
        node = OPERATORS[self.operator]
        return node(this=column(self.identifier), expression=value_node(platform, params, self.value))

    def __repr__(self) -> str:
        return f"Operator({self.identifier!r}, {self.operator!r}, {self.value!r})"


class IsNull(Predicate):
    def __init__(self, identifier: str):
        if not identifier:
            raise InvalidArgumentError("Predicate identifier must be a non-empty string")
        self.identifier = identifier

    def build(self, platform: Platform, params: Optional[ParameterContainer]) -> exp.Expression:
        return exp.Is(this=column(self.identifier), expression=exp.Null())

    def __repr__(self) -> str:
        return f"IsNull({self.identifier!r})"


class Expression(Predicate):
    """
    SQL condition fragment written in generic SQL. Each '?' in it is
    replaced, left to right, by one of the given parameters.
    """

    def __init__(self, sql: str, *parameters: Any):
        if not isinstance(sql, str) or not sql.strip():
            raise InvalidArgumentError("Expression must be a non-empty string")
        try:
            self._tree = exp.condition(sql)
        except ParseError as e:
            raise InvalidArgumentError(f"Invalid SQL expression {sql!r}: {e}") from e

        expected = len(self._placeholders(self._tree))
        if parameters and expected != len(parameters):
            raise InvalidArgumentError(
                f"Expression expects {expected} parameter(s), got {len(parameters)}"
            )
        self.sql = sql
        self.parameters = parameters

    @staticmethod
    def _placeholders(tree: exp.Expression) -> List[exp.Placeholder]:
        return [p for p in tree.find_all(exp.Placeholder, bfs=False) if not p.this]

    def build(self, platform: Platform, params: Optional[ParameterContainer]) -> exp.Expression:
        tree = self._tree.copy()
        if not self.parameters:
            return tree
        for node, value in zip(self._placeholders(tree), self.parameters):
            replacement = value_node(platform, params, value)
            if node is tree:
                tree = replacement
            else:
                node.replace(replacement)
        return tree

    def __repr__(self) -> str:
        return f"Expression({self.sql!r})"


class Where(Predicate):
    """Set of predicates combined with AND."""

    def __init__(self, predicates: Optional[List[Predicate]] = None):
        self._predicates: List[Predicate] = list(predicates or [])

    def add_predicate(self, predicate: Predicate) -> "Where":
        if not isinstance(predicate, Predicate):
            raise InvalidArgumentError(
                f"Expected a Predicate, got {type(predicate).__name__}"
            )
        self._predicates.append(predicate)
        return self

    def equal_to(self, identifier: str, value: Any) -> "Where":
        return self.add_predicate(Operator(identifier, "=", value))

    def not_equal_to(self, identifier: str, value: Any) -> "Where":
        return self.add_predicate(Operator(identifier, "!=", value))

    def is_null(self, identifier: str) -> "Where":
        return self.add_predicate(IsNull(identifier))

    def expression(self, sql: str, *parameters: Any) -> "Where":
        return self.add_predicate(Expression(sql, *parameters))

    @property
    def predicates(self) -> List[Predicate]:
        return list(self._predicates)

    def count(self) -> int:
        return len(self._predicates)

    def __len__(self) -> int:
        return len(self._predicates)

    def build(
        self, platform: Platform, params: Optional[ParameterContainer]
    ) -> Optional[exp.Expression]:
        conditions: List[exp.Expression] = []
        for p in self._predicates:
            node = p.build(platform, params)
            if node is None:
                continue
            if isinstance(p, Where) and len(p) > 1:
                node = exp.Paren(this=node)
            conditions.append(node)
        if not conditions:
            return None
        return reduce(lambda left, right: exp.And(this=left, expression=right), conditions)

    def render(self, platform: Platform, params: Optional[ParameterContainer] = None) -> str:
        node = self.build(platform, params)
        return "" if node is None else platform.render(node, prepared=params is not None)
