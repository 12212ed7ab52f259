from __future__ import annotations

import logging
import time
from typing import Any, Callable, ClassVar, Dict, Mapping, Optional, Union

from adapters.db.base import DBAdapter
from adapters.metrics.base import Metrics
from adapters.metrics.noop import NoOpMetrics
from dbvalidator.errors.codes import MessageKey
from dbvalidator.errors.exceptions import InvalidArgumentError
from dbvalidator.sql.platform import Platform, Sql92Platform
from dbvalidator.sql.predicates import Predicate, Where
from dbvalidator.sql.select import Select, TableIdentifier
from dbvalidator.validator import AbstractValidator

log = logging.getLogger(__name__)

Exclude = Union[str, Mapping[str, Any], Predicate, Where, Callable[[Where], Any]]

VALUE_PARAMETER = "where1"
SCALAR_TYPES = (str, int, float, bool)


class AbstractDbValidator(AbstractValidator):
    """
    Base class for database record validators.

    Options (keyword-only):
    - adapter: DBAdapter to run the lookup through (required)
    - table:   table to validate against
    - schema:  schema the table lives in
    - field:   column to match the value against
    - exclude: optional clause excluding a record from the match, either
               {"field": ..., "value": ...} or anything Select.add_where accepts
    - select:  optional prebuilt Select; overrides table/schema/field/exclude
    - metrics: Metrics sink (defaults to no-op)
    """

    ERROR_NO_RECORD_FOUND = MessageKey.NO_RECORD_FOUND.value
    ERROR_RECORD_FOUND = MessageKey.RECORD_FOUND.value

    message_templates: ClassVar[Dict[str, str]] = {
        ERROR_NO_RECORD_FOUND: "No record matching the input was found",
        ERROR_RECORD_FOUND: "A record matching the input was found",
    }

    def __init__(
        self,
        *,
        adapter: Optional[DBAdapter] = None,
        table: str = "",
        schema: Optional[str] = None,
        field: str = "",
        exclude: Optional[Exclude] = None,
        select: Optional[Select] = None,
        metrics: Optional[Metrics] = None,
        **options: Any,
    ) -> None:
        if adapter is None:
            raise InvalidArgumentError("Adapter option missing.")
        self.adapter: Optional[DBAdapter] = adapter

        self._table = table or ""
        self._schema = schema
        self._field = field or ""
        self._exclude = exclude
        self._select = select if isinstance(select, Select) else None

        if self._table == "" and self._schema is None:
            raise InvalidArgumentError("Table or Schema option missing.")
        if self._field == "":
            raise InvalidArgumentError("Field option missing.")

        self.metrics: Metrics = metrics or NoOpMetrics()
        super().__init__(**options)

    # ------------------------------ accessors ------------------------------ #
    def get_adapter(self) -> Optional[DBAdapter]:
        return self.adapter

    def set_adapter(self, adapter: Optional[DBAdapter]) -> None:
        self.adapter = adapter

    def get_exclude(self) -> Optional[Exclude]:
        return self._exclude

    def get_field(self) -> str:
        return self._field

    def get_table(self) -> str:
        return self._table

    def get_schema(self) -> Optional[str]:
        return self._schema

    def set_metrics(self, metrics: Metrics) -> None:
        self.metrics = metrics

    # ------------------------------ query ------------------------------ #
    def get_select(self) -> Select:
        """
        Select used for the lookup. Built from table/schema/field/exclude
        unless a Select was supplied to the constructor.
        """
        if self._select is not None:
            return self._select

        select = Select()
        select.from_(TableIdentifier(self._table, self._schema)).columns([self._field])
        select.where.equal_to(self._field, "")

        exclude = self.get_exclude()
        if exclude is not None:
            if isinstance(exclude, Mapping) and "field" in exclude and "value" in exclude:
                select.where.not_equal_to(str(exclude["field"]), str(exclude["value"]))
            else:
                select.add_where(exclude)

        return select

    def _platform(self) -> Platform:
        return getattr(self.adapter, "platform", None) or Sql92Platform()

    def query(self, value: Any) -> Any:
        """Run the lookup for value. Returns the first matching row or None."""
        statement = self.get_select().prepare(self._platform())

        if statement.parameters:
            if value is not None and not isinstance(value, SCALAR_TYPES):
                raise InvalidArgumentError("Value must be string, integer or null")
            if VALUE_PARAMETER in statement.parameters:
                statement.parameters[VALUE_PARAMETER] = value

        name = type(self).__name__
        t0 = time.perf_counter()
        try:
            row = self.adapter.fetch_one(statement.sql, statement.values())  # type: ignore[union-attr]
        except Exception as e:
            self.metrics.inc_query(validator=name, outcome="error")
            self.metrics.inc_query_error(validator=name, error_type=type(e).__name__)
            log.warning(
                "Record lookup failed",
                extra={
                    "validator": name,
                    "sql": statement.sql,
                    "error_type": type(e).__name__,
                },
            )
            raise
        finally:
            self.metrics.observe_query_duration_ms(
                validator=name, dt_ms=(time.perf_counter() - t0) * 1000
            )

        self.metrics.inc_query(
            validator=name, outcome=("found" if row is not None else "not_found")
        )
        log.debug(
            "Record lookup executed",
            extra={"validator": name, "sql": statement.sql, "found": row is not None},
        )
        return row
