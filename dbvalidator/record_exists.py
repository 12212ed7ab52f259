from __future__ import annotations

from typing import Any

from dbvalidator.db_validator import AbstractDbValidator
from dbvalidator.errors.exceptions import ValidatorRuntimeError


class RecordExists(AbstractDbValidator):
    """Confirms a record exists in a table."""

    def is_valid(self, value: Any) -> bool:
        if self.get_adapter() is None:
            raise ValidatorRuntimeError("No database adapter present")

        valid = True
        self.set_value(value)

        result = self.query(value)
        if not result:
            valid = False
            self.error(self.ERROR_NO_RECORD_FOUND)

        self.metrics.inc_validation(validator=type(self).__name__, valid=valid)
        return valid


class NoRecordExists(AbstractDbValidator):
    """Confirms a record does not exist in a table."""

    def is_valid(self, value: Any) -> bool:
        if self.get_adapter() is None:
            raise ValidatorRuntimeError("No database adapter present")

        valid = True
        self.set_value(value)

        result = self.query(value)
        if result is not None:
            valid = False
            self.error(self.ERROR_RECORD_FOUND)

        self.metrics.inc_validation(validator=type(self).__name__, valid=valid)
        return valid
