"""
Registry mapping simple string keys to concrete validator classes.
Used by the plugin manager to resolve names and aliases.
"""

from typing import Dict, Type

from dbvalidator.record_exists import NoRecordExists, RecordExists
from dbvalidator.validator import AbstractValidator

VALIDATORS: Dict[str, Type[AbstractValidator]] = {
    "RecordExists": RecordExists,
    "NoRecordExists": NoRecordExists,
}

ALIASES: Dict[str, str] = {
    "dbnorecordexists": "NoRecordExists",
    "dbNoRecordExists": "NoRecordExists",
    "DbNoRecordExists": "NoRecordExists",
    "dbrecordexists": "RecordExists",
    "dbRecordExists": "RecordExists",
    "DbRecordExists": "RecordExists",
}
