from enum import Enum


class MessageKey(str, Enum):
    # --- Record lookups ---
    NO_RECORD_FOUND = "noRecordFound"
    RECORD_FOUND = "recordFound"
