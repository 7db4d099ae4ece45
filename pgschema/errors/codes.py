from enum import Enum


class ErrorCode(str, Enum):
    # --- Schema shape ---
    MULTIPLE_PRIMARY_KEYS = "MULTIPLE_PRIMARY_KEYS"
    NO_PRIMARY_KEY = "NO_PRIMARY_KEY"
    DUPLICATE_COLUMN = "DUPLICATE_COLUMN"

    # --- Enum columns ---
    DUPLICATE_ENUM_VALUE = "DUPLICATE_ENUM_VALUE"
    EMPTY_ENUM = "EMPTY_ENUM"

    # --- Foreign keys ---
    UNKNOWN_FK_COLUMN = "UNKNOWN_FK_COLUMN"
    INVALID_FK_ACTION = "INVALID_FK_ACTION"

    # --- Filters ---
    UNKNOWN_OPERATOR = "UNKNOWN_OPERATOR"

    # --- Verifier ---
    EMPTY_SQL = "EMPTY_SQL"
    PARSE_ERROR = "PARSE_ERROR"
    MULTIPLE_STATEMENTS = "MULTIPLE_STATEMENTS"

    # --- Lifecycle ---
    SCHEMA_FROZEN = "SCHEMA_FROZEN"
