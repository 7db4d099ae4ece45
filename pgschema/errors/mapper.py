from pgschema.errors.codes import ErrorCode

ERROR = "error"
WARNING = "warning"

SEVERITY_MAP = {
    ErrorCode.MULTIPLE_PRIMARY_KEYS: ERROR,
    ErrorCode.DUPLICATE_COLUMN: ERROR,
    ErrorCode.UNKNOWN_FK_COLUMN: ERROR,
    ErrorCode.INVALID_FK_ACTION: ERROR,
    ErrorCode.NO_PRIMARY_KEY: WARNING,
    ErrorCode.DUPLICATE_ENUM_VALUE: WARNING,
    ErrorCode.EMPTY_ENUM: WARNING,
    ErrorCode.UNKNOWN_OPERATOR: WARNING,
    ErrorCode.EMPTY_SQL: ERROR,
    ErrorCode.PARSE_ERROR: ERROR,
    ErrorCode.MULTIPLE_STATEMENTS: ERROR,
    ErrorCode.SCHEMA_FROZEN: ERROR,
}


def map_severity(code: ErrorCode | None) -> str:
    if code is None:
        return ERROR
    return SEVERITY_MAP.get(code, ERROR)


def is_error(code: ErrorCode | None) -> bool:
    return map_severity(code) == ERROR
