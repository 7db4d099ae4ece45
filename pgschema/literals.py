from __future__ import annotations

from typing import Any


def is_number(value: Any) -> bool:
    # bool is an int subclass; it never renders as a bare number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def quote_string(value: Any) -> str:
    """Single-quoted SQL string literal with embedded quotes doubled."""
    return "'" + str(value).replace("'", "''") + "'"


def default_literal(value: Any) -> str:
    """Literal used in a column's DEFAULT clause."""
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def enum_literal(value: Any) -> str:
    """Literal for an enum value in CHECK constraints and CASE expressions."""
    if is_number(value):
        return str(value)
    return quote_string(value)


def filter_literal(value: Any) -> str:
    """Literal for a non-null filter value."""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if is_number(value):
        return str(value)
    return quote_string(value)


def enum_label(value: Any, label: Any = None) -> str:
    """
    Quoted label for an enum value in a CASE expression.

    Missing labels fall back to `Value "<value>"` with double quotes
    backslash-escaped.
    """
    if label:
        return quote_string(label)
    escaped = str(value).replace('"', '\\"')
    return quote_string(f'Value "{escaped}"')
