"""Table-schema descriptors that render PostgreSQL DDL and DML text."""

from .descriptor import SchemaDescriptor
from .types import Column, EnumValue, Filter, ForeignKey, ValidationIssue
from .validator import check_filter, validate_schema
from .verifier import StatementVerifier

__all__ = [
    "SchemaDescriptor",
    "Column",
    "EnumValue",
    "Filter",
    "ForeignKey",
    "ValidationIssue",
    "check_filter",
    "validate_schema",
    "StatementVerifier",
]
