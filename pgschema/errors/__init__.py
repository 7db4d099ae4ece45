from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from pgschema.errors.codes import ErrorCode

if TYPE_CHECKING:
    from pgschema.types import ValidationIssue


@dataclass
class SchemaError(Exception):
    """Base class for descriptor-level errors."""

    message: str
    code: Optional[ErrorCode] = None
    details: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return self.message


@dataclass
class SchemaFrozenError(SchemaError):
    code: Optional[ErrorCode] = ErrorCode.SCHEMA_FROZEN


@dataclass
class SchemaValidationError(SchemaError):
    code: Optional[ErrorCode] = None
    issues: List[ValidationIssue] = field(default_factory=list)


__all__ = [
    "ErrorCode",
    "SchemaError",
    "SchemaFrozenError",
    "SchemaValidationError",
]
