from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple, Union

from pgschema.errors.codes import ErrorCode

Scalar = Union[str, int, float, bool]
FkAction = Literal["CASCADE", "SET NULL", "RESTRICT", "NO ACTION"]

FK_ACTIONS = ("CASCADE", "SET NULL", "RESTRICT", "NO ACTION")
FILTER_OPERATORS = ("=", "!=", "<", "<=", ">", ">=", "LIKE", "ILIKE", "IS", "IS NOT")


def _pick(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in raw:
            return raw[k]
    return default


# =====================
# Table description
# =====================


@dataclass(frozen=True)
class EnumValue:
    value: Union[str, int, float]
    label: Optional[str] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "EnumValue":
        return cls(value=raw["value"], label=raw.get("label"))


@dataclass(frozen=True)
class Column:
    """
    One column of a table.

    `foreign_key` is informational only; the actual constraint comes from
    a ForeignKey entry on the descriptor. `None` on the optional fields
    means "not supplied".
    """

    name: str
    sql_type: Optional[str] = None
    primary_key: bool = False
    nullable: bool = False
    auto_increment: bool = False
    foreign_key: bool = False
    default_value: Optional[Scalar] = None
    enum_values: Optional[Tuple[EnumValue, ...]] = None

    def __post_init__(self) -> None:
        if self.enum_values is not None:
            coerced = tuple(
                ev if isinstance(ev, EnumValue) else EnumValue.from_mapping(ev)
                for ev in self.enum_values
            )
            object.__setattr__(self, "enum_values", coerced)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Column":
        """Accepts both camelCase (sqlType, enumValues) and snake_case keys."""
        return cls(
            name=raw["name"],
            sql_type=_pick(raw, "sql_type", "sqlType"),
            primary_key=bool(_pick(raw, "primary_key", "primaryKey", default=False)),
            nullable=bool(raw.get("nullable", False)),
            auto_increment=bool(
                _pick(raw, "auto_increment", "autoIncrement", default=False)
            ),
            foreign_key=bool(_pick(raw, "foreign_key", "foreignKey", default=False)),
            default_value=_pick(raw, "default_value", "defaultValue"),
            enum_values=_pick(raw, "enum_values", "enumValues"),
        )


@dataclass(frozen=True)
class ForeignKey:
    local_column: str
    referenced_table: str
    referenced_column: str
    on_delete: Optional[FkAction] = None
    on_update: Optional[FkAction] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ForeignKey":
        return cls(
            local_column=_pick(raw, "local_column", "localColumn"),
            referenced_table=_pick(raw, "referenced_table", "referencedTable"),
            referenced_column=_pick(raw, "referenced_column", "referencedColumn"),
            on_delete=_pick(raw, "on_delete", "onDelete"),
            on_update=_pick(raw, "on_update", "onUpdate"),
        )


# =====================
# Query filters
# =====================


@dataclass(frozen=True)
class Filter:
    """
    Predicate over a single column.

    `column` is the bare column name; `alias` is the alias-prefixed form
    (e.g. "mt_id"). A `None` value renders as IS NULL / IS NOT NULL.
    """

    column: Optional[str] = None
    alias: Optional[str] = None
    operator: Optional[str] = "="
    value: Optional[Scalar] = None

    def __post_init__(self) -> None:
        if self.column is None and self.alias is None:
            raise ValueError("Filter needs either 'column' or 'alias'")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Filter":
        return cls(
            column=raw.get("column"),
            alias=raw.get("alias"),
            operator=raw.get("operator", "="),
            value=raw.get("value"),
        )


# =====================
# Validation / verification results
# =====================


@dataclass(frozen=True)
class ValidationIssue:
    code: ErrorCode
    message: str
    column: Optional[str] = None


@dataclass(frozen=True)
class StageTrace:
    stage: str
    duration_ms: float
    summary: str = ""
    notes: Optional[Dict[str, Any]] = None
    sql_length: Optional[int] = None


@dataclass(frozen=True)
class StageResult:
    ok: bool

    data: Optional[Any] = None
    trace: Optional[StageTrace] = None

    # Human-readable error messages
    error: Optional[List[str]] = None

    error_code: Optional[ErrorCode] = None
