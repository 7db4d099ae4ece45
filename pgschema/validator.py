from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from pgschema.errors.codes import ErrorCode
from pgschema.metrics import validation_issues_total
from pgschema.settings import Settings, get_settings
from pgschema.types import (
    FILTER_OPERATORS,
    FK_ACTIONS,
    Column,
    Filter,
    ForeignKey,
    ValidationIssue,
)

log = logging.getLogger(__name__)


def _check_columns(columns: Sequence[Column]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []

    primary = [c.name for c in columns if c.primary_key]
    if len(primary) > 1:
        issues.append(
            ValidationIssue(
                ErrorCode.MULTIPLE_PRIMARY_KEYS,
                f"more than one primary key ({', '.join(primary)}); "
                f"'{primary[0]}' is used",
                column=primary[0],
            )
        )
    elif not primary:
        issues.append(
            ValidationIssue(
                ErrorCode.NO_PRIMARY_KEY,
                "no primary key; UPDATE statements cannot be generated",
            )
        )

    seen: set[str] = set()
    for col in columns:
        if col.name in seen:
            issues.append(
                ValidationIssue(
                    ErrorCode.DUPLICATE_COLUMN,
                    f"column '{col.name}' is declared more than once",
                    column=col.name,
                )
            )
        seen.add(col.name)

        if col.enum_values is None:
            continue
        if not col.enum_values:
            issues.append(
                ValidationIssue(
                    ErrorCode.EMPTY_ENUM,
                    f"column '{col.name}' has an empty enum value list",
                    column=col.name,
                )
            )
        values: list[Any] = []
        for ev in col.enum_values:
            if ev.value in values:
                issues.append(
                    ValidationIssue(
                        ErrorCode.DUPLICATE_ENUM_VALUE,
                        f"enum value {ev.value!r} repeats on column '{col.name}'",
                        column=col.name,
                    )
                )
            values.append(ev.value)

    return issues


def _check_constraints(
    columns: Sequence[Column], constraints: Sequence[ForeignKey]
) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    names = {c.name for c in columns}
    for fk in constraints:
        if fk.local_column not in names:
            issues.append(
                ValidationIssue(
                    ErrorCode.UNKNOWN_FK_COLUMN,
                    f"foreign key references unknown local column '{fk.local_column}'",
                    column=fk.local_column,
                )
            )
        for action in (fk.on_delete, fk.on_update):
            if action is not None and action not in FK_ACTIONS:
                issues.append(
                    ValidationIssue(
                        ErrorCode.INVALID_FK_ACTION,
                        f"unsupported referential action {action!r}",
                        column=fk.local_column,
                    )
                )
    return issues


def _report(issues: List[ValidationIssue], settings: Settings) -> None:
    for issue in issues:
        log.warning("%s: %s", issue.code.value, issue.message)
        if settings.metrics_enabled:
            validation_issues_total.labels(code=issue.code.value).inc()


def validate_schema(
    columns: Sequence[Column],
    constraints: Sequence[ForeignKey],
    *,
    settings: Optional[Settings] = None,
) -> List[ValidationIssue]:
    """
    Report ambiguous or broken table descriptions without rejecting them.

    Issues come back in a stable order: column checks first, then foreign keys.
    """
    issues = _check_columns(columns) + _check_constraints(columns, constraints)
    _report(issues, settings or get_settings())
    return issues


def check_filter(
    filter: Union[Filter, Mapping[str, Any]], *, settings: Optional[Settings] = None
) -> List[ValidationIssue]:
    f = filter if isinstance(filter, Filter) else Filter.from_mapping(filter)
    operator = f.operator or "="
    if operator.upper() in FILTER_OPERATORS:
        return []
    issues = [
        ValidationIssue(
            ErrorCode.UNKNOWN_OPERATOR,
            f"operator {operator!r} is not a known comparison; it is rendered verbatim",
            column=f.column or f.alias,
        )
    ]
    _report(issues, settings or get_settings())
    return issues
