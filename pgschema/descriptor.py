from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from pgschema.errors import SchemaFrozenError, SchemaValidationError
from pgschema.errors.mapper import is_error
from pgschema.literals import default_literal, enum_label, enum_literal, filter_literal
from pgschema.metrics import degenerate_statements_total, statements_generated_total
from pgschema.settings import Settings, get_settings
from pgschema.types import Column, Filter, ForeignKey, ValidationIssue
from pgschema.validator import validate_schema

log = logging.getLogger(__name__)

ColumnLike = Union[Column, Mapping[str, Any]]
ForeignKeyLike = Union[ForeignKey, Mapping[str, Any]]
FilterLike = Union[Filter, Mapping[str, Any]]
FilterArg = Union[FilterLike, Sequence[FilterLike], None]


def _as_column(col: ColumnLike) -> Column:
    return col if isinstance(col, Column) else Column.from_mapping(col)


def _as_fk(fk: ForeignKeyLike) -> ForeignKey:
    return fk if isinstance(fk, ForeignKey) else ForeignKey.from_mapping(fk)


def _as_filter(f: FilterLike) -> Filter:
    return f if isinstance(f, Filter) else Filter.from_mapping(f)


def _conditional_block(table: str, constraint_name: str, statement: str) -> str:
    """Wrap an ALTER TABLE in a DO block that skips it if the constraint exists."""
    return "\n".join(
        [
            "DO $$",
            "BEGIN",
            "  IF NOT EXISTS (",
            "    SELECT 1 FROM pg_constraint c",
            "    JOIN pg_class t ON c.conrelid = t.oid",
            f"    WHERE lower(c.conname) = lower('{constraint_name}') AND t.relname = '{table}'",
            "  ) THEN",
            f"    {statement}",
            "  END IF;",
            "END",
            "$$;",
        ]
    )


class SchemaDescriptor:
    """
    Declarative description of one table that renders SQL text:
      DDL: create table / enum CHECK constraints / foreign keys / drop
      DML: select / insert / update / delete with `$<alias>_<column>` placeholders

    Generation methods are pure reads over the column and constraint lists.
    Names, types and aliases are interpolated as-is and must be trusted input;
    only literal values are quoted.
    """

    def __init__(
        self,
        table_name: str,
        alias: Optional[str] = None,
        columns: Optional[Sequence[ColumnLike]] = None,
        constraints: Optional[Sequence[ForeignKeyLike]] = None,
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        self.table_name = table_name
        self.alias = (alias or table_name).lower()
        self._columns: Sequence[Column] = [_as_column(c) for c in columns or []]
        self._constraints: Sequence[ForeignKey] = [
            _as_fk(fk) for fk in constraints or []
        ]
        self._settings = settings or get_settings()
        self._frozen = False

    def __repr__(self) -> str:
        return (
            f"SchemaDescriptor({self.table_name!r}, alias={self.alias!r}, "
            f"columns={len(self._columns)}, constraints={len(self._constraints)}, "
            f"frozen={self._frozen})"
        )

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    @property
    def columns(self) -> List[Column]:
        return list(self._columns)

    @property
    def constraints(self) -> List[ForeignKey]:
        return list(self._constraints)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def add_column(
        self, column: Union[ColumnLike, Sequence[ColumnLike]]
    ) -> "SchemaDescriptor":
        self._ensure_mutable()
        items = column if isinstance(column, (list, tuple)) else [column]
        self._columns.extend(_as_column(c) for c in items)  # type: ignore[attr-defined]
        return self

    def add_constraint(
        self, constraint: Union[ForeignKeyLike, Sequence[ForeignKeyLike]]
    ) -> "SchemaDescriptor":
        self._ensure_mutable()
        items = constraint if isinstance(constraint, (list, tuple)) else [constraint]
        self._constraints.extend(_as_fk(fk) for fk in items)  # type: ignore[attr-defined]
        return self

    def validate(self) -> List[ValidationIssue]:
        return validate_schema(self._columns, self._constraints, settings=self._settings)

    def freeze(self) -> "SchemaDescriptor":
        """
        Return a frozen copy of this descriptor.

        Error-level validation issues raise SchemaValidationError when
        strict validation is enabled; otherwise they are only logged.
        """
        issues = self.validate()
        errors = [i for i in issues if is_error(i.code)]
        if errors and self._settings.strict_validation:
            raise SchemaValidationError(
                message=f"schema '{self.table_name}' failed validation",
                code=errors[0].code,
                details=[i.message for i in errors],
                issues=issues,
            )

        frozen = SchemaDescriptor(
            self.table_name, self.alias, settings=self._settings
        )
        frozen._columns = tuple(self._columns)
        frozen._constraints = tuple(self._constraints)
        frozen._frozen = True
        return frozen

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise SchemaFrozenError(
                message=f"schema '{self.table_name}' is frozen and cannot be extended"
            )

    # ------------------------------------------------------------------
    # Naming & projections
    # ------------------------------------------------------------------

    def get_alias(self) -> str:
        return self.alias

    def get_table_name(self, use_sql: bool = False) -> str:
        return self.table_name.lower() if use_sql else self.table_name

    def _selected(self, include_primary: bool) -> List[Column]:
        return [c for c in self._columns if include_primary or not c.primary_key]

    def get_column_aliases(self, include_primary: bool) -> List[str]:
        return [f"{self.alias}_{c.name}" for c in self._selected(include_primary)]

    def get_column_names(self, include_primary: bool) -> List[str]:
        return [f"{self.alias}.{c.name}" for c in self._selected(include_primary)]

    def get_column_fields(self, include_primary: bool, use_labels: bool) -> List[str]:
        fields: List[str] = []
        for col in self._selected(include_primary):
            if use_labels and col.enum_values is not None:
                fields.append(
                    f'{self._enum_expression(col)} AS "{self.alias}_{col.name}_label"'
                )
            else:
                fields.append(f'{self.alias}.{col.name} AS "{self.alias}_{col.name}"')
        return fields

    def get_primary_key(self, use_alias: bool) -> Optional[str]:
        sep = "_" if use_alias else "."
        for col in self._columns:
            if col.primary_key:
                return f"{self.alias}{sep}{col.name}"
        return None

    def alias_to_column_name(self, alias_column: str) -> str:
        prefix = f"{self.alias}_"
        if not alias_column.startswith(prefix):
            return alias_column
        return alias_column[len(prefix):]

    def _enum_expression(self, col: Column) -> str:
        col_ref = f"{self.alias}.{col.name}"
        when_thens = " ".join(
            f"WHEN {col_ref} = {enum_literal(ev.value)} THEN {enum_label(ev.value, ev.label)}"
            for ev in col.enum_values or []
        )
        return f"CASE {when_thens} ELSE 'Value \"' || {col_ref} || '\"' END"

    # ------------------------------------------------------------------
    # DDL
    # ------------------------------------------------------------------

    def sql_create_table(self) -> str:
        table = self.get_table_name(True)
        defs = []
        for col in self._columns:
            col_def = f"{col.name} {col.sql_type or self._settings.default_sql_type}"
            if col.primary_key:
                col_def += " PRIMARY KEY"
            if col.nullable:
                col_def += " NULL"
            if col.auto_increment:
                col_def += " GENERATED ALWAYS AS IDENTITY"
            if col.default_value is not None:
                col_def += f" DEFAULT {default_literal(col.default_value)}"
            defs.append(col_def)
        sql = f"CREATE TABLE IF NOT EXISTS {table} ({', '.join(defs)});"
        self._record("create_table", sql)
        return sql

    def sql_create_enum_constraints(self) -> List[str]:
        table = self.get_table_name(True)
        blocks: List[str] = []
        for col in self._columns:
            if col.enum_values is None:
                continue
            name = f"{table}_{col.name}_enum_chk"
            allowed = ", ".join(enum_literal(ev.value) for ev in col.enum_values)
            blocks.append(
                _conditional_block(
                    table,
                    name,
                    f"ALTER TABLE {table} ADD CONSTRAINT {name} "
                    f"CHECK ({col.name} IN ({allowed}));",
                )
            )
            self._record("enum_constraint", blocks[-1])
        return blocks

    def sql_create_table_constraints(self) -> List[str]:
        table = self.get_table_name(True)
        blocks: List[str] = []
        for fk in self._constraints:
            name = f"{table}_{fk.local_column}_fk"
            actions = []
            if fk.on_delete:
                actions.append(f"ON DELETE {fk.on_delete}")
            if fk.on_update:
                actions.append(f"ON UPDATE {fk.on_update}")
            action_sql = f" {' '.join(actions)}" if actions else ""
            blocks.append(
                _conditional_block(
                    table,
                    name,
                    f"ALTER TABLE {table} ADD CONSTRAINT {name} "
                    f"FOREIGN KEY ({fk.local_column}) "
                    f"REFERENCES {fk.referenced_table.lower()}({fk.referenced_column})"
                    f"{action_sql};",
                )
            )
            self._record("fk_constraint", blocks[-1])
        return blocks

    def sql_table_drop(self) -> str:
        sql = f"DROP TABLE IF EXISTS {self.get_table_name(True)};"
        self._record("drop_table", sql)
        return sql

    # ------------------------------------------------------------------
    # DML
    # ------------------------------------------------------------------

    def sql_select(self, use_labels: bool, filter: FilterArg = None) -> str:
        fields = ", ".join(self.get_column_fields(True, use_labels))
        sql = (
            f"SELECT {fields} FROM {self.get_table_name(True)} AS {self.alias}"
            f"{self.where_clause(filter)}"
        )
        self._record("select", sql)
        return sql

    def sql_insert(self, data: Mapping[str, Any]) -> str:
        """
        INSERT for every column whose `<alias>_<name>` key is present in data.

        Returns "" when no key matches; callers must check before executing.
        """
        columns: List[str] = []
        placeholders: List[str] = []
        for col in self._columns:
            alias_key = f"{self.alias}_{col.name}"
            if alias_key in data:
                columns.append(f"{self.alias}.{col.name}")
                placeholders.append(f"${alias_key}")

        if not columns:
            log.warning("insert into %s matched no columns", self.table_name)
            self._degenerate("empty_insert")
            return ""

        sql = (
            f"INSERT INTO {self.get_table_name(True)} AS {self.alias} "
            f"({', '.join(columns)}) VALUES ({', '.join(placeholders)})"
        )
        self._record("insert", sql)
        return sql

    def sql_update(self, data: Mapping[str, Any]) -> str:
        """
        UPDATE every non-primary column whose bare name is present in data,
        keyed on the primary key.

        The statement is not valid SQL when no column matches or the table
        has no primary key; both cases are logged, not rejected.
        """
        set_clauses = [
            f"{self.alias}.{col.name} = ${self.alias}_{col.name}"
            for col in self._columns
            if col.name in data and not col.primary_key
        ]
        if not set_clauses:
            log.warning("update of %s has no assignments", self.table_name)
            self._degenerate("empty_update")

        pk_field = self.get_primary_key(False)
        pk_alias = self.get_primary_key(True)
        if pk_field is None:
            log.warning("update of %s has no primary key to match on", self.table_name)
            self._degenerate("missing_primary_key")
            pk_field = pk_alias = "null"

        sql = (
            f"UPDATE {self.get_table_name(True)} AS {self.alias} "
            f"SET {', '.join(set_clauses)} WHERE {pk_field} = ${pk_alias}"
        )
        self._record("update", sql)
        return sql

    def sql_delete(self, filter: FilterArg = None) -> str:
        sql = (
            f"DELETE FROM {self.get_table_name(True)} AS {self.alias}"
            f"{self.where_clause(filter)}"
        )
        self._record("delete", sql)
        return sql

    def where_clause(self, filter: FilterArg = None) -> str:
        """
        ` WHERE a AND b ...` for one filter or a list; "" when there is none.
        """
        if not filter:
            return ""
        if isinstance(filter, (Filter, Mapping)):
            filters = [_as_filter(filter)]
        else:
            filters = [_as_filter(f) for f in filter]

        conditions: List[str] = []
        for f in filters:
            if f.alias is not None:
                col_ref = f"{self.alias}.{self.alias_to_column_name(f.alias)}"
            else:
                col_ref = f"{self.alias}.{f.column}"

            operator = f.operator or "="
            if f.value is None:
                op = "IS NOT" if operator.upper() == "IS NOT" else "IS"
                conditions.append(f"{col_ref} {op} NULL")
            else:
                conditions.append(f"{col_ref} {operator} {filter_literal(f.value)}")

        return " WHERE " + " AND ".join(conditions)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def _record(self, kind: str, sql: str) -> None:
        log.debug("generated %s for %s: %s", kind, self.table_name, sql)
        if self._settings.metrics_enabled:
            statements_generated_total.labels(kind=kind).inc()

    def _degenerate(self, reason: str) -> None:
        if self._settings.metrics_enabled:
            degenerate_statements_total.labels(reason=reason).inc()
