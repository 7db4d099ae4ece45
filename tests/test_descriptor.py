import pytest

from pgschema.descriptor import SchemaDescriptor
from pgschema.errors import SchemaFrozenError, SchemaValidationError
from pgschema.errors.codes import ErrorCode
from pgschema.settings import Settings
from pgschema.types import Column, EnumValue, ForeignKey, ValidationIssue


# ---------------------------------------------------------------------------
# Construction & building
# ---------------------------------------------------------------------------


def test_alias_defaults_to_lowercased_table_name(settings):
    s = SchemaDescriptor("Orders", settings=settings)
    assert s.get_alias() == "orders"
    assert s.get_table_name() == "Orders"
    assert s.get_table_name(True) == "orders"


def test_alias_is_lowercased(settings):
    s = SchemaDescriptor("Orders", "OR", settings=settings)
    assert s.get_alias() == "or"


def test_add_column_and_constraint_chain(settings):
    s = SchemaDescriptor("t", settings=settings)
    out = s.add_column(Column("id", primary_key=True)).add_column(
        [Column("a"), Column("b")]
    ).add_constraint(ForeignKey("a", "other", "id"))

    assert out is s
    assert [c.name for c in s.columns] == ["id", "a", "b"]
    assert len(s.constraints) == 1


def test_add_column_has_no_duplicate_detection(settings):
    s = SchemaDescriptor("t", settings=settings)
    s.add_column(Column("a")).add_column(Column("a"))
    assert s.get_column_names(True) == ["t.a", "t.a"]


def test_mappings_are_accepted_with_camel_case_keys(settings):
    s = SchemaDescriptor(
        "t",
        "x",
        [{"name": "id", "sqlType": "uuid", "primaryKey": True}],
        [{"localColumn": "id", "referencedTable": "Other", "referencedColumn": "oid"}],
        settings=settings,
    )
    assert s.columns[0].sql_type == "uuid"
    assert s.get_primary_key(False) == "x.id"
    assert s.constraints[0].referenced_table == "Other"


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------


def test_projections_skip_primary_key_when_requested(mytable):
    assert mytable.get_column_aliases(False) == ["mt_name"]
    assert mytable.get_column_names(False) == ["mt.name"]
    assert mytable.get_column_fields(False, False) == ['mt.name AS "mt_name"']


def test_projections_keep_declaration_order(mytable):
    mytable.add_column(Column("created_at", sql_type="timestamptz"))
    assert mytable.get_column_aliases(True) == ["mt_id", "mt_name", "mt_created_at"]
    assert mytable.get_column_names(True) == ["mt.id", "mt.name", "mt.created_at"]


def test_column_fields_with_labels(status_table):
    fields = status_table.get_column_fields(True, True)
    assert fields[1] == 'mt.name AS "mt_name"'
    assert fields[2] == (
        "CASE WHEN mt.status = 0 THEN 'Off' WHEN mt.status = 1 THEN 'On' "
        "ELSE 'Value \"' || mt.status || '\"' END AS \"mt_status_label\""
    )


def test_column_fields_without_labels_ignore_enums(status_table):
    assert status_table.get_column_fields(True, False)[2] == 'mt.status AS "mt_status"'


def test_enum_label_fallback_escapes_quotes(settings):
    s = SchemaDescriptor(
        "t",
        "t",
        [Column("kind", enum_values=[{"value": 'a"b'}, {"value": "c", "label": "It's"}])],
        settings=settings,
    )
    field = s.get_column_fields(True, True)[0]
    assert "WHEN t.kind = 'a\"b' THEN 'Value \"a\\\"b\"'" in field
    assert "WHEN t.kind = 'c' THEN 'It''s'" in field


def test_primary_key(mytable, settings):
    assert mytable.get_primary_key(False) == "mt.id"
    assert mytable.get_primary_key(True) == "mt_id"
    assert SchemaDescriptor("t", settings=settings).get_primary_key(False) is None


def test_first_primary_key_wins(settings):
    s = SchemaDescriptor(
        "t", "t", [Column("a", primary_key=True), Column("b", primary_key=True)],
        settings=settings,
    )
    assert s.get_primary_key(False) == "t.a"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("mt_id", "id"),
        ("mt_created_at", "created_at"),
        ("name", "name"),
        ("other_id", "other_id"),
    ],
)
def test_alias_to_column_name(mytable, value, expected):
    assert mytable.alias_to_column_name(value) == expected


def test_alias_round_trip(status_table):
    aliases = status_table.get_column_aliases(True)
    names = [c.name for c in status_table.columns]
    assert [status_table.alias_to_column_name(a) for a in aliases] == names


# ---------------------------------------------------------------------------
# Freezing
# ---------------------------------------------------------------------------


def test_freeze_blocks_further_mutation(mytable):
    frozen = mytable.freeze()

    assert frozen.is_frozen
    assert not mytable.is_frozen
    with pytest.raises(SchemaFrozenError) as ei:
        frozen.add_column(Column("extra"))
    assert ei.value.code == ErrorCode.SCHEMA_FROZEN


def test_frozen_descriptor_generates_same_sql(status_table):
    frozen = status_table.freeze()
    assert frozen.sql_create_table() == status_table.sql_create_table()
    assert frozen.sql_select(True) == status_table.sql_select(True)
    assert frozen.sql_create_table_constraints() == status_table.sql_create_table_constraints()


def test_freeze_is_lenient_by_default(settings):
    s = SchemaDescriptor(
        "t", "t", [Column("a", primary_key=True), Column("b", primary_key=True)],
        settings=settings,
    )
    assert s.freeze().is_frozen


def test_freeze_strict_rejects_errors():
    s = SchemaDescriptor(
        "t",
        "t",
        [Column("a", primary_key=True), Column("b", primary_key=True)],
        settings=Settings(strict_validation=True),
    )
    with pytest.raises(SchemaValidationError) as ei:
        s.freeze()
    assert ei.value.code == ErrorCode.MULTIPLE_PRIMARY_KEYS
    assert ei.value.issues
    assert all(isinstance(i, ValidationIssue) for i in ei.value.issues)


def test_freeze_strict_tolerates_warnings():
    s = SchemaDescriptor("t", "t", [Column("a")], settings=Settings(strict_validation=True))
    assert s.freeze().is_frozen


def test_frozen_copy_does_not_share_enum_values(settings):
    values = [EnumValue(1)]
    s = SchemaDescriptor("t", "t", [Column("k", enum_values=values)], settings=settings)
    frozen = s.freeze()

    values.append(EnumValue(2))

    assert isinstance(frozen.columns[0].enum_values, tuple)
    assert "CHECK (k IN (1));" in frozen.sql_create_enum_constraints()[0]
    with pytest.raises(AttributeError):
        s.columns[0].enum_values.append(EnumValue(2))
