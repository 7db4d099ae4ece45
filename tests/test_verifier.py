import pytest

from pgschema.descriptor import SchemaDescriptor
from pgschema.errors.codes import ErrorCode
from pgschema.types import Column
from pgschema.verifier import StatementVerifier


@pytest.fixture
def verifier():
    return StatementVerifier()


def test_empty_sql_is_rejected(verifier):
    r = verifier.verify("   ")
    assert not r.ok
    assert r.error_code == ErrorCode.EMPTY_SQL
    assert r.trace.stage == "verifier"


def test_generated_ddl_parses(verifier, status_table):
    for sql in (status_table.sql_create_table(), status_table.sql_table_drop()):
        r = verifier.verify(sql)
        assert r.ok, r.error
        assert r.trace.notes["verified"] is True


def test_generated_select_and_delete_parse(verifier, status_table):
    for sql in (
        status_table.sql_select(True),
        status_table.sql_select(False, {"column": "name", "value": "O'Brien"}),
        status_table.sql_delete({"column": "id", "value": 5}),
    ):
        r = verifier.verify(sql)
        assert r.ok, (sql, r.error)


def test_generated_constraint_blocks_pass(verifier, status_table):
    blocks = status_table.sql_create_enum_constraints() + (
        status_table.sql_create_table_constraints()
    )
    assert blocks
    for sql in blocks:
        r = verifier.verify(sql)
        assert r.ok, r.error
        assert r.trace.notes["kind"] == "do_block"


def test_broken_do_block_is_rejected(verifier):
    r = verifier.verify("DO $$\nBEGIN\n  IF NOT EXISTS (SELECT 1) THEN\nEND\n$$;")
    assert not r.ok
    assert r.error_code == ErrorCode.PARSE_ERROR
    assert "unbalanced_if" in r.error


def test_multiple_statements_are_rejected(verifier):
    r = verifier.verify("DROP TABLE IF EXISTS a; DROP TABLE IF EXISTS b;")
    assert not r.ok
    assert r.error_code == ErrorCode.MULTIPLE_STATEMENTS


# ---------------------------------------------------------------------------
# Generated INSERT / UPDATE
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "data",
    [
        {"mt_name": "x"},
        {"mt_id": 1, "mt_name": "x", "mt_status": 0},
    ],
)
def test_generated_insert_parses(verifier, status_table, data):
    sql = status_table.sql_insert(data)
    r = verifier.verify(sql)
    assert r.ok, (sql, r.error)
    assert r.trace.notes["kind"] == "insert"


@pytest.mark.parametrize("data", [{"name": "x"}, {"name": "x", "status": 1}])
def test_generated_update_parses(verifier, status_table, data):
    sql = status_table.sql_update(data)
    r = verifier.verify(sql)
    assert r.ok, (sql, r.error)
    assert r.trace.notes["kind"] == "update"


def test_update_without_assignments_is_rejected(verifier, mytable):
    r = verifier.verify(mytable.sql_update({}))
    assert not r.ok
    assert r.error_code == ErrorCode.PARSE_ERROR
    assert r.error == ["empty_set_clause"]


def test_update_without_primary_key_is_rejected(verifier, settings):
    s = SchemaDescriptor("t", "t", [Column("a")], settings=settings)
    r = verifier.verify(s.sql_update({"a": 1}))
    assert not r.ok
    assert r.error_code == ErrorCode.PARSE_ERROR
    assert r.error == ["missing_primary_key"]


def test_update_with_neither_assignments_nor_key_reports_both(verifier, settings):
    s = SchemaDescriptor("t", "t", [Column("a")], settings=settings)
    r = verifier.verify(s.sql_update({}))
    assert not r.ok
    assert r.error == ["empty_set_clause", "missing_primary_key"]
