import pytest

from pgschema.descriptor import SchemaDescriptor
from pgschema.settings import Settings, get_settings
from pgschema.types import Column, EnumValue, ForeignKey


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests that touch env need a fresh read."""
    get_settings.cache_clear()
    try:
        yield
    finally:
        get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def mytable(settings) -> SchemaDescriptor:
    return SchemaDescriptor(
        "MyTable",
        "mt",
        [
            Column("id", sql_type="uuid", primary_key=True),
            Column("name", sql_type="text"),
        ],
        settings=settings,
    )


@pytest.fixture
def status_table(settings) -> SchemaDescriptor:
    return SchemaDescriptor(
        "MyTable",
        "mt",
        [
            Column("id", sql_type="uuid", primary_key=True),
            Column("name", sql_type="text"),
            Column(
                "status",
                sql_type="smallint",
                enum_values=[EnumValue(0, "Off"), EnumValue(1, "On")],
            ),
        ],
        [ForeignKey("name", "Users", "login", on_delete="CASCADE")],
        settings=settings,
    )
