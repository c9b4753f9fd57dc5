"""Tests for MetadataAdapter.retrieve_database."""

from typing import Any

import pytest

from schemadoc.core.adapters import (
    AdapterConfigurationError,
    MetadataAdapter,
    PostgreSQLConfig,
)
from schemadoc.core.models import Database, display_name


class FakeAdapter(MetadataAdapter):
    """Adapter serving canned catalog rows."""

    ENGINE = "fake"

    def __init__(self, tables: list[dict[str, Any]]) -> None:
        super().__init__(
            PostgreSQLConfig(host="h", database="shop", username="u", password="p")
        )
        self.tables = tables
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def execute_query(self, query, params=None):
        return [{"test": 1}]

    async def get_database_info(self):
        return {"name": "shop", "version": None, "charset": "UTF8", "collation": "C"}

    async def get_tables(self):
        return self.tables

    async def get_columns(self, schema_name, table_name):
        columns = [
            {
                "column_name": "id",
                "data_type": "integer",
                "is_nullable": False,
                "is_primary_key": True,
            }
        ]
        if table_name == "orders":
            columns.append({"column_name": "customer_id", "data_type": "integer"})
        return columns

    async def get_foreign_keys(self, schema_name, table_name):
        if table_name != "orders":
            return []
        return [
            {
                "constraint_name": "fk_orders_customer",
                "source_column": "customer_id",
                "referenced_table": "customers",
                "referenced_column": "id",
                "on_delete": "c",
                "on_update": "a",
            }
        ]

    async def get_indexes(self, schema_name, table_name):
        return []


SHOP_TABLES = [
    {"schema_name": "public", "table_name": "customers", "comment": "顧客 master"},
    {"schema_name": "public", "table_name": "orders", "comment": None},
]


class TestRetrieveDatabase:
    """Test cases for MetadataAdapter.retrieve_database."""

    async def test_retrieve_all_tables(self):
        """Test that every catalog table is assembled."""
        async with FakeAdapter(SHOP_TABLES) as adapter:
            assert adapter.connected is True
            database = await adapter.retrieve_database()

        assert isinstance(database, Database)
        assert database.name == "shop"
        assert database.version == "Unknown"
        assert database.charset == "UTF8"
        assert [t.name.physical_name for t in database.tables] == ["customers", "orders"]
        assert display_name(database.tables[0].name) == "顧客"

        customer_id = database.tables[1].columns[1]
        assert customer_id.foreign_key_constraint.referenced_table == "customers"
        assert adapter.connected is False

    async def test_target_tables_by_physical_name(self):
        """Test filtering by physical table name."""
        database = await FakeAdapter(SHOP_TABLES).retrieve_database(["orders"])
        assert [t.name.physical_name for t in database.tables] == ["orders"]

    async def test_target_tables_by_logical_name(self):
        """Test filtering by the logical name from the table comment."""
        database = await FakeAdapter(SHOP_TABLES).retrieve_database(["顧客"])
        assert [t.name.physical_name for t in database.tables] == ["customers"]

    async def test_empty_target_list_retrieves_everything(self):
        """Test that an empty filter means no filter."""
        database = await FakeAdapter(SHOP_TABLES).retrieve_database([])
        assert len(database.tables) == 2

    async def test_same_table_in_two_schemas(self):
        """Test that duplicate names across schemas are rejected."""
        adapter = FakeAdapter(
            [
                {"schema_name": "public", "table_name": "orders", "comment": None},
                {"schema_name": "archive", "table_name": "orders", "comment": None},
            ]
        )

        with pytest.raises(AdapterConfigurationError) as exc_info:
            await adapter.retrieve_database()

        assert "archive" in str(exc_info.value)
        assert exc_info.value.engine == "fake"

    async def test_test_connection(self):
        """Test the default connectivity check."""
        assert await FakeAdapter([]).test_connection() is True
