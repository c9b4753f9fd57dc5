"""Tests for the schema model and its helper functions."""

import pytest
from pydantic import ValidationError

from factories import fk_column, make_fk, pk_column
from schemadoc.core.models import (
    ConstraintAction,
    Database,
    IndexDefinition,
    all_constraints,
    all_referential_constraints,
    build_column,
    build_table,
    column_by_logical_name,
    column_by_physical_name,
    column_definition,
    column_definition_with_logical_name,
    constraint_definition,
    filter_tables,
    foreign_key_columns,
    index_definition,
    index_type_display_name,
    is_composite_index,
    is_enum_column,
    is_valid_constraint,
    is_valid_index,
    parse_constraint_action,
    primary_key_columns,
    table_by_logical_name,
    table_by_physical_name,
    table_definition,
    table_definition_with_logical_name,
    table_display_name,
)


class TestConstraintAction:
    """Test cases for constraint action parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("CASCADE", ConstraintAction.CASCADE),
            ("SET NULL", ConstraintAction.SET_NULL),
            ("set_default", ConstraintAction.SET_DEFAULT),
            ("NO ACTION", ConstraintAction.NO_ACTION),
            ("a", ConstraintAction.NO_ACTION),
            ("c", ConstraintAction.CASCADE),
            ("n", ConstraintAction.SET_NULL),
            ("d", ConstraintAction.SET_DEFAULT),
            ("r", ConstraintAction.RESTRICT),
        ],
    )
    def test_parse_known_values(self, raw: str, expected: ConstraintAction):
        """Test information_schema spellings and pg_constraint codes."""
        assert parse_constraint_action(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "SOMETHING"])
    def test_unknown_values_default_to_restrict(self, raw: str | None):
        """Test fallback for missing or unknown rules."""
        assert parse_constraint_action(raw) == ConstraintAction.RESTRICT


class TestReferentialConstraint:
    """Test cases for ReferentialConstraint helpers."""

    def test_defaults(self):
        """Test default actions and enabled flag."""
        constraint = make_fk("orders", "customer_id", "customers")

        assert constraint.on_delete == ConstraintAction.RESTRICT
        assert constraint.on_update == ConstraintAction.RESTRICT
        assert constraint.is_enabled is True

    def test_definition(self):
        """Test the arrow definition string."""
        constraint = make_fk("orders", "customer_id", "customers")
        assert constraint_definition(constraint) == "orders.customer_id -> customers.id"

    def test_is_valid(self):
        """Test that empty names make a constraint invalid."""
        assert is_valid_constraint(make_fk("orders", "customer_id", "customers"))
        assert not is_valid_constraint(make_fk("orders", "customer_id", ""))


class TestColumn:
    """Test cases for Column helpers."""

    def test_build_column_resolves_name(self):
        """Test that the comment is parsed into the column name."""
        column = build_column("email", "varchar", comment="メール contact address")

        assert column.name.physical_name == "email"
        assert column.name.logical_name == "メール"
        assert column.name.comment == "contact address"

    def test_definition_with_length(self):
        """Test definition of a character column."""
        column = build_column(
            "email", "varchar", is_nullable=False, max_length=255, default_value="''"
        )
        assert column_definition(column) == "email varchar(255) NOT NULL DEFAULT ''"

    def test_definition_with_precision(self):
        """Test definition of a numeric column."""
        column = build_column("total", "numeric", precision=10, scale=2)
        assert column_definition(column) == "total numeric(10, 2)"

    def test_definition_auto_increment(self):
        """Test definition of an auto increment key."""
        assert column_definition(pk_column()) == "id integer NOT NULL AUTO_INCREMENT"

    def test_definition_with_logical_name(self):
        """Test that the logical name is appended as a comment."""
        column = build_column("total", "integer", comment="合計")
        assert column_definition_with_logical_name(column) == "total integer -- 合計"
        assert column_definition_with_logical_name(build_column("x", "integer")) == "x integer"

    def test_enum_column(self):
        """Test enum detection keeps value order."""
        column = build_column("status", "enum", enum_values=["b", "a"])

        assert is_enum_column(column)
        assert column.enum_values == ("b", "a")
        assert not is_enum_column(pk_column())


class TestIndexDefinition:
    """Test cases for IndexDefinition helpers."""

    def test_definition(self):
        """Test index definition string."""
        index = IndexDefinition(
            index_name="idx_orders_customer",
            table_name="orders",
            columns=("customer_id", "created_at"),
            is_unique=True,
            index_type="btree",
        )

        assert (
            index_definition(index)
            == "UNIQUE INDEX idx_orders_customer ON orders (customer_id, created_at) USING btree"
        )
        assert is_composite_index(index)
        assert is_valid_index(index)

    def test_index_without_columns_is_invalid(self):
        """Test that an index needs at least one column."""
        index = IndexDefinition(index_name="idx", table_name="orders")
        assert not is_valid_index(index)

    @pytest.mark.parametrize(
        ("index_type", "expected"),
        [
            (None, "B-Tree"),
            ("btree", "B-Tree"),
            ("HASH", "Hash"),
            ("FULLTEXT", "Full-Text"),
            ("gin", "GIN"),
        ],
    )
    def test_type_display_name(self, index_type: str | None, expected: str):
        """Test access method display names."""
        assert index_type_display_name(index_type) == expected


class TestTable:
    """Test cases for Table helpers."""

    def test_key_columns(self):
        """Test primary and foreign key column lookups."""
        table = build_table(
            "orders",
            "public",
            [pk_column(), fk_column("orders", "customer_id", "customers")],
            comment="注文",
        )

        assert [c.name.physical_name for c in primary_key_columns(table)] == ["id"]
        assert [c.name.physical_name for c in foreign_key_columns(table)] == ["customer_id"]
        assert table_display_name(table) == "注文"

    def test_column_lookup(self):
        """Test lookups by physical and logical name."""
        table = build_table(
            "orders", "public", [build_column("total", "integer", comment="合計")]
        )

        assert column_by_physical_name(table, "total") is not None
        assert column_by_logical_name(table, "合計") is not None
        assert column_by_physical_name(table, "missing") is None

    def test_definitions(self):
        """Test table definition strings."""
        table = build_table("orders", "sales", comment="注文")

        assert table_definition(table) == "sales.orders"
        assert table_definition_with_logical_name(table) == "sales.orders -- 注文"

    def test_duplicate_column_rejected(self):
        """Test that column physical names must be unique."""
        with pytest.raises(ValidationError):
            build_table("orders", "public", [pk_column(), pk_column()])


class TestDatabase:
    """Test cases for Database helpers."""

    def test_table_lookup(self, shop_database: Database):
        """Test lookups by physical and logical name."""
        assert table_by_physical_name(shop_database, "orders") is not None
        assert table_by_logical_name(shop_database, "顧客マスタ").name.physical_name == "customers"
        assert table_by_physical_name(shop_database, "missing") is None

    def test_all_referential_constraints(self, shop_database: Database):
        """Test that constraints are collected table by table."""
        constraints = all_referential_constraints(shop_database)
        assert [c.constraint_name for c in constraints] == [
            "fk_order_items_order_id",
            "fk_order_items_product_id",
            "fk_orders_customer_id",
        ]

    def test_all_referential_constraints_follow_table_order(self):
        """Test that each table contributes its column keys before its table-level keys."""
        lines = build_table(
            "lines",
            "public",
            [pk_column(), fk_column("lines", "order_id", "orders")],
            referential_constraints=[
                make_fk("lines", "order_no", "order_lines", "order_no"),
                make_fk("lines", "line_no", "order_lines", "line_no"),
            ],
        )
        orders = build_table("orders", "public", [pk_column()])
        database = Database(name="db", tables=(lines, orders))

        constraints = all_referential_constraints(database)

        assert constraints == all_constraints(lines) + all_constraints(orders)
        assert [c.source_column for c in constraints] == ["order_id", "order_no", "line_no"]

    def test_duplicate_table_rejected(self):
        """Test that table physical names must be unique."""
        table = build_table("orders", "public", [pk_column()])
        with pytest.raises(ValidationError):
            Database(name="shop", tables=(table, table))

    def test_filter_tables(self, shop_database: Database):
        """Test filtering by physical or logical name."""
        filtered = filter_tables(shop_database, ["orders", "顧客マスタ"])

        assert [t.name.physical_name for t in filtered.tables] == ["orders", "customers"]
        assert filtered.name == "shop"
        assert len(shop_database.tables) == 4

    def test_filter_tables_empty_selection(self, shop_database: Database):
        """Test that an empty selection keeps every table."""
        assert filter_tables(shop_database, []) is shop_database

    def test_json_round_trip(self, shop_database: Database):
        """Test that snapshots survive JSON serialization."""
        restored = Database.model_validate_json(shop_database.model_dump_json())
        assert restored == shop_database
