"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from typer.testing import CliRunner

from factories import fk_column, linked_table, pk_column
from schemadoc.config.settings import get_database_settings, get_settings
from schemadoc.core.models import Database, IndexDefinition, build_column, build_table


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from DB_* / SCHEMADOC_* variables and cached settings."""
    for key in list(os.environ):
        if key.startswith(("DB_", "SCHEMADOC_")):
            monkeypatch.delenv(key)

    get_settings.cache_clear()
    get_database_settings.cache_clear()
    yield
    get_settings.cache_clear()
    get_database_settings.cache_clear()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a CLI runner for testing Typer commands."""
    return CliRunner()


@pytest.fixture
def shop_database() -> Database:
    """Acyclic shop schema: orders -> customers, order_items -> orders/products."""
    customers = build_table(
        "customers",
        "public",
        [
            pk_column(),
            build_column(
                "email",
                "character varying",
                comment="メールアドレス login address",
                is_nullable=False,
                max_length=255,
                is_unique=True,
            ),
            build_column(
                "status",
                "enum",
                enum_values=["active", "inactive"],
                default_value="'active'::customer_status",
            ),
        ],
        comment="顧客マスタ",
        indexes=[
            IndexDefinition(
                index_name="customers_pkey",
                table_name="customers",
                columns=("id",),
                is_unique=True,
                is_primary=True,
                index_type="btree",
            ),
        ],
    )
    orders = build_table(
        "orders",
        "public",
        [
            pk_column(),
            fk_column("orders", "customer_id", "customers", comment="顧客ID"),
            build_column("total", "numeric", precision=10, scale=2),
        ],
        comment="注文 this is comment",
    )
    products = build_table("products", "public", [pk_column()], comment="商品")
    order_items = build_table(
        "order_items",
        "public",
        [
            pk_column(),
            fk_column("order_items", "order_id", "orders"),
            fk_column("order_items", "product_id", "products"),
        ],
    )
    return Database(
        name="shop",
        version="PostgreSQL 16.2",
        charset="UTF8",
        collation="en_US.UTF-8",
        tables=(order_items, orders, customers, products),
    )


@pytest.fixture
def cyclic_database() -> Database:
    """Two tables referencing each other."""
    return Database(name="cyclic", tables=(linked_table("A", "B"), linked_table("B", "A")))


@pytest.fixture
def mock_adapter(shop_database: Database) -> MagicMock:
    """Create a mock metadata adapter returning the shop schema."""
    adapter = MagicMock()
    adapter.ENGINE = "postgresql"

    # Make it work as async context manager
    adapter.__aenter__ = AsyncMock(return_value=adapter)
    adapter.__aexit__ = AsyncMock(return_value=None)

    adapter.test_connection = AsyncMock(return_value=True)
    adapter.retrieve_database = AsyncMock(return_value=shop_database)
    return adapter
