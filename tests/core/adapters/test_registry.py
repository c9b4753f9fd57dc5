"""Tests for AdapterRegistry."""

import pytest
from pydantic import BaseModel, ValidationError

from schemadoc.core.adapters import (
    AdapterNotFoundError,
    AdapterRegistry,
    MetadataAdapter,
    MySQLAdapter,
    MySQLConfig,
    PostgreSQLAdapter,
    PostgreSQLConfig,
)


class TestAdapterRegistry:
    """Test cases for AdapterRegistry."""

    def test_builtin_adapters_registered(self):
        """Test that PostgreSQL and MySQL adapters are registered."""
        assert AdapterRegistry.is_registered("postgresql")
        assert AdapterRegistry.is_registered("mysql")
        assert set(AdapterRegistry.available_types()) >= {"postgresql", "mysql"}

    def test_get_adapter_info(self):
        """Test getting adapter info."""
        info = AdapterRegistry.get_adapter_info("postgresql")

        assert info.engine == "postgresql"
        assert info.display_name == "PostgreSQL"
        assert info.adapter_class == PostgreSQLAdapter
        assert info.config_schema == PostgreSQLConfig
        assert info.default_port == 5432

    def test_mysql_default_port(self):
        """Test the default port is taken from the config schema."""
        assert AdapterRegistry.get_adapter_info("mysql").default_port == 3306

    def test_get_config_schema(self):
        """Test getting config schema for adapter."""
        assert AdapterRegistry.get_config_schema("mysql") == MySQLConfig

    def test_get_adapter_not_found(self):
        """Test getting non-existent adapter."""
        with pytest.raises(AdapterNotFoundError) as exc_info:
            AdapterRegistry.get_adapter("oracle", {})

        assert exc_info.value.engine == "oracle"
        assert "oracle" in str(exc_info.value)

    def test_get_adapter_validates_config(self):
        """Test that get_adapter validates config against schema."""
        with pytest.raises(ValidationError):
            AdapterRegistry.get_adapter("postgresql", {"host": "localhost"})

    def test_get_adapter_creates_instance(self):
        """Test that get_adapter creates adapter instance."""
        adapter = AdapterRegistry.get_adapter(
            "mysql",
            {"host": "db", "database": "shop", "username": "app", "password": "pw"},
        )

        assert isinstance(adapter, MySQLAdapter)
        assert adapter.config.port == 3306
        assert adapter.config.password.get_secret_value() == "pw"

    def test_register_decorator(self):
        """Test registering a custom adapter."""

        class DummyConfig(BaseModel):
            path: str

        try:

            @AdapterRegistry.register(
                engine="dummy", display_name="Dummy", config_schema=DummyConfig
            )
            class DummyAdapter(MetadataAdapter):
                pass

            info = AdapterRegistry.get_adapter_info("dummy")
            assert info.adapter_class is DummyAdapter
            assert info.default_port is None
        finally:
            AdapterRegistry._adapters.pop("dummy", None)
