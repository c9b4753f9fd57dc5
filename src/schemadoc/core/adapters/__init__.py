"""Metadata adapters for schemadoc."""

from schemadoc.core.adapters.base import MetadataAdapter
from schemadoc.core.adapters.exceptions import (
    AdapterAuthenticationError,
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterError,
    AdapterNotFoundError,
    AdapterQueryError,
)
from schemadoc.core.adapters.mysql import MySQLAdapter
from schemadoc.core.adapters.postgresql import PostgreSQLAdapter
from schemadoc.core.adapters.registry import AdapterInfo, AdapterRegistry
from schemadoc.core.adapters.schemas import MySQLConfig, PostgreSQLConfig, SSLMode

__all__ = [
    # Base
    "MetadataAdapter",
    # Registry
    "AdapterRegistry",
    "AdapterInfo",
    # Exceptions
    "AdapterError",
    "AdapterConnectionError",
    "AdapterAuthenticationError",
    "AdapterConfigurationError",
    "AdapterQueryError",
    "AdapterNotFoundError",
    # Config schemas
    "MySQLConfig",
    "PostgreSQLConfig",
    "SSLMode",
    # Adapters
    "MySQLAdapter",
    "PostgreSQLAdapter",
]
