"""Base adapter interface for database metadata retrieval."""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel

from schemadoc.core.adapters.exceptions import AdapterConfigurationError
from schemadoc.core.adapters.mapping import build_table_from_rows
from schemadoc.core.models.name import resolve_name
from schemadoc.core.models.schema import Database

logger = logging.getLogger(__name__)


class MetadataAdapter(ABC):
    """Abstract base class for metadata adapters.

    An adapter owns one connection to one database engine and turns its catalog
    into a :class:`Database` snapshot. Use it as an async context manager so
    the connection is always released:

        async with adapter:
            database = await adapter.retrieve_database()

    Catalog methods return normalized rows as described in
    :mod:`schemadoc.core.adapters.mapping`.
    """

    ENGINE: ClassVar[str] = ""

    def __init__(self, config: BaseModel) -> None:
        """Initialize adapter with validated configuration.

        Args:
            config: Pydantic model with connection configuration.
        """
        self.config = config
        self._connection: Any = None

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the database.

        Raises:
            AdapterConnectionError: If connection cannot be established.
            AdapterAuthenticationError: If authentication fails.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection and release resources."""
        pass

    @abstractmethod
    async def execute_query(
        self,
        query: str,
        params: tuple[Any, ...] | None = None,
    ) -> list[dict[str, Any]]:
        """Execute a catalog query.

        Args:
            query: SQL query string with driver placeholders.
            params: Values bound to the placeholders.

        Returns:
            List of result rows as dicts.

        Raises:
            AdapterQueryError: If query execution fails.
        """
        pass

    @abstractmethod
    async def get_database_info(self) -> dict[str, Any]:
        """Fetch ``name``, ``version``, ``charset`` and ``collation``."""
        pass

    @abstractmethod
    async def get_tables(self) -> list[dict[str, Any]]:
        """Fetch base tables as table rows ordered by name."""
        pass

    @abstractmethod
    async def get_columns(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        """Fetch column rows of a table in ordinal position order."""
        pass

    @abstractmethod
    async def get_foreign_keys(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        """Fetch foreign key rows of a table, one row per column pair."""
        pass

    @abstractmethod
    async def get_indexes(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        """Fetch index rows of a table."""
        pass

    async def test_connection(self) -> bool:
        """Test connection by running a trivial query."""
        try:
            await self.execute_query("SELECT 1 AS test")
            return True
        except Exception as e:
            logger.warning(f"Connection test failed for {self.ENGINE}: {e}")
            return False

    async def retrieve_database(self, target_tables: list[str] | None = None) -> Database:
        """Read the catalog into an immutable Database snapshot.

        Args:
            target_tables: Physical or logical table names to retrieve. When
                empty, every base table is retrieved.

        Returns:
            Database with every base table, its columns, constraints and indexes.

        Raises:
            AdapterQueryError: If any catalog query fails.
            AdapterConfigurationError: If one table name appears in several schemas.
        """
        info = await self.get_database_info()
        table_rows = await self.get_tables()
        if target_tables:
            wanted = set(target_tables)
            table_rows = [
                row
                for row in table_rows
                if row["table_name"] in wanted
                or resolve_name(row["table_name"], row.get("comment")).logical_name in wanted
            ]
        logger.info(f"Retrieving {len(table_rows)} tables from {info['name']!r}")

        tables = []
        seen: dict[str, str] = {}
        for table_row in table_rows:
            schema_name = table_row["schema_name"]
            table_name = table_row["table_name"]
            if table_name in seen:
                raise AdapterConfigurationError(
                    f"Table {table_name!r} exists in schemas {seen[table_name]!r} and "
                    f"{schema_name!r}; restrict the documented schemas",
                    engine=self.ENGINE,
                )
            seen[table_name] = schema_name
            logger.debug(f"Retrieving definition of {schema_name}.{table_name}")

            tables.append(
                build_table_from_rows(
                    table_row,
                    await self.get_columns(schema_name, table_name),
                    await self.get_foreign_keys(schema_name, table_name),
                    await self.get_indexes(schema_name, table_name),
                )
            )

        return Database(
            name=info["name"],
            version=info.get("version") or "Unknown",
            charset=info.get("charset") or "",
            collation=info.get("collation") or "",
            tables=tables,
        )

    async def __aenter__(self) -> "MetadataAdapter":
        """Async context manager entry - establish connection."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit - close connection."""
        await self.disconnect()
