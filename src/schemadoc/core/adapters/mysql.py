"""MySQL metadata adapter."""

import asyncio
import logging
import re
from typing import Any

from schemadoc.core.adapters.base import MetadataAdapter
from schemadoc.core.adapters.exceptions import (
    AdapterAuthenticationError,
    AdapterConnectionError,
    AdapterQueryError,
)
from schemadoc.core.adapters.registry import AdapterRegistry
from schemadoc.core.adapters.schemas import MySQLConfig

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf8mb4"
DEFAULT_COLLATION = "utf8mb4_general_ci"

_ENUM_LITERAL = re.compile(r"'((?:[^']|'')*)'")


def parse_enum_values(column_type: str | None) -> list[str]:
    """Extract the labels of an ``enum('a','b')`` COLUMN_TYPE, in declaration order."""
    if not column_type or not column_type.lower().startswith("enum("):
        return []
    return [label.replace("''", "'") for label in _ENUM_LITERAL.findall(column_type)]


@AdapterRegistry.register(
    engine="mysql",
    display_name="MySQL",
    config_schema=MySQLConfig,
)
class MySQLAdapter(MetadataAdapter):
    """Adapter for MySQL and MariaDB databases.

    All metadata comes from INFORMATION_SCHEMA, scoped to the configured schema.
    """

    ENGINE = "mysql"

    def __init__(self, config: MySQLConfig) -> None:
        super().__init__(config)
        self.config: MySQLConfig = config
        self._connection: Any = None

    async def connect(self) -> None:
        """Establish connection to MySQL database."""
        try:
            import pymysql
            import pymysql.cursors
        except ImportError as e:
            raise AdapterConnectionError(
                "PyMySQL package required. "
                "Install with: pip install schemadoc[mysql] or pip install pymysql",
                engine=self.ENGINE,
            ) from e

        def _connect() -> Any:
            return pymysql.connect(
                host=self.config.host,
                port=self.config.port,
                user=self.config.username,
                password=self.config.password.get_secret_value(),
                database=self.config.database,
                charset="utf8mb4",
                connect_timeout=self.config.connect_timeout,
                ssl={"ssl": {}} if self.config.ssl else None,
                cursorclass=pymysql.cursors.DictCursor,
                autocommit=True,
            )

        try:
            loop = asyncio.get_running_loop()
            self._connection = await loop.run_in_executor(None, _connect)
            logger.info(
                f"Connected to MySQL at {self.config.host}:{self.config.port}"
                f"/{self.config.database}"
            )
        except Exception as e:
            error_msg = str(e).lower()
            if "access denied" in error_msg or "password" in error_msg:
                raise AdapterAuthenticationError(
                    f"Authentication failed: {e}",
                    engine=self.ENGINE,
                ) from e
            raise AdapterConnectionError(
                f"Failed to connect to MySQL at {self.config.host}:{self.config.port}: {e}",
                engine=self.ENGINE,
            ) from e

    async def disconnect(self) -> None:
        """Close the MySQL connection."""
        if self._connection is not None:
            try:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, self._connection.close)
            finally:
                self._connection = None

    async def execute_query(
        self,
        query: str,
        params: tuple[Any, ...] | None = None,
    ) -> list[dict[str, Any]]:
        """Execute a SQL query and return results as list of dicts."""
        if self._connection is None:
            raise AdapterConnectionError(
                "Not connected. Call connect() first.",
                engine=self.ENGINE,
            )

        def _execute() -> list[dict[str, Any]]:
            with self._connection.cursor() as cursor:
                cursor.execute(query, params)
                return list(cursor.fetchall())

        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, _execute)
        except Exception as e:
            raise AdapterQueryError(
                f"Query execution failed: {e}",
                query=query,
                engine=self.ENGINE,
            ) from e

    async def get_database_info(self) -> dict[str, Any]:
        version_rows = await self.execute_query("SELECT VERSION() AS version")
        charset_rows = await self.execute_query(
            """
            SELECT DEFAULT_CHARACTER_SET_NAME AS charset, DEFAULT_COLLATION_NAME AS collation
            FROM INFORMATION_SCHEMA.SCHEMATA
            WHERE SCHEMA_NAME = %s
            """,
            (self.config.database,),
        )

        charset_row = charset_rows[0] if charset_rows else {}
        return {
            "name": self.config.database,
            "version": version_rows[0]["version"] if version_rows else "Unknown",
            "charset": charset_row.get("charset") or DEFAULT_CHARSET,
            "collation": charset_row.get("collation") or DEFAULT_COLLATION,
        }

    async def get_tables(self) -> list[dict[str, Any]]:
        return await self.execute_query(
            """
            SELECT
                TABLE_SCHEMA AS schema_name,
                TABLE_NAME AS table_name,
                TABLE_COMMENT AS comment
            FROM INFORMATION_SCHEMA.TABLES
            WHERE TABLE_SCHEMA = %s AND TABLE_TYPE = 'BASE TABLE'
            ORDER BY TABLE_NAME
            """,
            (self.config.database,),
        )

    async def get_columns(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        rows = await self.execute_query(
            """
            SELECT
                COLUMN_NAME,
                DATA_TYPE,
                COLUMN_TYPE,
                IS_NULLABLE,
                COLUMN_DEFAULT,
                CHARACTER_MAXIMUM_LENGTH,
                NUMERIC_PRECISION,
                NUMERIC_SCALE,
                COLUMN_KEY,
                EXTRA,
                COLUMN_COMMENT
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
            ORDER BY ORDINAL_POSITION
            """,
            (schema_name, table_name),
        )
        return [self._normalize_column(row) for row in rows]

    def _normalize_column(self, row: dict[str, Any]) -> dict[str, Any]:
        """Map an INFORMATION_SCHEMA.COLUMNS row to a normalized column row."""
        return {
            "column_name": row["COLUMN_NAME"],
            "data_type": row["DATA_TYPE"],
            "is_nullable": row["IS_NULLABLE"] == "YES",
            "default_value": row.get("COLUMN_DEFAULT"),
            "max_length": row.get("CHARACTER_MAXIMUM_LENGTH"),
            "precision": row.get("NUMERIC_PRECISION"),
            "scale": row.get("NUMERIC_SCALE"),
            "is_primary_key": row.get("COLUMN_KEY") == "PRI",
            "is_unique": row.get("COLUMN_KEY") == "UNI",
            "is_auto_increment": "auto_increment" in (row.get("EXTRA") or "").lower(),
            "comment": row.get("COLUMN_COMMENT"),
            "enum_values": parse_enum_values(row.get("COLUMN_TYPE")),
        }

    async def get_foreign_keys(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        return await self.execute_query(
            """
            SELECT
                kcu.CONSTRAINT_NAME AS constraint_name,
                kcu.COLUMN_NAME AS source_column,
                kcu.REFERENCED_TABLE_NAME AS referenced_table,
                kcu.REFERENCED_COLUMN_NAME AS referenced_column,
                rc.DELETE_RULE AS on_delete,
                rc.UPDATE_RULE AS on_update
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE kcu
            JOIN INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS rc
                ON kcu.CONSTRAINT_NAME = rc.CONSTRAINT_NAME
                AND kcu.CONSTRAINT_SCHEMA = rc.CONSTRAINT_SCHEMA
            WHERE kcu.TABLE_SCHEMA = %s AND kcu.TABLE_NAME = %s
                AND kcu.REFERENCED_TABLE_NAME IS NOT NULL
            ORDER BY kcu.CONSTRAINT_NAME, kcu.ORDINAL_POSITION
            """,
            (schema_name, table_name),
        )

    async def get_indexes(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        rows = await self.execute_query(
            """
            SELECT INDEX_NAME, NON_UNIQUE, INDEX_TYPE, COLUMN_NAME
            FROM INFORMATION_SCHEMA.STATISTICS
            WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
            ORDER BY INDEX_NAME, SEQ_IN_INDEX
            """,
            (schema_name, table_name),
        )

        indexes: dict[str, dict[str, Any]] = {}
        for row in rows:
            name = row["INDEX_NAME"]
            index = indexes.setdefault(
                name,
                {
                    "index_name": name,
                    "columns": [],
                    "is_unique": int(row["NON_UNIQUE"]) == 0,
                    "is_primary": name == "PRIMARY",
                    "index_type": row.get("INDEX_TYPE") or "",
                },
            )
            # functional index parts have no column name
            if row.get("COLUMN_NAME"):
                index["columns"].append(row["COLUMN_NAME"])
        return list(indexes.values())
