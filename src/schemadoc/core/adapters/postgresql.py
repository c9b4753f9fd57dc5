"""PostgreSQL metadata adapter."""

import asyncio
import logging
from typing import Any

from schemadoc.core.adapters.base import MetadataAdapter
from schemadoc.core.adapters.exceptions import (
    AdapterAuthenticationError,
    AdapterConnectionError,
    AdapterQueryError,
)
from schemadoc.core.adapters.registry import AdapterRegistry
from schemadoc.core.adapters.schemas import PostgreSQLConfig

logger = logging.getLogger(__name__)


@AdapterRegistry.register(
    engine="postgresql",
    display_name="PostgreSQL",
    config_schema=PostgreSQLConfig,
)
class PostgreSQLAdapter(MetadataAdapter):
    """Adapter for PostgreSQL databases.

    Reads metadata from information_schema and pg_catalog:
    - base and partitioned tables with their comments
    - columns with types, defaults, identity/serial detection and enum labels
    - primary key and single-column unique constraints
    - foreign keys (composite keys keep their column pairing) with actions
    - indexes with their access method
    """

    ENGINE = "postgresql"

    def __init__(self, config: PostgreSQLConfig) -> None:
        super().__init__(config)
        self.config: PostgreSQLConfig = config
        self._connection: Any = None

    async def connect(self) -> None:
        """Establish connection to PostgreSQL database."""
        try:
            import psycopg
        except ImportError as e:
            raise AdapterConnectionError(
                "psycopg package required. "
                "Install with: pip install schemadoc[postgresql] or pip install psycopg[binary]",
                engine=self.ENGINE,
            ) from e

        def _connect() -> Any:
            return psycopg.connect(
                host=self.config.host,
                port=self.config.port,
                dbname=self.config.database,
                user=self.config.username,
                password=self.config.password.get_secret_value(),
                sslmode=self.config.ssl_mode.value,
                connect_timeout=self.config.connect_timeout,
                autocommit=True,
            )

        try:
            loop = asyncio.get_running_loop()
            self._connection = await loop.run_in_executor(None, _connect)
            logger.info(
                f"Connected to PostgreSQL at {self.config.host}:{self.config.port}"
                f"/{self.config.database}"
            )
        except Exception as e:
            error_msg = str(e).lower()
            if "password" in error_msg or "authentication" in error_msg:
                raise AdapterAuthenticationError(
                    f"Authentication failed: {e}",
                    engine=self.ENGINE,
                ) from e
            raise AdapterConnectionError(
                f"Failed to connect to PostgreSQL at {self.config.host}:{self.config.port}: {e}",
                engine=self.ENGINE,
            ) from e

    async def disconnect(self) -> None:
        """Close the PostgreSQL connection."""
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
                if cursor.description is None:
                    return []
                columns = [desc[0] for desc in cursor.description]
                rows = cursor.fetchall()
                return [dict(zip(columns, row, strict=True)) for row in rows]

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
        rows = await self.execute_query(
            """
            SELECT
                current_database() AS name,
                version() AS version,
                pg_encoding_to_char(d.encoding) AS charset,
                d.datcollate AS collation
            FROM pg_database d
            WHERE d.datname = current_database()
            """
        )
        if not rows:
            return {"name": self.config.database, "version": "Unknown"}
        return rows[0]

    def _build_schema_filter(self) -> tuple[str, tuple[Any, ...]]:
        """Build SQL conditions and parameters restricting documented schemas."""
        conditions = []
        params: list[Any] = []

        if self.config.exclude_schemas:
            conditions.append("n.nspname <> ALL(%s)")
            params.append(list(self.config.exclude_schemas))

        if self.config.schema_filter:
            conditions.append("n.nspname ~ %s")
            params.append(self.config.schema_filter)

        if conditions:
            return " AND " + " AND ".join(conditions), tuple(params)
        return "", ()

    async def get_tables(self) -> list[dict[str, Any]]:
        schema_filter, params = self._build_schema_filter()
        query = f"""
            SELECT
                n.nspname AS schema_name,
                c.relname AS table_name,
                obj_description(c.oid, 'pg_class') AS comment
            FROM pg_class c
            JOIN pg_namespace n ON n.oid = c.relnamespace
            WHERE c.relkind IN ('r', 'p')
            {schema_filter}
            ORDER BY c.relname, n.nspname
        """
        return await self.execute_query(query, params)

    async def get_columns(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        rows = await self.execute_query(
            """
            SELECT
                c.column_name,
                c.data_type,
                c.udt_schema,
                c.udt_name,
                c.is_nullable,
                c.column_default,
                c.character_maximum_length,
                c.numeric_precision,
                c.numeric_scale,
                c.is_identity,
                col_description(
                    (quote_ident(c.table_schema) || '.' || quote_ident(c.table_name))::regclass,
                    c.ordinal_position
                ) AS comment
            FROM information_schema.columns c
            WHERE c.table_schema = %s AND c.table_name = %s
            ORDER BY c.ordinal_position
            """,
            (schema_name, table_name),
        )

        primary_keys, unique_columns = await self._get_key_columns(schema_name, table_name)

        columns = []
        for row in rows:
            enum_values: list[str] = []
            if row["data_type"] == "USER-DEFINED":
                enum_values = await self._get_enum_values(row["udt_schema"], row["udt_name"])
            columns.append(
                self._normalize_column(row, primary_keys, unique_columns, enum_values)
            )
        return columns

    def _normalize_column(
        self,
        row: dict[str, Any],
        primary_keys: set[str],
        unique_columns: set[str],
        enum_values: list[str],
    ) -> dict[str, Any]:
        """Map an information_schema.columns row to a normalized column row."""
        default = row.get("column_default")
        return {
            "column_name": row["column_name"],
            "data_type": self._format_data_type(row, enum_values),
            "is_nullable": row["is_nullable"] == "YES",
            "default_value": default,
            "max_length": row.get("character_maximum_length"),
            "precision": row.get("numeric_precision"),
            "scale": row.get("numeric_scale"),
            "is_primary_key": row["column_name"] in primary_keys,
            "is_unique": row["column_name"] in unique_columns,
            "is_auto_increment": bool(default and "nextval(" in default)
            or row.get("is_identity") == "YES",
            "comment": row.get("comment"),
            "enum_values": enum_values,
        }

    def _format_data_type(self, row: dict[str, Any], enum_values: list[str]) -> str:
        """Report enum types as 'enum', other user-defined types and arrays by udt name."""
        base_type = row["data_type"]
        udt_name = row.get("udt_name") or ""

        if base_type == "USER-DEFINED":
            return "enum" if enum_values else udt_name
        if base_type == "ARRAY":
            return f"{udt_name.lstrip('_')}[]"
        return base_type

    async def _get_key_columns(
        self, schema_name: str, table_name: str
    ) -> tuple[set[str], set[str]]:
        """Return (primary key columns, single-column unique columns)."""
        rows = await self.execute_query(
            """
            SELECT
                con.contype AS constraint_type,
                array_length(con.conkey, 1) AS key_size,
                a.attname AS column_name
            FROM pg_constraint con
            JOIN pg_class c ON c.oid = con.conrelid
            JOIN pg_namespace n ON n.oid = c.relnamespace
            JOIN pg_attribute a ON a.attrelid = c.oid AND a.attnum = ANY(con.conkey)
            WHERE n.nspname = %s AND c.relname = %s AND con.contype IN ('p', 'u')
            """,
            (schema_name, table_name),
        )

        primary_keys = {row["column_name"] for row in rows if row["constraint_type"] == "p"}
        unique_columns = {
            row["column_name"]
            for row in rows
            if row["constraint_type"] == "u" and row["key_size"] == 1
        }
        return primary_keys, unique_columns

    async def _get_enum_values(self, type_schema: str, type_name: str) -> list[str]:
        rows = await self.execute_query(
            """
            SELECT e.enumlabel AS label
            FROM pg_type t
            JOIN pg_namespace n ON n.oid = t.typnamespace
            JOIN pg_enum e ON e.enumtypid = t.oid
            WHERE n.nspname = %s AND t.typname = %s
            ORDER BY e.enumsortorder
            """,
            (type_schema, type_name),
        )
        return [row["label"] for row in rows]

    async def get_foreign_keys(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        """Extract foreign keys with one row per (source, referenced) column pair.

        Uses pg_catalog for reliable access regardless of user permissions.
        Action columns hold pg_constraint codes (a, r, c, n, d).
        """
        return await self.execute_query(
            """
            SELECT
                con.conname AS constraint_name,
                src_att.attname AS source_column,
                tgt_tbl.relname AS referenced_table,
                tgt_att.attname AS referenced_column,
                con.confdeltype AS on_delete,
                con.confupdtype AS on_update,
                con.convalidated AS is_enabled
            FROM pg_constraint con
            JOIN pg_class src_tbl ON src_tbl.oid = con.conrelid
            JOIN pg_namespace src_ns ON src_ns.oid = src_tbl.relnamespace
            JOIN pg_class tgt_tbl ON tgt_tbl.oid = con.confrelid
            CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
                WITH ORDINALITY AS k(src_attnum, tgt_attnum, position)
            JOIN pg_attribute src_att
                ON src_att.attrelid = con.conrelid AND src_att.attnum = k.src_attnum
            JOIN pg_attribute tgt_att
                ON tgt_att.attrelid = con.confrelid AND tgt_att.attnum = k.tgt_attnum
            WHERE con.contype = 'f' AND src_ns.nspname = %s AND src_tbl.relname = %s
            ORDER BY con.conname, k.position
            """,
            (schema_name, table_name),
        )

    async def get_indexes(self, schema_name: str, table_name: str) -> list[dict[str, Any]]:
        return await self.execute_query(
            """
            SELECT
                i.relname AS index_name,
                ix.indisunique AS is_unique,
                ix.indisprimary AS is_primary,
                am.amname AS index_type,
                array_agg(a.attname ORDER BY k.position) AS columns
            FROM pg_index ix
            JOIN pg_class t ON t.oid = ix.indrelid
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_class i ON i.oid = ix.indexrelid
            JOIN pg_am am ON am.oid = i.relam
            CROSS JOIN LATERAL unnest(ix.indkey::int2[]) WITH ORDINALITY AS k(attnum, position)
            JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum
            WHERE n.nspname = %s AND t.relname = %s
            GROUP BY i.relname, ix.indisunique, ix.indisprimary, am.amname
            ORDER BY i.relname
            """,
            (schema_name, table_name),
        )
