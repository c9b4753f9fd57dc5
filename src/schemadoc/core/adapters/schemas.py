"""Connection configuration schemas for metadata adapters."""

from enum import Enum

from pydantic import BaseModel, Field, SecretStr


class SSLMode(str, Enum):
    """libpq SSL negotiation modes."""

    DISABLE = "disable"
    ALLOW = "allow"
    PREFER = "prefer"
    REQUIRE = "require"
    VERIFY_CA = "verify-ca"
    VERIFY_FULL = "verify-full"


class PostgreSQLConfig(BaseModel):
    """Configuration for PostgreSQL connections."""

    host: str = Field(..., description="Database server hostname")
    port: int = Field(default=5432, description="Database server port", ge=1, le=65535)
    database: str = Field(..., description="Database name to document")
    username: str = Field(..., description="Login role")
    password: SecretStr = Field(..., description="Login password")
    ssl_mode: SSLMode = Field(default=SSLMode.PREFER, description="SSL negotiation mode")
    connect_timeout: int = Field(
        default=30,
        description="Connection timeout in seconds",
        ge=1,
        le=600,
    )
    exclude_schemas: list[str] = Field(
        default_factory=lambda: ["information_schema", "pg_catalog", "pg_toast"],
        description="Schemas never documented",
    )
    schema_filter: str | None = Field(
        default=None,
        description="Regex pattern restricting documented schemas (e.g., '^public$')",
    )


class MySQLConfig(BaseModel):
    """Configuration for MySQL / MariaDB connections.

    The documented schema is ``database``; MySQL has no nested namespaces.
    """

    host: str = Field(..., description="Database server hostname")
    port: int = Field(default=3306, description="Database server port", ge=1, le=65535)
    database: str = Field(..., description="Schema to document")
    username: str = Field(..., description="Login user")
    password: SecretStr = Field(..., description="Login password")
    ssl: bool = Field(default=False, description="Require an SSL connection")
    connect_timeout: int = Field(
        default=30,
        description="Connection timeout in seconds",
        ge=1,
        le=600,
    )
