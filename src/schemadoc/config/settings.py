"""Application configuration settings."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemadoc.core.models.export import DEFAULT_OUTPUT_PATH
from schemadoc.core.services.config_loader import ConfigLoadError


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables prefixed with SCHEMADOC_.
    For example, SCHEMADOC_OUTPUT_PATH=/tmp/shop.xlsx.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMADOC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Export
    output_path: Path = Field(
        default=DEFAULT_OUTPUT_PATH,
        description="Default workbook destination",
    )
    template_path: Path | None = Field(
        default=None,
        description="Workbook used as the base of every export",
    )
    prefer_logical_names: bool = Field(
        default=False,
        description="Name table sheets after logical names",
    )
    include_constraints: bool = Field(
        default=True,
        description="Write referential constraint and index grids",
    )

    # Output
    default_format: Literal["json", "table"] = Field(
        default="table",
        description="Default output format for CLI commands",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )


class DatabaseSettings(BaseSettings):
    """Connection settings read from DB_* environment variables.

    Used when no connection file is given on the command line, e.g.
    DB_TYPE=mysql DB_HOST=localhost DB_DATABASE=shop DB_USERNAME=app DB_PASSWORD=...
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    type: str | None = Field(default=None, description="Engine name: postgresql or mysql")
    host: str = Field(default="localhost", description="Database server hostname")
    port: int | None = Field(default=None, description="Port (engine default when unset)")
    database: str | None = Field(default=None, description="Database to document")
    username: str | None = Field(default=None, description="Login user")
    password: SecretStr | None = Field(default=None, description="Login password")
    ssl: bool = Field(default=False, description="Require SSL")
    connect_timeout: int | None = Field(default=None, description="Timeout in seconds")

    def to_connection_config(self) -> tuple[str, dict[str, Any]]:
        """Build the engine name and adapter configuration dict.

        Returns:
            Tuple of (engine name, configuration dict for the adapter).

        Raises:
            ConfigLoadError: If DB_TYPE, DB_DATABASE or DB_USERNAME is missing.
        """
        missing = [
            f"DB_{name.upper()}"
            for name in ("type", "database", "username")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigLoadError(
                f"Missing database settings: {', '.join(missing)}. "
                "Set them in the environment or pass --connection"
            )

        engine = self.type.lower()
        config: dict[str, Any] = {
            "host": self.host,
            "database": self.database,
            "username": self.username,
            "password": self.password.get_secret_value() if self.password else "",
        }
        if self.port is not None:
            config["port"] = self.port
        if self.connect_timeout is not None:
            config["connect_timeout"] = self.connect_timeout

        if engine == "postgresql":
            if self.ssl:
                config["ssl_mode"] = "require"
        else:
            config["ssl"] = self.ssl

        return engine, config


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings instance."""
    return DatabaseSettings()
