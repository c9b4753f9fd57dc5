"""Configuration package for schemadoc."""

from schemadoc.config.settings import (
    DatabaseSettings,
    Settings,
    get_database_settings,
    get_settings,
)

__all__ = ["DatabaseSettings", "Settings", "get_database_settings", "get_settings"]
