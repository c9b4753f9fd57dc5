"""Services for schemadoc."""

from schemadoc.core.services.config_loader import (
    ConfigLoadError,
    load_connection_config,
    load_yaml_config,
    mask_sensitive_values,
    substitute_env_vars,
)
from schemadoc.core.services.export_service import (
    ExportService,
    ExportServiceError,
    SchemaValidationError,
)
from schemadoc.core.services.snapshot import SnapshotError, load_snapshot, save_snapshot

__all__ = [
    # Config loader
    "ConfigLoadError",
    "load_connection_config",
    "load_yaml_config",
    "mask_sensitive_values",
    "substitute_env_vars",
    # Export
    "ExportService",
    "ExportServiceError",
    "SchemaValidationError",
    # Snapshots
    "SnapshotError",
    "load_snapshot",
    "save_snapshot",
]
