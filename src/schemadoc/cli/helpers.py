"""CLI helper functions for connection resolution, logging and error handling."""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from schemadoc.config.settings import get_database_settings
from schemadoc.core.adapters import AdapterError, AdapterNotFoundError, AdapterRegistry
from schemadoc.core.analysis import CircularDependencyError
from schemadoc.core.export import WorkbookExportError
from schemadoc.core.services import (
    ConfigLoadError,
    ExportServiceError,
    SchemaValidationError,
    SnapshotError,
    load_connection_config,
    mask_sensitive_values,
)

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)


def setup_logging(level: str) -> None:
    """Route log records of every module to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def resolve_connection(
    engine: str | None = None,
    connection_file: Path | None = None,
) -> tuple[str, dict[str, Any]]:
    """Determine the adapter engine and its configuration.

    A connection file wins over DB_* environment settings; ``engine`` overrides
    the engine named by either source.

    Args:
        engine: Engine name from ``--type``.
        connection_file: YAML connection file from ``--connection``.

    Returns:
        Tuple of (engine name, configuration dict for the adapter).

    Raises:
        ConfigLoadError: If no complete connection configuration is available.
    """
    if connection_file is not None:
        resolved_engine, config = load_connection_config(connection_file, engine)
    else:
        resolved_engine, config = get_database_settings().to_connection_config()
        resolved_engine = (engine or resolved_engine).lower()

    logger.debug(f"Using {resolved_engine} connection: {mask_sensitive_values(config)}")
    return resolved_engine, config


def parse_table_list(tables: str | None) -> list[str]:
    """Split a comma separated ``--tables`` value."""
    if not tables:
        return []
    return [name.strip() for name in tables.split(",") if name.strip()]


def handle_error(error: Exception) -> int:
    """Handle an exception and print appropriate error message.

    Args:
        error: The exception to handle.

    Returns:
        Exit code (1 for handled errors, 2 for unexpected errors).
    """
    if isinstance(error, AdapterNotFoundError):
        err_console.print(f"[red]Error:[/red] Unsupported database type: {error.engine!r}")
        available = AdapterRegistry.available_types()
        if available:
            err_console.print(f"[dim]Available types: {', '.join(available)}[/dim]")
        return 1

    elif isinstance(error, AdapterError):
        err_console.print(f"[red]Error:[/red] {error.message}")
        return 1

    elif isinstance(error, SchemaValidationError):
        err_console.print("[red]Error:[/red] Database definition has problems:")
        for message in error.errors:
            err_console.print(f"  - {message}")
        return 1

    elif isinstance(error, CircularDependencyError):
        err_console.print(f"[red]Error:[/red] {error}")
        err_console.print(
            "[dim]Run 'schemadoc validate' to list every circular reference.[/dim]"
        )
        return 1

    elif isinstance(error, (ExportServiceError, WorkbookExportError, SnapshotError)):
        err_console.print(f"[red]Error:[/red] {error}")
        return 1

    elif isinstance(error, ConfigLoadError):
        err_console.print(f"[red]Configuration error:[/red] {error}")
        return 1

    elif isinstance(error, ValidationError):
        err_console.print(f"[red]Configuration error:[/red] {error}")
        return 1

    elif isinstance(error, FileNotFoundError):
        err_console.print(f"[red]Error:[/red] File not found: {error.filename}")
        return 1

    else:
        err_console.print(f"[red]Unexpected error:[/red] {error}")
        err_console.print("[dim]This may be a bug. Please report it.[/dim]")
        return 2


def serialize_for_json(obj: Any) -> Any:
    """Serialize an object to JSON-compatible format.

    Args:
        obj: Object to serialize.

    Returns:
        JSON-serializable object.
    """
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, Path):
        return str(obj)
    elif hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    elif isinstance(obj, dict):
        return {k: serialize_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [serialize_for_json(item) for item in obj]
    else:
        return obj
