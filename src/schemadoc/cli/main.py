"""Main CLI entry point for schemadoc."""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from schemadoc import __version__
from schemadoc.cli.helpers import (
    handle_error,
    parse_table_list,
    resolve_connection,
    serialize_for_json,
    setup_logging,
)
from schemadoc.config.settings import get_settings
from schemadoc.core.adapters import AdapterRegistry
from schemadoc.core.analysis import analyze_dependencies, validate_database
from schemadoc.core.models import (
    Database,
    DependencyAnalysis,
    ExportRequest,
    ValidationResult,
    filter_tables,
)
from schemadoc.core.services import ExportService, load_snapshot, save_snapshot

# Console instances for stdout/stderr
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    table = "table"


class DepsOutputFormat(str, Enum):
    """Output format options for the deps command."""

    json = "json"
    table = "table"
    tree = "tree"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# Main app
app = typer.Typer(
    name="schemadoc",
    help="Document relational database schemas as Excel workbooks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

adapters_app = typer.Typer(
    help="List available database adapters.",
    no_args_is_help=True,
)

app.add_typer(adapters_app, name="adapters")


# Options shared by commands that read a schema
EngineOption = Annotated[
    str | None,
    typer.Option("--type", "-t", help="Database type (postgresql or mysql). Defaults to DB_TYPE."),
]
ConnectionOption = Annotated[
    Path | None,
    typer.Option("--connection", "-c", help="Path to connection configuration YAML."),
]
SnapshotOption = Annotated[
    Path | None,
    typer.Option("--snapshot", help="Read the schema from a JSON snapshot instead of a database."),
]
TablesOption = Annotated[
    str | None,
    typer.Option("--tables", help="Comma separated physical or logical table names."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"schemadoc {__version__}")
        raise typer.Exit()


def resolve_format(format: OutputFormat | None) -> OutputFormat:
    if format is not None:
        return format
    return OutputFormat(get_settings().default_format)


def output_result(data: dict | list, format: OutputFormat) -> None:
    """Output data in the specified format."""
    if format == OutputFormat.json:
        console.print_json(json.dumps(serialize_for_json(data)))
    else:
        if isinstance(data, list) and data:
            table = Table()
            for key in data[0]:
                table.add_column(key)
            for row in data:
                table.add_row(*[_cell(v) for v in row.values()])
            console.print(table)
        elif isinstance(data, dict):
            table = Table(show_header=False)
            table.add_column("Key", style="bold")
            table.add_column("Value")
            for key, value in data.items():
                table.add_row(key, _cell(value))
            console.print(table)
        else:
            console.print(data)


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return str(value)


def load_database(
    engine: str | None,
    connection: Path | None,
    snapshot: Path | None,
    tables: list[str],
) -> Database:
    """Read the schema from a snapshot file or from the configured database."""
    if snapshot is not None:
        return filter_tables(load_snapshot(snapshot), tables)

    resolved_engine, config = resolve_connection(engine, connection)
    return ExportService(resolved_engine, config).fetch_database(tables or None)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        LogLevel | None,
        typer.Option("--log-level", help="Logging level (defaults to SCHEMADOC_LOG_LEVEL)."),
    ] = None,
) -> None:
    """schemadoc - database definition documents from live schemas."""
    setup_logging(log_level.value if log_level else get_settings().log_level)


# =============================================================================
# Export
# =============================================================================


@app.command("export")
def export_command(
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Workbook path (defaults to SCHEMADOC_OUTPUT_PATH)."),
    ] = None,
    template: Annotated[
        Path | None,
        typer.Option("--template", help="Workbook used as the base of the export."),
    ] = None,
    tables: TablesOption = None,
    logical_names: Annotated[
        bool | None,
        typer.Option(
            "--logical-names/--physical-names",
            help="Name table sheets after logical or physical names.",
        ),
    ] = None,
    constraints: Annotated[
        bool | None,
        typer.Option(
            "--constraints/--no-constraints",
            help="Include referential constraint and index grids.",
        ),
    ] = None,
    engine: EngineOption = None,
    connection: ConnectionOption = None,
    snapshot: SnapshotOption = None,
    format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output format.")
    ] = None,
) -> None:
    """Export the database definition as an Excel workbook.

    Examples:
        schemadoc export -o shop.xlsx
        schemadoc export -c shop.yaml --tables customers,orders
        schemadoc export --snapshot shop.json --logical-names
    """
    try:
        settings = get_settings()
        request = ExportRequest(
            output_path=output or settings.output_path,
            template_path=template or settings.template_path,
            target_tables=parse_table_list(tables),
            prefer_logical_names=(
                settings.prefer_logical_names if logical_names is None else logical_names
            ),
            include_constraints=(
                settings.include_constraints if constraints is None else constraints
            ),
        )

        if snapshot is not None:
            result = ExportService(None).export_database(load_snapshot(snapshot), request)
        else:
            resolved_engine, config = resolve_connection(engine, connection)
            result = ExportService(resolved_engine, config).export(request)

        output_result(result.model_dump(mode="json"), resolve_format(format))
    except Exception as e:
        code = handle_error(e)
        raise typer.Exit(code) from None

    if not result.success:
        err_console.print(f"[red]Export failed:[/red] {result.error_message}")
        raise typer.Exit(1)


# =============================================================================
# Analysis
# =============================================================================


def _print_validation_table(result: ValidationResult) -> None:
    if not result.issues:
        console.print("[green]No issues found.[/green]")
        return

    table = Table(title="Validation Issues")
    table.add_column("Severity")
    table.add_column("Category")
    table.add_column("Table")
    table.add_column("Column")
    table.add_column("Message")

    for issue in result.issues:
        style = "red" if issue.severity.value == "error" else "yellow"
        table.add_row(
            f"[{style}]{issue.severity.value}[/{style}]",
            issue.category.value,
            issue.table or "",
            issue.column or "",
            issue.message,
        )
    console.print(table)


@app.command("validate")
def validate_command(
    tables: TablesOption = None,
    engine: EngineOption = None,
    connection: ConnectionOption = None,
    snapshot: SnapshotOption = None,
    format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output format.")
    ] = None,
) -> None:
    """Check the schema for circular references, missing keys and dangling references.

    Exits with code 1 when errors are found.
    """
    try:
        database = load_database(engine, connection, snapshot, parse_table_list(tables))
        result = validate_database(database)

        if resolve_format(format) == OutputFormat.json:
            output_result(result.model_dump(mode="json"), OutputFormat.json)
        else:
            _print_validation_table(result)
    except Exception as e:
        code = handle_error(e)
        raise typer.Exit(code) from None

    if not result.is_valid:
        raise typer.Exit(1)


def _print_dependency_table(analysis: DependencyAnalysis) -> None:
    table = Table(title="Table Dependencies")
    table.add_column("#", justify="right")
    table.add_column("Table")
    table.add_column("References")
    table.add_column("Referenced By")

    for position, name in enumerate(analysis.topological_order, start=1):
        table.add_row(
            str(position),
            name,
            ", ".join(analysis.dependencies.get(name, [])),
            ", ".join(analysis.reverse_dependencies.get(name, [])),
        )
    console.print(table)


def _print_dependency_tree(database_name: str, analysis: DependencyAnalysis) -> None:
    """Print referenced tables as parents of the tables referencing them."""
    tree = Tree(f"[bold]{database_name}[/bold]")

    def add_children(parent_tree: Tree, name: str) -> None:
        for child in analysis.reverse_dependencies.get(name, []):
            if child == name:
                parent_tree.add(f"[dim]{child} (self reference)[/dim]")
                continue
            add_children(parent_tree.add(child), child)

    for name in analysis.topological_order:
        referenced = [d for d in analysis.dependencies.get(name, []) if d != name]
        if not referenced:
            add_children(tree.add(f"[bold]{name}[/bold]"), name)

    console.print(tree)


@app.command("deps")
def deps_command(
    tables: TablesOption = None,
    engine: EngineOption = None,
    connection: ConnectionOption = None,
    snapshot: SnapshotOption = None,
    format: Annotated[
        DepsOutputFormat | None, typer.Option("--format", "-f", help="Output format.")
    ] = None,
) -> None:
    """Show table dependencies and a creation order where referenced tables come first.

    Exits with code 1 when tables depend on each other circularly.
    """
    try:
        database = load_database(engine, connection, snapshot, parse_table_list(tables))
        analysis = analyze_dependencies(database)

        resolved = format or DepsOutputFormat(resolve_format(None).value)
        if resolved == DepsOutputFormat.json:
            output_result(analysis.model_dump(mode="json"), OutputFormat.json)
        elif resolved == DepsOutputFormat.tree:
            _print_dependency_tree(database.name, analysis)
        else:
            _print_dependency_table(analysis)
    except Exception as e:
        code = handle_error(e)
        raise typer.Exit(code) from None


# =============================================================================
# Connection
# =============================================================================


@app.command("snapshot")
def snapshot_command(
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Destination JSON file.")
    ],
    tables: TablesOption = None,
    engine: EngineOption = None,
    connection: ConnectionOption = None,
    format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output format.")
    ] = None,
) -> None:
    """Save the retrieved schema as JSON for offline validate, deps and export runs."""
    try:
        database = load_database(engine, connection, None, parse_table_list(tables))
        path = save_snapshot(database, output)
        output_result(
            {"database": database.name, "tables": len(database.tables), "path": path},
            resolve_format(format),
        )
    except Exception as e:
        code = handle_error(e)
        raise typer.Exit(code) from None


@app.command("test-connection")
def test_connection_command(
    engine: EngineOption = None,
    connection: ConnectionOption = None,
    format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output format.")
    ] = None,
) -> None:
    """Test connectivity to the configured database."""
    try:
        resolved_engine, config = resolve_connection(engine, connection)
        result = ExportService(resolved_engine, config).test_connection()
        output_result(result.model_dump(mode="json"), resolve_format(format))
    except Exception as e:
        code = handle_error(e)
        raise typer.Exit(code) from None

    if not result.connected:
        raise typer.Exit(1)


# =============================================================================
# Adapter commands
# =============================================================================


@adapters_app.command("list")
def adapters_list(
    format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output format.")
    ] = None,
) -> None:
    """List available database types."""
    result = [
        {
            "type": info.engine,
            "display_name": info.display_name,
            "default_port": info.default_port,
        }
        for info in AdapterRegistry.list_adapters()
    ]
    output_result(result, resolve_format(format))


if __name__ == "__main__":
    app()
