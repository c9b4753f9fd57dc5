"""Request and result models for workbook export."""

from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_OUTPUT_PATH = Path("./database-definition.xlsx")


class ExportRequest(BaseModel):
    """Options for one export run."""

    output_path: Path = Field(default=DEFAULT_OUTPUT_PATH, description="Workbook destination")
    template_path: Path | None = Field(default=None, description="Base workbook, if any")
    target_tables: list[str] = Field(
        default_factory=list,
        description="Physical or logical table names to export (empty = all)",
    )
    prefer_logical_names: bool = False
    include_constraints: bool = True


class ExportResult(BaseModel):
    """Outcome of an export run."""

    success: bool
    output_path: Path
    exported_table_count: int = 0
    warnings: list[str] = Field(default_factory=list)
    dependency_order: list[str] = Field(default_factory=list)
    error_message: str | None = None


class ConnectionTestResult(BaseModel):
    """Result of testing a database connection."""

    engine: str
    connected: bool
    message: str | None = None
    latency_ms: float | None = None
