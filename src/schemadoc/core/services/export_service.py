"""Service wiring retrieval, validation, dependency analysis and workbook export."""

import asyncio
import logging
import time
from typing import Any

from schemadoc.core.adapters.exceptions import AdapterError
from schemadoc.core.adapters.registry import AdapterRegistry
from schemadoc.core.analysis.dependencies import analyze_dependencies
from schemadoc.core.analysis.validation import validate_database
from schemadoc.core.export.workbook import WorkbookExportError, WorkbookWriter
from schemadoc.core.models.export import ConnectionTestResult, ExportRequest, ExportResult
from schemadoc.core.models.schema import Database, filter_tables

logger = logging.getLogger(__name__)


class ExportServiceError(Exception):
    """Raised when an export run cannot complete."""

    pass


class SchemaValidationError(ExportServiceError):
    """Raised when the schema has validation errors."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(f"Database definition has problems: {', '.join(errors)}")


class ExportService:
    """Service exporting a database definition workbook.

    Handles:
    - Testing the connection
    - Retrieving the schema snapshot through the registered adapter
    - Validating the snapshot and ordering its tables by dependency
    - Writing the workbook
    """

    def __init__(
        self,
        engine: str | None,
        connection_config: dict[str, Any] | None = None,
        writer: WorkbookWriter | None = None,
    ) -> None:
        """Initialize export service.

        Args:
            engine: Registered adapter engine name. May be None when only
                offline snapshots are exported.
            connection_config: Configuration dict validated by the adapter.
            writer: Workbook writer to use instead of one built per request.
        """
        self.engine = engine
        self.connection_config = connection_config or {}
        self.writer = writer

    def _get_adapter(self):
        if not self.engine:
            raise ExportServiceError("No database type configured")
        return AdapterRegistry.get_adapter(self.engine, self.connection_config)

    def test_connection(self) -> ConnectionTestResult:
        """Test connection to the configured database.

        Returns:
            ConnectionTestResult with status.
        """
        adapter = self._get_adapter()

        async def _test() -> ConnectionTestResult:
            start = time.perf_counter()
            try:
                async with adapter:
                    connected = await adapter.test_connection()
                    latency = (time.perf_counter() - start) * 1000
                    return ConnectionTestResult(
                        engine=adapter.ENGINE,
                        connected=connected,
                        message="Connection successful" if connected else "Connection test failed",
                        latency_ms=round(latency, 2),
                    )
            except AdapterError as e:
                return ConnectionTestResult(
                    engine=adapter.ENGINE,
                    connected=False,
                    message=str(e),
                )

        return asyncio.run(_test())

    def fetch_database(self, target_tables: list[str] | None = None) -> Database:
        """Retrieve the schema snapshot from the database.

        Args:
            target_tables: Physical or logical table names to retrieve (None = all).

        Returns:
            Database snapshot.

        Raises:
            ExportServiceError: If the connection test fails.
            AdapterError: If connecting or querying fails.
        """
        adapter = self._get_adapter()

        async def _fetch() -> Database:
            async with adapter:
                if not await adapter.test_connection():
                    raise ExportServiceError("Cannot connect to the database")
                return await adapter.retrieve_database(target_tables)

        database = asyncio.run(_fetch())
        logger.info(f"Retrieved {len(database.tables)} tables from {database.name!r}")
        return database

    def export(self, request: ExportRequest) -> ExportResult:
        """Retrieve the schema and export it as a workbook.

        Domain failures are reported in the result rather than raised.

        Args:
            request: Export options.

        Returns:
            ExportResult describing the run.
        """
        try:
            database = self.fetch_database(request.target_tables or None)
        except (AdapterError, ExportServiceError) as e:
            logger.error(f"Export failed: {e}")
            return ExportResult(
                success=False,
                output_path=request.output_path,
                error_message=str(e),
            )

        return self.export_database(database, request)

    def export_database(self, database: Database, request: ExportRequest) -> ExportResult:
        """Validate an already retrieved snapshot and write its workbook.

        Args:
            database: Schema snapshot, e.g. loaded from a JSON file.
            request: Export options.

        Returns:
            ExportResult describing the run.
        """
        try:
            return self._export(database, request)
        except (ExportServiceError, WorkbookExportError) as e:
            logger.error(f"Export failed: {e}")
            return ExportResult(
                success=False,
                output_path=request.output_path,
                error_message=str(e),
            )

    def _export(self, database: Database, request: ExportRequest) -> ExportResult:
        database = filter_tables(database, request.target_tables)
        if request.target_tables and not database.tables:
            raise ExportServiceError(
                f"None of the requested tables exist: {', '.join(request.target_tables)}"
            )

        validation = validate_database(database)
        for warning in validation.warnings:
            logger.warning(warning)
        if not validation.is_valid:
            raise SchemaValidationError(validation.errors)

        # a valid snapshot has no circular reference, so ordering cannot fail
        dependency_order = analyze_dependencies(database).topological_order

        writer = self.writer or WorkbookWriter(
            prefer_logical_names=request.prefer_logical_names,
            include_constraints=request.include_constraints,
            template_path=request.template_path,
        )
        output_path = writer.write(
            database,
            request.output_path,
            warnings=validation.warnings,
            dependency_order=dependency_order,
        )

        return ExportResult(
            success=True,
            output_path=output_path,
            exported_table_count=len(database.tables),
            warnings=validation.warnings,
            dependency_order=dependency_order,
        )
