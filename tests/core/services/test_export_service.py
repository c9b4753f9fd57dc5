"""Tests for ExportService."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from openpyxl import load_workbook

from factories import linked_table
from schemadoc.core.adapters import AdapterConnectionError
from schemadoc.core.models import Database, ExportRequest, build_column, build_table
from schemadoc.core.services import ExportService, ExportServiceError

GET_ADAPTER = "schemadoc.core.services.export_service.AdapterRegistry.get_adapter"


class TestExportService:
    """Test cases for ExportService.export."""

    def test_export_success(self, mock_adapter: MagicMock, tmp_path: Path):
        """Test exporting a valid schema."""
        service = ExportService("postgresql", {"host": "localhost"})
        request = ExportRequest(output_path=tmp_path / "shop.xlsx")

        with patch(GET_ADAPTER) as mock_get:
            mock_get.return_value = mock_adapter
            result = service.export(request)

        mock_get.assert_called_once_with("postgresql", {"host": "localhost"})
        assert result.success is True
        assert result.output_path == tmp_path / "shop.xlsx"
        assert result.exported_table_count == 4
        assert result.dependency_order == ["customers", "orders", "products", "order_items"]
        assert result.warnings == []
        assert result.error_message is None
        assert (tmp_path / "shop.xlsx").exists()

        mock_adapter.retrieve_database.assert_awaited_once_with(None)
        mock_adapter.__aexit__.assert_awaited_once()

    def test_export_passes_target_tables(self, mock_adapter: MagicMock, tmp_path: Path):
        """Test that requested tables reach the adapter."""
        service = ExportService("postgresql")
        request = ExportRequest(
            output_path=tmp_path / "shop.xlsx",
            target_tables=["customers", "注文"],
        )

        with patch(GET_ADAPTER, return_value=mock_adapter):
            result = service.export(request)

        mock_adapter.retrieve_database.assert_awaited_once_with(["customers", "注文"])
        assert result.success is True
        assert result.exported_table_count == 2
        assert result.dependency_order == ["customers", "orders"]

    def test_export_connection_test_fails(self, mock_adapter: MagicMock, tmp_path: Path):
        """Test that a failed connection test is reported in the result."""
        mock_adapter.test_connection = AsyncMock(return_value=False)
        service = ExportService("postgresql")

        with patch(GET_ADAPTER, return_value=mock_adapter):
            result = service.export(ExportRequest(output_path=tmp_path / "shop.xlsx"))

        assert result.success is False
        assert result.error_message == "Cannot connect to the database"
        mock_adapter.retrieve_database.assert_not_awaited()
        assert not (tmp_path / "shop.xlsx").exists()

    def test_export_adapter_error(self, mock_adapter: MagicMock, tmp_path: Path):
        """Test that adapter errors are reported in the result."""
        mock_adapter.__aenter__ = AsyncMock(
            side_effect=AdapterConnectionError("Connection refused", engine="postgresql")
        )
        service = ExportService("postgresql")

        with patch(GET_ADAPTER, return_value=mock_adapter):
            result = service.export(ExportRequest(output_path=tmp_path / "shop.xlsx"))

        assert result.success is False
        assert "Connection refused" in result.error_message

    def test_export_invalid_schema(self, mock_adapter: MagicMock, cyclic_database, tmp_path):
        """Test that validation errors stop the export."""
        mock_adapter.retrieve_database = AsyncMock(return_value=cyclic_database)
        service = ExportService("postgresql")

        with patch(GET_ADAPTER, return_value=mock_adapter):
            result = service.export(ExportRequest(output_path=tmp_path / "cyclic.xlsx"))

        assert result.success is False
        assert "Circular reference detected" in result.error_message
        assert "A → B → A" in result.error_message
        assert not (tmp_path / "cyclic.xlsx").exists()

    def test_export_without_engine(self, tmp_path: Path):
        """Test that retrieving without a database type fails cleanly."""
        result = ExportService(None).export(ExportRequest(output_path=tmp_path / "a.xlsx"))

        assert result.success is False
        assert result.error_message == "No database type configured"


class TestExportDatabase:
    """Test cases for ExportService.export_database (offline snapshots)."""

    def test_warnings_are_reported(self, tmp_path: Path):
        """Test that warnings do not block the export."""
        database = Database(
            name="logs",
            tables=(build_table("events", "public", [build_column("payload", "jsonb")]),),
        )

        result = ExportService(None).export_database(
            database, ExportRequest(output_path=tmp_path / "logs.xlsx")
        )

        assert result.success is True
        assert result.warnings == ["Table events has no primary key defined"]
        summary = load_workbook(tmp_path / "logs.xlsx")["Summary"]
        values = [row[0].value for row in summary.iter_rows(min_col=1, max_col=1)]
        assert "Table events has no primary key defined" in values

    def test_control_characters_in_comments(self, tmp_path: Path):
        """Test that comments with control characters still export."""
        database = Database(
            name="logs",
            tables=(
                build_table(
                    "logs",
                    "public",
                    [
                        build_column("id", "integer", is_nullable=False, is_primary_key=True),
                        build_column("message", "text", comment="ログ\x07bell"),
                    ],
                ),
            ),
        )

        result = ExportService(None).export_database(
            database, ExportRequest(output_path=tmp_path / "logs.xlsx")
        )

        assert result.success is True
        assert result.error_message is None
        assert (tmp_path / "logs.xlsx").exists()

    def test_filter_by_logical_name(self, shop_database: Database, tmp_path: Path):
        """Test that target tables match logical names."""
        request = ExportRequest(output_path=tmp_path / "a.xlsx", target_tables=["顧客マスタ"])

        result = ExportService(None).export_database(shop_database, request)

        assert result.success is True
        assert result.exported_table_count == 1

    def test_filter_leaving_dangling_reference(self, shop_database: Database, tmp_path: Path):
        """Test that filtering out a referenced table is a validation error."""
        request = ExportRequest(output_path=tmp_path / "a.xlsx", target_tables=["orders"])

        result = ExportService(None).export_database(shop_database, request)

        assert result.success is False
        assert "references table customers, which does not exist" in result.error_message

    def test_no_requested_table_exists(self, shop_database: Database, tmp_path: Path):
        """Test a filter matching nothing."""
        request = ExportRequest(output_path=tmp_path / "a.xlsx", target_tables=["invoices"])

        result = ExportService(None).export_database(shop_database, request)

        assert result.success is False
        assert "invoices" in result.error_message

    def test_custom_writer(self, tmp_path: Path):
        """Test that an injected writer is used with the computed order."""
        writer = MagicMock()
        writer.write.return_value = tmp_path / "custom.xlsx"
        database = Database(
            name="db",
            tables=(linked_table("Orders", "Customers"), linked_table("Customers")),
        )

        result = ExportService(None, writer=writer).export_database(
            database, ExportRequest(output_path=tmp_path / "custom.xlsx")
        )

        writer.write.assert_called_once_with(
            database,
            tmp_path / "custom.xlsx",
            warnings=[],
            dependency_order=["Customers", "Orders"],
        )
        assert result.output_path == tmp_path / "custom.xlsx"

    def test_writer_failure(self, shop_database: Database, tmp_path: Path):
        """Test that workbook save errors are reported in the result."""
        result = ExportService(None).export_database(
            shop_database, ExportRequest(output_path=tmp_path)
        )

        assert result.success is False
        assert "Failed to write workbook" in result.error_message


class TestFetchAndConnection:
    """Test cases for fetch_database and test_connection."""

    def test_fetch_database(self, mock_adapter: MagicMock, shop_database: Database):
        """Test retrieving the snapshot."""
        with patch(GET_ADAPTER, return_value=mock_adapter):
            database = ExportService("postgresql").fetch_database(["orders"])

        assert database == shop_database
        mock_adapter.retrieve_database.assert_awaited_once_with(["orders"])

    def test_fetch_database_connection_failure(self, mock_adapter: MagicMock):
        """Test that a failed connection test raises."""
        mock_adapter.test_connection = AsyncMock(return_value=False)

        with patch(GET_ADAPTER, return_value=mock_adapter):
            with pytest.raises(ExportServiceError):
                ExportService("postgresql").fetch_database()

    def test_test_connection_success(self, mock_adapter: MagicMock):
        """Test a successful connection test."""
        with patch(GET_ADAPTER, return_value=mock_adapter):
            result = ExportService("postgresql").test_connection()

        assert result.engine == "postgresql"
        assert result.connected is True
        assert result.message == "Connection successful"
        assert result.latency_ms is not None

    def test_test_connection_adapter_error(self, mock_adapter: MagicMock):
        """Test that connection errors become a failed result."""
        mock_adapter.__aenter__ = AsyncMock(
            side_effect=AdapterConnectionError("timeout", engine="postgresql")
        )

        with patch(GET_ADAPTER, return_value=mock_adapter):
            result = ExportService("postgresql").test_connection()

        assert result.connected is False
        assert result.message == "timeout"
