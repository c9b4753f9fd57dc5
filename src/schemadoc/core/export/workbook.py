"""Render a Database snapshot as an Excel workbook."""

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from schemadoc.core.models.schema import (
    Column,
    Database,
    Table,
    all_constraints,
    index_type_display_name,
    table_display_name,
)

logger = logging.getLogger(__name__)

SUMMARY_SHEET = "Summary"
TABLES_SHEET = "Tables"

MAX_SHEET_TITLE_LENGTH = 31
MAX_COLUMN_WIDTH = 60

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")
SECTION_FONT = Font(bold=True, size=12)

MARK = "✓"

_INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")

TABLES_HEADER = ["Physical Name", "Logical Name", "Schema", "Columns", "Comment"]
COLUMNS_HEADER = [
    "#",
    "Physical Name",
    "Logical Name",
    "Data Type",
    "Nullable",
    "Default",
    "Max Length",
    "Precision",
    "Scale",
    "PK",
    "UK",
    "Auto Increment",
    "Foreign Key",
    "Enum Values",
    "Comment",
]
CONSTRAINTS_HEADER = [
    "Constraint Name",
    "Source Column",
    "Referenced Table",
    "Referenced Column",
    "On Delete",
    "On Update",
    "Enabled",
]
INDEXES_HEADER = ["Index Name", "Columns", "Unique", "Primary", "Type"]


class WorkbookExportError(Exception):
    """Raised when the workbook cannot be built or saved."""

    pass


def make_sheet_title(name: str, used_titles: set[str]) -> str:
    """Build a valid, unused worksheet title from a table name.

    Excel forbids ``[]:*?/\\`` and control characters in titles, limits
    them to 31 characters and compares them case-insensitively. The chosen
    title is added to ``used_titles`` (stored lowercased).

    Args:
        name: Preferred title, usually a table display name.
        used_titles: Lowercased titles already present in the workbook.

    Returns:
        A title safe to pass to ``Workbook.create_sheet``.
    """
    printable = ILLEGAL_CHARACTERS_RE.sub("", name)
    base = _INVALID_TITLE_CHARS.sub("_", printable).strip("'").strip() or "Sheet"
    title = base[:MAX_SHEET_TITLE_LENGTH]

    counter = 2
    while title.lower() in used_titles:
        suffix = f" ({counter})"
        title = base[: MAX_SHEET_TITLE_LENGTH - len(suffix)] + suffix
        counter += 1

    used_titles.add(title.lower())
    return title


class WorkbookWriter:
    """Writes database definition workbooks.

    Layout:
    - "Summary": database properties, dependency order and validation warnings
    - "Tables": one row per table
    - one sheet per table with its properties, column grid and, when
      ``include_constraints`` is set, its referential constraints and indexes
    """

    def __init__(
        self,
        prefer_logical_names: bool = False,
        include_constraints: bool = True,
        template_path: Path | None = None,
    ) -> None:
        self.prefer_logical_names = prefer_logical_names
        self.include_constraints = include_constraints
        self.template_path = template_path

    def has_template(self) -> bool:
        return self.template_path is not None and Path(self.template_path).is_file()

    def write(
        self,
        database: Database,
        output_path: Path,
        warnings: Sequence[str] = (),
        dependency_order: Sequence[str] = (),
    ) -> Path:
        """Build the workbook for ``database`` and save it.

        Args:
            database: Snapshot to render.
            output_path: Destination .xlsx file. Parent directories are created.
            warnings: Validation warnings listed on the summary sheet.
            dependency_order: Table order listed on the summary sheet.

        Returns:
            Path of the written file.

        Raises:
            WorkbookExportError: If the template cannot be read or the file
                cannot be saved.
        """
        output_path = Path(output_path)
        workbook = self._open_workbook()

        self._write_summary_sheet(workbook, database, warnings, dependency_order)
        self._write_tables_sheet(workbook, database)

        used_titles = {title.lower() for title in workbook.sheetnames}
        for table in database.tables:
            title = make_sheet_title(self._sheet_name(table), used_titles)
            self._write_table_sheet(workbook.create_sheet(title), table)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            workbook.save(output_path)
        except Exception as e:
            raise WorkbookExportError(f"Failed to write workbook {output_path}: {e}") from e

        logger.info(f"Wrote {len(database.tables)} table sheets to {output_path}")
        return output_path

    def _open_workbook(self) -> Workbook:
        """Start from the template when one exists, otherwise from an empty workbook."""
        if self.template_path is not None and not self.has_template():
            logger.warning(f"Template {self.template_path} not found, using a blank workbook")

        if self.has_template():
            try:
                workbook = load_workbook(self.template_path)
            except Exception as e:
                raise WorkbookExportError(
                    f"Failed to read template {self.template_path}: {e}"
                ) from e
            for title in (SUMMARY_SHEET, TABLES_SHEET):
                if title in workbook.sheetnames:
                    del workbook[title]
            return workbook

        workbook = Workbook()
        workbook.remove(workbook.active)
        return workbook

    def _sheet_name(self, table: Table) -> str:
        if self.prefer_logical_names:
            return table_display_name(table)
        return table.name.physical_name

    def _write_summary_sheet(
        self,
        workbook: Workbook,
        database: Database,
        warnings: Sequence[str],
        dependency_order: Sequence[str],
    ) -> None:
        sheet = workbook.create_sheet(SUMMARY_SHEET, 0)

        for label, value in (
            ("Database", database.name),
            ("Version", database.version),
            ("Charset", database.charset),
            ("Collation", database.collation),
            ("Tables", len(database.tables)),
        ):
            _append_row(sheet, [label, value])
            sheet.cell(row=sheet.max_row, column=1).font = HEADER_FONT

        if dependency_order:
            _append_row(sheet, [])
            self._append_section_title(sheet, "Dependency Order")
            self._append_header(sheet, ["#", "Table"])
            for position, table_name in enumerate(dependency_order, start=1):
                _append_row(sheet, [position, table_name])

        if warnings:
            _append_row(sheet, [])
            self._append_section_title(sheet, "Warnings")
            for warning in warnings:
                _append_row(sheet, [warning])

        _fit_column_widths(sheet)

    def _write_tables_sheet(self, workbook: Workbook, database: Database) -> None:
        sheet = workbook.create_sheet(TABLES_SHEET, 1)
        self._append_header(sheet, TABLES_HEADER)

        for table in database.tables:
            _append_row(
                sheet,
                [
                    table.name.physical_name,
                    table.name.logical_name,
                    table.schema_name,
                    len(table.columns),
                    table.name.comment,
                ],
            )

        sheet.freeze_panes = "A2"
        _fit_column_widths(sheet)

    def _write_table_sheet(self, sheet: Worksheet, table: Table) -> None:
        for label, value in (
            ("Physical Name", table.name.physical_name),
            ("Logical Name", table.name.logical_name),
            ("Schema", table.schema_name),
            ("Comment", table.name.comment),
        ):
            _append_row(sheet, [label, value])
            sheet.cell(row=sheet.max_row, column=1).font = HEADER_FONT

        _append_row(sheet, [])
        self._append_section_title(sheet, "Columns")
        self._append_header(sheet, COLUMNS_HEADER)
        for position, column in enumerate(table.columns, start=1):
            _append_row(sheet, _column_row(position, column))

        if self.include_constraints:
            constraints = all_constraints(table)
            if constraints:
                _append_row(sheet, [])
                self._append_section_title(sheet, "Referential Constraints")
                self._append_header(sheet, CONSTRAINTS_HEADER)
                for constraint in constraints:
                    _append_row(
                        sheet,
                        [
                            constraint.constraint_name,
                            constraint.source_column,
                            constraint.referenced_table,
                            constraint.referenced_column,
                            constraint.on_delete.value,
                            constraint.on_update.value,
                            MARK if constraint.is_enabled else "",
                        ],
                    )

            if table.indexes:
                _append_row(sheet, [])
                self._append_section_title(sheet, "Indexes")
                self._append_header(sheet, INDEXES_HEADER)
                for index in table.indexes:
                    _append_row(
                        sheet,
                        [
                            index.index_name,
                            ", ".join(index.columns),
                            MARK if index.is_unique else "",
                            MARK if index.is_primary else "",
                            index_type_display_name(index.index_type),
                        ],
                    )

        _fit_column_widths(sheet)

    @staticmethod
    def _append_section_title(sheet: Worksheet, title: str) -> None:
        _append_row(sheet, [title])
        sheet.cell(row=sheet.max_row, column=1).font = SECTION_FONT

    @staticmethod
    def _append_header(sheet: Worksheet, header: Sequence[str]) -> None:
        _append_row(sheet, list(header))
        row = sheet.max_row
        for column_index in range(1, len(header) + 1):
            cell = sheet.cell(row=row, column=column_index)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL


def _column_row(position: int, column: Column) -> list[Any]:
    foreign_key = column.foreign_key_constraint
    return [
        position,
        column.name.physical_name,
        column.name.logical_name,
        column.data_type,
        "YES" if column.is_nullable else "NO",
        column.default_value or "",
        column.max_length if column.max_length is not None else "",
        column.precision if column.precision is not None else "",
        column.scale if column.scale is not None else "",
        MARK if column.is_primary_key else "",
        MARK if column.is_unique else "",
        MARK if column.is_auto_increment else "",
        f"{foreign_key.referenced_table}.{foreign_key.referenced_column}" if foreign_key else "",
        ", ".join(column.enum_values),
        column.name.comment,
    ]


def _append_row(sheet: Worksheet, values: Sequence[Any]) -> None:
    """Append catalog values as plain data.

    Control characters Excel cannot store are dropped, and text starting with
    "=" stays text instead of becoming a formula.
    """
    sheet.append(
        [ILLEGAL_CHARACTERS_RE.sub("", v) if isinstance(v, str) else v for v in values]
    )
    if not values:
        return

    row = sheet.max_row
    for column_index in range(1, len(values) + 1):
        cell = sheet.cell(row=row, column=column_index)
        if cell.data_type == "f":
            cell.data_type = "s"


def _fit_column_widths(sheet: Worksheet) -> None:
    widths: dict[int, int] = {}
    for row in sheet.iter_rows():
        for cell in row:
            if cell.value is None:
                continue
            length = len(str(cell.value))
            widths[cell.column] = max(widths.get(cell.column, 0), length)

    for column_index, width in widths.items():
        letter = get_column_letter(column_index)
        sheet.column_dimensions[letter].width = min(width + 2, MAX_COLUMN_WIDTH)
