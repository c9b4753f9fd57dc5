"""Workbook export for schemadoc."""

from schemadoc.core.export.workbook import (
    WorkbookExportError,
    WorkbookWriter,
    make_sheet_title,
)

__all__ = [
    "WorkbookExportError",
    "WorkbookWriter",
    "make_sheet_title",
]
