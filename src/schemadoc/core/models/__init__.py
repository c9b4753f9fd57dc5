"""Schema model and analysis result types."""

from schemadoc.core.models.analysis import (
    CircularReferenceResult,
    DependencyAnalysis,
    IssueCategory,
    IssueSeverity,
    TableInfo,
    ValidationIssue,
    ValidationResult,
)
from schemadoc.core.models.export import (
    DEFAULT_OUTPUT_PATH,
    ConnectionTestResult,
    ExportRequest,
    ExportResult,
)
from schemadoc.core.models.name import (
    Name,
    display_name,
    has_comment,
    has_logical_name,
    resolve_name,
    to_display_string,
)
from schemadoc.core.models.schema import (
    Column,
    ConstraintAction,
    Database,
    IndexDefinition,
    ReferentialConstraint,
    Table,
    all_constraints,
    all_referential_constraints,
    build_column,
    build_table,
    column_by_logical_name,
    column_by_physical_name,
    column_definition,
    column_definition_with_logical_name,
    column_display_name,
    constraint_definition,
    filter_tables,
    foreign_key_columns,
    has_foreign_key,
    index_definition,
    index_type_display_name,
    is_composite_index,
    is_enum_column,
    is_valid_constraint,
    is_valid_index,
    parse_constraint_action,
    primary_key_columns,
    table_by_logical_name,
    table_by_physical_name,
    table_definition,
    table_definition_with_logical_name,
    table_display_name,
)

__all__ = [
    # Names
    "Name",
    "resolve_name",
    "has_logical_name",
    "has_comment",
    "display_name",
    "to_display_string",
    # Schema model
    "ConstraintAction",
    "ReferentialConstraint",
    "Column",
    "IndexDefinition",
    "Table",
    "Database",
    "parse_constraint_action",
    "constraint_definition",
    "is_valid_constraint",
    "build_column",
    "column_display_name",
    "has_foreign_key",
    "is_enum_column",
    "column_definition",
    "column_definition_with_logical_name",
    "index_definition",
    "is_valid_index",
    "is_composite_index",
    "index_type_display_name",
    "build_table",
    "table_display_name",
    "primary_key_columns",
    "foreign_key_columns",
    "column_by_physical_name",
    "column_by_logical_name",
    "table_definition",
    "table_definition_with_logical_name",
    "table_by_physical_name",
    "table_by_logical_name",
    "all_constraints",
    "all_referential_constraints",
    "filter_tables",
    # Analysis results
    "TableInfo",
    "CircularReferenceResult",
    "DependencyAnalysis",
    "IssueSeverity",
    "IssueCategory",
    "ValidationIssue",
    "ValidationResult",
    # Export
    "DEFAULT_OUTPUT_PATH",
    "ExportRequest",
    "ExportResult",
    "ConnectionTestResult",
]
