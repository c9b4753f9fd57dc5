"""Result models produced by the schema analysis engine."""

from enum import Enum

from pydantic import BaseModel, Field

# =============================================================================
# Circular references
# =============================================================================


class TableInfo(BaseModel):
    """Names of a table involved in a circular reference."""

    physical_name: str
    logical_name: str
    display_name: str


class CircularReferenceResult(BaseModel):
    """Outcome of circular reference detection."""

    has_circular_reference: bool = False
    circular_paths: list[list[str]] = Field(
        default_factory=list,
        description="Closed chains of table physical names, e.g. [A, B, A]",
    )
    involved_tables: list[TableInfo] = Field(default_factory=list)


# =============================================================================
# Dependencies
# =============================================================================


class DependencyAnalysis(BaseModel):
    """Forward/reverse adjacency and a dependency-respecting table order."""

    dependencies: dict[str, list[str]] = Field(
        default_factory=dict, description="table -> tables it references"
    )
    reverse_dependencies: dict[str, list[str]] = Field(
        default_factory=dict, description="table -> tables referencing it"
    )
    topological_order: list[str] = Field(
        default_factory=list, description="Referenced tables precede referencing ones"
    )


# =============================================================================
# Validation
# =============================================================================


class IssueSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueCategory(str, Enum):
    """Machine-readable classification of a validation message."""

    CIRCULAR_REFERENCE = "circular_reference"
    MISSING_PRIMARY_KEY = "missing_primary_key"
    MISSING_REFERENCED_TABLE = "missing_referenced_table"
    MISSING_REFERENCED_COLUMN = "missing_referenced_column"


class ValidationIssue(BaseModel):
    """A single validation message with its category."""

    severity: IssueSeverity
    category: IssueCategory
    message: str
    table: str | None = Field(None, description="Physical name of the source table")
    column: str | None = Field(None, description="Physical name of the source column")


class ValidationResult(BaseModel):
    """Report produced by validate_database.

    ``errors`` and ``warnings`` carry the user-facing text; ``issues`` mirrors
    them with categories in the same order.
    """

    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)
