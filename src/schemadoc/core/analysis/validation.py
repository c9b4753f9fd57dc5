"""Schema validation: circular references and per-table integrity checks."""

import logging

from schemadoc.core.analysis.cycles import find_circular_references
from schemadoc.core.models.analysis import (
    CircularReferenceResult,
    IssueCategory,
    IssueSeverity,
    ValidationIssue,
    ValidationResult,
)
from schemadoc.core.models.schema import (
    Database,
    Table,
    column_by_physical_name,
    column_display_name,
    foreign_key_columns,
    primary_key_columns,
    table_by_physical_name,
    table_display_name,
)

logger = logging.getLogger(__name__)

PATH_SEPARATOR = " → "


def validate_database(database: Database) -> ValidationResult:
    """Validate a schema snapshot and collect errors and warnings.

    Checks, in order: circular references between tables, presence of a
    primary key on every table, and existence of the table and column targeted
    by every column-level foreign key. Never raises for schema content.

    Args:
        database: Schema snapshot to validate.

    Returns:
        ValidationResult; ``is_valid`` is False when any error was recorded.
    """
    issues: list[ValidationIssue] = []

    circular = find_circular_references(database)
    if circular.has_circular_reference:
        issues.append(
            ValidationIssue(
                severity=IssueSeverity.ERROR,
                category=IssueCategory.CIRCULAR_REFERENCE,
                message=build_circular_reference_message(circular),
            )
        )

    for table in database.tables:
        issues.extend(_validate_table(table, database))

    errors = [issue.message for issue in issues if issue.severity is IssueSeverity.ERROR]
    warnings = [issue.message for issue in issues if issue.severity is IssueSeverity.WARNING]

    logger.debug(
        f"Validated database {database.name!r}: {len(errors)} errors, {len(warnings)} warnings"
    )

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
        issues=issues,
    )


def build_circular_reference_message(result: CircularReferenceResult) -> str:
    """Describe circular paths using table display names."""
    display_names = {info.physical_name: info.display_name for info in result.involved_tables}

    chains = [
        PATH_SEPARATOR.join(display_names.get(name, name) for name in path)
        for path in result.circular_paths
    ]

    if len(chains) == 1:
        return f"Circular reference detected in referential constraints: {chains[0]}"

    numbered = ", ".join(f"{index}. {chain}" for index, chain in enumerate(chains, start=1))
    return f"Multiple circular references detected in referential constraints: {numbered}"


def _validate_table(table: Table, database: Database) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    table_name = table_display_name(table)

    if not primary_key_columns(table):
        issues.append(
            ValidationIssue(
                severity=IssueSeverity.WARNING,
                category=IssueCategory.MISSING_PRIMARY_KEY,
                message=f"Table {table_name} has no primary key defined",
                table=table.name.physical_name,
            )
        )

    for column in foreign_key_columns(table):
        constraint = column.foreign_key_constraint
        if constraint is None:
            continue

        referenced = table_by_physical_name(database, constraint.referenced_table)
        if referenced is None:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.MISSING_REFERENCED_TABLE,
                    message=(
                        f"Column {column_display_name(column)} of table {table_name} "
                        f"references table {constraint.referenced_table}, which does not exist"
                    ),
                    table=table.name.physical_name,
                    column=column.name.physical_name,
                )
            )
        elif column_by_physical_name(referenced, constraint.referenced_column) is None:
            issues.append(
                ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    category=IssueCategory.MISSING_REFERENCED_COLUMN,
                    message=(
                        f"Column {column_display_name(column)} of table {table_name} "
                        f"references column {table_display_name(referenced)}."
                        f"{constraint.referenced_column}, which does not exist"
                    ),
                    table=table.name.physical_name,
                    column=column.name.physical_name,
                )
            )

    return issues
