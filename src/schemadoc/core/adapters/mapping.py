"""Map normalized catalog rows into the schema model.

Adapters translate engine-specific query results into the row shapes below and
leave model construction to this module:

- table row: ``schema_name``, ``table_name``, ``comment``
- column row: ``column_name``, ``data_type``, ``is_nullable``, ``default_value``,
  ``max_length``, ``precision``, ``scale``, ``is_primary_key``, ``is_unique``,
  ``is_auto_increment``, ``comment``, ``enum_values``
- foreign key row: ``constraint_name``, ``source_column``, ``referenced_table``,
  ``referenced_column``, ``on_delete``, ``on_update``, ``is_enabled``
- index row: ``index_name``, ``columns``, ``is_unique``, ``is_primary``, ``index_type``
"""

from typing import Any

from schemadoc.core.models.schema import (
    Column,
    IndexDefinition,
    ReferentialConstraint,
    Table,
    build_column,
    build_table,
    parse_constraint_action,
)


def build_constraint(table_name: str, row: dict[str, Any]) -> ReferentialConstraint:
    """Create a ReferentialConstraint from a foreign key row of ``table_name``."""
    return ReferentialConstraint(
        constraint_name=row["constraint_name"],
        source_table=table_name,
        source_column=row["source_column"],
        referenced_table=row["referenced_table"],
        referenced_column=row["referenced_column"],
        on_delete=parse_constraint_action(row.get("on_delete")),
        on_update=parse_constraint_action(row.get("on_update")),
        is_enabled=bool(row.get("is_enabled", True)),
    )


def build_column_from_row(
    row: dict[str, Any],
    foreign_key: ReferentialConstraint | None = None,
) -> Column:
    return build_column(
        row["column_name"],
        row["data_type"],
        comment=row.get("comment"),
        is_nullable=bool(row.get("is_nullable", True)),
        default_value=_optional_str(row.get("default_value")),
        max_length=_optional_int(row.get("max_length")),
        precision=_optional_int(row.get("precision")),
        scale=_optional_int(row.get("scale")),
        is_primary_key=bool(row.get("is_primary_key", False)),
        is_unique=bool(row.get("is_unique", False)),
        is_auto_increment=bool(row.get("is_auto_increment", False)),
        foreign_key_constraint=foreign_key,
        enum_values=row.get("enum_values") or (),
    )


def build_index_from_row(table_name: str, row: dict[str, Any]) -> IndexDefinition:
    return IndexDefinition(
        index_name=row["index_name"],
        table_name=table_name,
        columns=tuple(row.get("columns") or ()),
        is_unique=bool(row.get("is_unique", False)),
        is_primary=bool(row.get("is_primary", False)),
        index_type=row.get("index_type") or "",
    )


def build_table_from_rows(
    table_row: dict[str, Any],
    column_rows: list[dict[str, Any]],
    foreign_key_rows: list[dict[str, Any]] | None = None,
    index_rows: list[dict[str, Any]] | None = None,
) -> Table:
    """Assemble a Table from its catalog rows.

    Single-column foreign keys are attached to their column. Composite foreign
    keys (several rows sharing one constraint name) and keys whose source column
    is unknown are kept as table-level constraints.

    Args:
        table_row: Table identity and comment.
        column_rows: Columns in ordinal position order.
        foreign_key_rows: Foreign key column pairs of the table.
        index_rows: Indexes defined on the table.

    Returns:
        The assembled Table.
    """
    table_name = table_row["table_name"]
    column_names = {row["column_name"] for row in column_rows}

    grouped: dict[str, list[ReferentialConstraint]] = {}
    for row in foreign_key_rows or []:
        constraint = build_constraint(table_name, row)
        grouped.setdefault(constraint.constraint_name, []).append(constraint)

    column_constraints: dict[str, ReferentialConstraint] = {}
    table_constraints: list[ReferentialConstraint] = []
    for constraints in grouped.values():
        if len(constraints) == 1:
            constraint = constraints[0]
            source_column = constraint.source_column
            if source_column in column_names and source_column not in column_constraints:
                column_constraints[source_column] = constraint
                continue
        table_constraints.extend(constraints)

    columns = [
        build_column_from_row(row, column_constraints.get(row["column_name"]))
        for row in column_rows
    ]
    indexes = [build_index_from_row(table_name, row) for row in index_rows or []]

    return build_table(
        table_name,
        table_row["schema_name"],
        columns,
        comment=table_row.get("comment"),
        referential_constraints=table_constraints,
        indexes=indexes,
    )


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)
