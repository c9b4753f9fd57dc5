"""Immutable schema model: columns, tables, constraints and indexes.

The aggregates are plain frozen pydantic models. Derived behaviour lives in the
module-level functions below so graph algorithms never depend on methods of the
data types.
"""

from collections.abc import Iterable, Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemadoc.core.models.name import Name, display_name, has_logical_name, resolve_name

# =============================================================================
# Referential constraints
# =============================================================================


class ConstraintAction(str, Enum):
    """Action taken on delete/update of a referenced row."""

    CASCADE = "CASCADE"
    RESTRICT = "RESTRICT"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    NO_ACTION = "NO ACTION"


# PostgreSQL pg_constraint.confdeltype / confupdtype codes
_PG_ACTION_CODES = {
    "a": ConstraintAction.NO_ACTION,
    "r": ConstraintAction.RESTRICT,
    "c": ConstraintAction.CASCADE,
    "n": ConstraintAction.SET_NULL,
    "d": ConstraintAction.SET_DEFAULT,
}


def parse_constraint_action(raw: str | None) -> ConstraintAction:
    """Normalize an engine-specific rule string into a ConstraintAction.

    Accepts information_schema spellings ("SET NULL"), enum member names
    ("SET_NULL") and PostgreSQL single-letter codes. Unknown values map to
    RESTRICT.
    """
    if not raw:
        return ConstraintAction.RESTRICT

    value = raw.strip()
    if value in _PG_ACTION_CODES:
        return _PG_ACTION_CODES[value]

    normalized = " ".join(value.upper().replace("_", " ").split())
    try:
        return ConstraintAction(normalized)
    except ValueError:
        return ConstraintAction.RESTRICT


class ReferentialConstraint(BaseModel):
    """Directed edge from a (table, column) to a referenced (table, column)."""

    model_config = ConfigDict(frozen=True)

    constraint_name: str
    source_table: str
    source_column: str
    referenced_table: str
    referenced_column: str
    on_delete: ConstraintAction = ConstraintAction.RESTRICT
    on_update: ConstraintAction = ConstraintAction.RESTRICT
    is_enabled: bool = True


def constraint_definition(constraint: ReferentialConstraint) -> str:
    return (
        f"{constraint.source_table}.{constraint.source_column} -> "
        f"{constraint.referenced_table}.{constraint.referenced_column}"
    )


def is_valid_constraint(constraint: ReferentialConstraint) -> bool:
    """Check that every name field of the constraint is non-empty."""
    return all(
        len(value) > 0
        for value in (
            constraint.constraint_name,
            constraint.source_table,
            constraint.source_column,
            constraint.referenced_table,
            constraint.referenced_column,
        )
    )


# =============================================================================
# Columns
# =============================================================================


class Column(BaseModel):
    """A table column in ordinal position order."""

    model_config = ConfigDict(frozen=True)

    name: Name
    data_type: str = Field(..., description="Type name as reported by the engine")
    is_nullable: bool = True
    default_value: str | None = None
    max_length: int | None = Field(None, description="Length for character types")
    precision: int | None = Field(None, description="Precision for numeric types")
    scale: int | None = Field(None, description="Scale for numeric types")
    is_primary_key: bool = False
    is_unique: bool = False
    is_auto_increment: bool = False
    foreign_key_constraint: ReferentialConstraint | None = None
    enum_values: tuple[str, ...] = ()


def build_column(
    physical_name: str,
    data_type: str,
    *,
    comment: str | None = None,
    is_nullable: bool = True,
    default_value: str | None = None,
    max_length: int | None = None,
    precision: int | None = None,
    scale: int | None = None,
    is_primary_key: bool = False,
    is_unique: bool = False,
    is_auto_increment: bool = False,
    foreign_key_constraint: ReferentialConstraint | None = None,
    enum_values: Iterable[str] = (),
) -> Column:
    """Create a Column, resolving its Name from the raw catalog comment."""
    return Column(
        name=resolve_name(physical_name, comment),
        data_type=data_type,
        is_nullable=is_nullable,
        default_value=default_value,
        max_length=max_length,
        precision=precision,
        scale=scale,
        is_primary_key=is_primary_key,
        is_unique=is_unique,
        is_auto_increment=is_auto_increment,
        foreign_key_constraint=foreign_key_constraint,
        enum_values=tuple(enum_values),
    )


def column_display_name(column: Column) -> str:
    return display_name(column.name)


def has_foreign_key(column: Column) -> bool:
    return column.foreign_key_constraint is not None


def is_enum_column(column: Column) -> bool:
    return len(column.enum_values) > 0


def column_definition(column: Column) -> str:
    """Render a DDL-like column definition, e.g. ``price numeric(10, 2) NOT NULL``."""
    definition = f"{column.name.physical_name} {column.data_type}"

    if column.max_length:
        definition += f"({column.max_length})"
    elif column.precision and column.scale:
        definition += f"({column.precision}, {column.scale})"

    if not column.is_nullable:
        definition += " NOT NULL"
    if column.default_value:
        definition += f" DEFAULT {column.default_value}"
    if column.is_auto_increment:
        definition += " AUTO_INCREMENT"

    return definition


def column_definition_with_logical_name(column: Column) -> str:
    definition = column_definition(column)
    if has_logical_name(column.name):
        return f"{definition} -- {column.name.logical_name}"
    return definition


# =============================================================================
# Indexes
# =============================================================================


class IndexDefinition(BaseModel):
    """An index defined on a table."""

    model_config = ConfigDict(frozen=True)

    index_name: str
    table_name: str
    columns: tuple[str, ...] = ()
    is_unique: bool = False
    is_primary: bool = False
    index_type: str = ""


def index_definition(index: IndexDefinition) -> str:
    unique_keyword = "UNIQUE " if index.is_unique else ""
    type_keyword = f" USING {index.index_type}" if index.index_type else ""
    columns = ", ".join(index.columns)
    return f"{unique_keyword}INDEX {index.index_name} ON {index.table_name} ({columns}){type_keyword}"


def is_valid_index(index: IndexDefinition) -> bool:
    return (
        len(index.table_name) > 0
        and len(index.index_name) > 0
        and len(index.columns) > 0
        and all(len(column) > 0 for column in index.columns)
    )


def is_composite_index(index: IndexDefinition) -> bool:
    return len(index.columns) > 1


def index_type_display_name(index_type: str | None) -> str:
    """Human-readable access method name (btree -> B-Tree)."""
    if not index_type:
        return "B-Tree"

    known = {
        "btree": "B-Tree",
        "hash": "Hash",
        "fulltext": "Full-Text",
        "spatial": "Spatial",
    }
    return known.get(index_type.lower(), index_type.upper())


# =============================================================================
# Tables
# =============================================================================


class Table(BaseModel):
    """A base table with its columns in ordinal order.

    ``referential_constraints`` holds constraints that are not attached to a
    single column object (e.g. composite foreign keys).
    """

    model_config = ConfigDict(frozen=True)

    name: Name
    schema_name: str = Field(..., description="Catalog/namespace holding the table")
    columns: tuple[Column, ...] = ()
    referential_constraints: tuple[ReferentialConstraint, ...] = ()
    indexes: tuple[IndexDefinition, ...] = ()

    @model_validator(mode="after")
    def validate_unique_columns(self) -> "Table":
        """Reject duplicate column physical names."""
        seen: set[str] = set()
        for column in self.columns:
            physical_name = column.name.physical_name
            if physical_name in seen:
                raise ValueError(
                    f"Duplicate column {physical_name!r} in table {self.name.physical_name!r}"
                )
            seen.add(physical_name)
        return self


def build_table(
    physical_name: str,
    schema_name: str,
    columns: Sequence[Column] = (),
    *,
    comment: str | None = None,
    referential_constraints: Sequence[ReferentialConstraint] = (),
    indexes: Sequence[IndexDefinition] = (),
) -> Table:
    """Create a Table, resolving its Name from the raw catalog comment."""
    return Table(
        name=resolve_name(physical_name, comment),
        schema_name=schema_name,
        columns=tuple(columns),
        referential_constraints=tuple(referential_constraints),
        indexes=tuple(indexes),
    )


def table_display_name(table: Table) -> str:
    return display_name(table.name)


def all_constraints(table: Table) -> list[ReferentialConstraint]:
    """Column-level constraints in ordinal order, then table-level constraints."""
    constraints = [
        column.foreign_key_constraint
        for column in table.columns
        if column.foreign_key_constraint is not None
    ]
    constraints.extend(table.referential_constraints)
    return constraints


def primary_key_columns(table: Table) -> list[Column]:
    return [column for column in table.columns if column.is_primary_key]


def foreign_key_columns(table: Table) -> list[Column]:
    return [column for column in table.columns if has_foreign_key(column)]


def column_by_physical_name(table: Table, physical_name: str) -> Column | None:
    for column in table.columns:
        if column.name.physical_name == physical_name:
            return column
    return None


def column_by_logical_name(table: Table, logical_name: str) -> Column | None:
    for column in table.columns:
        if column.name.logical_name == logical_name:
            return column
    return None


def table_definition(table: Table) -> str:
    return f"{table.schema_name}.{table.name.physical_name}"


def table_definition_with_logical_name(table: Table) -> str:
    definition = table_definition(table)
    if has_logical_name(table.name):
        return f"{definition} -- {table.name.logical_name}"
    return definition


# =============================================================================
# Database
# =============================================================================


class Database(BaseModel):
    """A complete schema snapshot."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = ""
    charset: str = ""
    collation: str = ""
    tables: tuple[Table, ...] = ()

    @model_validator(mode="after")
    def validate_unique_tables(self) -> "Database":
        """Reject duplicate table physical names."""
        seen: set[str] = set()
        for table in self.tables:
            physical_name = table.name.physical_name
            if physical_name in seen:
                raise ValueError(f"Duplicate table {physical_name!r} in database {self.name!r}")
            seen.add(physical_name)
        return self


def table_by_physical_name(database: Database, physical_name: str) -> Table | None:
    for table in database.tables:
        if table.name.physical_name == physical_name:
            return table
    return None


def table_by_logical_name(database: Database, logical_name: str) -> Table | None:
    for table in database.tables:
        if table.name.logical_name == logical_name:
            return table
    return None


def all_referential_constraints(database: Database) -> list[ReferentialConstraint]:
    """All column-level and table-level constraints, table by table."""
    constraints: list[ReferentialConstraint] = []
    for table in database.tables:
        constraints.extend(all_constraints(table))
    return constraints


def filter_tables(database: Database, names: Iterable[str]) -> Database:
    """Return a copy keeping only tables whose physical or logical name is listed.

    An empty selection keeps every table.
    """
    wanted = set(names)
    if not wanted:
        return database

    tables = tuple(
        table
        for table in database.tables
        if table.name.physical_name in wanted or table.name.logical_name in wanted
    )
    return database.model_copy(update={"tables": tables})
