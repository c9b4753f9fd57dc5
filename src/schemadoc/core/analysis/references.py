"""Extraction of table-to-table references from referential constraints."""

from schemadoc.core.models.schema import Database, Table, all_constraints


def referenced_tables(table: Table) -> list[str]:
    """Physical names of the tables referenced by ``table``.

    Names appear in first-seen order with duplicates collapsed.
    """
    # dict keeps insertion order, so it doubles as an ordered set
    seen: dict[str, None] = {}
    for constraint in all_constraints(table):
        seen.setdefault(constraint.referenced_table, None)
    return list(seen)


def reference_graph(database: Database) -> dict[str, list[str]]:
    """Adjacency map of every table (database order) to its referenced tables."""
    return {table.name.physical_name: referenced_tables(table) for table in database.tables}
