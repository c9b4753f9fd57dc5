"""Circular reference detection over the table reference graph."""

import logging
from collections.abc import Iterator
from enum import Enum

from schemadoc.core.analysis.references import reference_graph
from schemadoc.core.models.analysis import CircularReferenceResult, TableInfo
from schemadoc.core.models.schema import Database, table_by_physical_name, table_display_name

logger = logging.getLogger(__name__)


class _VisitState(Enum):
    ON_STACK = "on_stack"
    DONE = "done"


def find_circular_references(database: Database) -> CircularReferenceResult:
    """Enumerate circular reference chains between tables.

    Runs a depth-first search from every unvisited table in database order.
    Each search stops at the first cycle it closes, so independent cycles in
    separate components are all reported while a single root contributes at
    most one path.

    Args:
        database: Schema snapshot to inspect.

    Returns:
        CircularReferenceResult with closed paths such as ``["A", "B", "A"]``.
    """
    graph = reference_graph(database)
    states: dict[str, _VisitState] = {}
    circular_paths: list[list[str]] = []

    for table in database.tables:
        root = table.name.physical_name
        if root in states:
            continue
        path = _search_from(root, graph, states)
        if path is not None:
            logger.debug(f"Circular reference found: {' -> '.join(path)}")
            circular_paths.append(path)

    return CircularReferenceResult(
        has_circular_reference=len(circular_paths) > 0,
        circular_paths=circular_paths,
        involved_tables=_involved_tables(database, circular_paths),
    )


def has_circular_references(database: Database) -> bool:
    return find_circular_references(database).has_circular_reference


def _search_from(
    root: str,
    graph: dict[str, list[str]],
    states: dict[str, _VisitState],
) -> list[str] | None:
    """Iterative DFS from ``root``; returns the first closed cycle, if any."""
    path = [root]
    frames: list[Iterator[str]] = [iter(graph.get(root, []))]
    states[root] = _VisitState.ON_STACK

    while frames:
        neighbour = next(frames[-1], None)

        if neighbour is None:
            frames.pop()
            states[path.pop()] = _VisitState.DONE
            continue

        state = states.get(neighbour)
        if state is None:
            states[neighbour] = _VisitState.ON_STACK
            path.append(neighbour)
            frames.append(iter(graph.get(neighbour, [])))
        elif state is _VisitState.ON_STACK:
            cycle = path[path.index(neighbour):] + [neighbour]
            # Abandoned search: nothing may stay on the stack for later roots
            for name in path:
                states[name] = _VisitState.DONE
            return cycle

    return None


def _involved_tables(database: Database, circular_paths: list[list[str]]) -> list[TableInfo]:
    names: dict[str, None] = {}
    for path in circular_paths:
        for name in path:
            names.setdefault(name, None)

    involved: list[TableInfo] = []
    for physical_name in names:
        table = table_by_physical_name(database, physical_name)
        if table is None:
            involved.append(
                TableInfo(
                    physical_name=physical_name,
                    logical_name=physical_name,
                    display_name=physical_name,
                )
            )
        else:
            involved.append(
                TableInfo(
                    physical_name=physical_name,
                    logical_name=table.name.logical_name,
                    display_name=table_display_name(table),
                )
            )
    return involved
