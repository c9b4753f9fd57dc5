"""Dependency analysis and topological ordering of tables."""

import logging
from collections.abc import Iterator

from schemadoc.core.analysis.references import reference_graph
from schemadoc.core.models.analysis import DependencyAnalysis
from schemadoc.core.models.schema import Database

logger = logging.getLogger(__name__)


class DependencyAnalysisError(Exception):
    """Raised when dependency analysis cannot produce a result."""

    pass


class CircularDependencyError(DependencyAnalysisError):
    """Raised when tables depend on each other circularly and no order exists."""

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Circular dependency detected between tables at: {table_name!r}")
        self.table_name = table_name


def analyze_dependencies(database: Database) -> DependencyAnalysis:
    """Build forward/reverse dependency maps and a topological table order.

    Unlike find_circular_references, this fails on the first cycle it meets.
    Callers that need a report for cyclic schemas should validate first.

    Args:
        database: Schema snapshot to analyze.

    Returns:
        DependencyAnalysis where every referenced table precedes its referrers.

    Raises:
        CircularDependencyError: If the reference graph contains a cycle.
    """
    dependencies = reference_graph(database)
    reverse_dependencies: dict[str, list[str]] = {}

    for table_name, referenced in dependencies.items():
        for referenced_table in referenced:
            reverse_dependencies.setdefault(referenced_table, []).append(table_name)

    return DependencyAnalysis(
        dependencies=dependencies,
        reverse_dependencies=reverse_dependencies,
        topological_order=topological_order(dependencies),
    )


def topological_order(dependencies: dict[str, list[str]]) -> list[str]:
    """Order nodes so each one follows everything it depends on.

    Depth-first post-order over ``dependencies`` in key order, using an explicit
    stack. Names that only appear as dependencies are included as leaves.

    Raises:
        CircularDependencyError: If a node is reached again while still being visited.
    """
    done: set[str] = set()
    visiting: set[str] = set()
    order: list[str] = []

    for start in dependencies:
        if start in done:
            continue

        visiting.add(start)
        stack: list[tuple[str, Iterator[str]]] = [(start, iter(dependencies.get(start, [])))]

        while stack:
            node, remaining = stack[-1]
            dependency = next(remaining, None)

            if dependency is None:
                stack.pop()
                visiting.discard(node)
                done.add(node)
                order.append(node)
                continue

            if dependency in visiting:
                logger.debug(f"Dependency cycle reached at {dependency!r} from {node!r}")
                raise CircularDependencyError(dependency)
            if dependency not in done:
                visiting.add(dependency)
                stack.append((dependency, iter(dependencies.get(dependency, []))))

    return order
