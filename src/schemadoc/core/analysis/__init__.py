"""Schema analysis engine: reference graph, cycles, dependencies, validation."""

from schemadoc.core.analysis.cycles import find_circular_references, has_circular_references
from schemadoc.core.analysis.dependencies import (
    CircularDependencyError,
    DependencyAnalysisError,
    analyze_dependencies,
    topological_order,
)
from schemadoc.core.analysis.references import all_constraints, reference_graph, referenced_tables
from schemadoc.core.analysis.validation import (
    build_circular_reference_message,
    validate_database,
)

__all__ = [
    # References
    "all_constraints",
    "referenced_tables",
    "reference_graph",
    # Cycles
    "find_circular_references",
    "has_circular_references",
    # Dependencies
    "analyze_dependencies",
    "topological_order",
    "DependencyAnalysisError",
    "CircularDependencyError",
    # Validation
    "validate_database",
    "build_circular_reference_message",
]
