"""
Graph validation and rule-based repair.
"""

from plancanvas.validation.graph_validator import (
    GraphValidationResult,
    GraphValidator,
    ValidationIssue,
    ValidationSeverity,
    expected_adjacency,
    raise_on_errors,
    validate_graph,
)
from plancanvas.validation.graph_fixer import FixResult, GraphFixer, fix_graph

__all__ = [
    "GraphValidationResult",
    "GraphValidator",
    "ValidationIssue",
    "ValidationSeverity",
    "expected_adjacency",
    "raise_on_errors",
    "validate_graph",
    "FixResult",
    "GraphFixer",
    "fix_graph",
]
