"""
Graph Validator - checks the referential integrity of a node/edge graph.

Catches issues like:
- Duplicate node IDs
- Edges pointing at missing nodes
- Self loops and duplicate edges
- Adjacency sets out of step with the edges
- Orphaned or overlapping nodes (informational)
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from plancanvas.ir import Edge, Node
from plancanvas.placement import node_rect, rects_overlap


class ValidationSeverity(Enum):
    ERROR = "error"      # Graph violates an invariant
    WARNING = "warning"  # Graph is usable but inconsistent
    INFO = "info"        # Layout or connectivity hint


@dataclass
class ValidationIssue:
    """A single validation issue found in the graph"""
    severity: ValidationSeverity
    code: str
    message: str
    node_id: Optional[str] = None
    edge_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "edge_id": self.edge_id,
        }


@dataclass
class GraphValidationResult:
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    @property
    def info_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.INFO)

    def codes(self) -> Set[str]:
        return {i.code for i in self.issues}

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        status = "Valid" if self.is_valid else "Invalid"
        return (
            f"{status} | "
            f"Errors: {self.error_count}, Warnings: {self.warning_count}, Info: {self.info_count}"
        )


class GraphValidator:
    """
    Validates a node/edge graph.

    Usage:
        result = GraphValidator().validate(nodes, edges)
        if not result.is_valid:
            for issue in result.issues:
                print(f"[{issue.severity.value}] {issue.message}")
    """

    def __init__(self, strict_mode: bool = False, check_overlaps: bool = True):
        self.strict_mode = strict_mode
        self.check_overlaps = check_overlaps

    def validate(self, nodes: Iterable[Node], edges: Iterable[Edge]) -> GraphValidationResult:
        nodes = list(nodes)
        edges = list(edges)
        node_ids = {n.id for n in nodes}

        issues: List[ValidationIssue] = []
        issues.extend(self._check_duplicate_node_ids(nodes))
        issues.extend(self._check_missing_edge_references(edges, node_ids))
        issues.extend(self._check_self_loops(edges))
        issues.extend(self._check_duplicate_edges(edges))
        issues.extend(self._check_adjacency(nodes, edges))
        issues.extend(self._check_orphaned_nodes(nodes, edges))
        if self.check_overlaps:
            issues.extend(self._check_overlapping_nodes(nodes))

        has_errors = any(i.severity == ValidationSeverity.ERROR for i in issues)
        has_warnings = any(i.severity == ValidationSeverity.WARNING for i in issues)

        is_valid = not has_errors
        if self.strict_mode:
            is_valid = not has_errors and not has_warnings

        return GraphValidationResult(
            is_valid=is_valid,
            issues=issues,
            stats=self._calculate_stats(nodes, edges),
        )

    def _check_duplicate_node_ids(self, nodes: List[Node]) -> List[ValidationIssue]:
        issues = []
        seen: Dict[str, int] = defaultdict(int)
        for node in nodes:
            seen[node.id] += 1
        for node_id, count in seen.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_NODE_ID",
                    message=f"Duplicate node ID '{node_id}' appears {count} times",
                    node_id=node_id,
                ))
        return issues

    def _check_missing_edge_references(self, edges: List[Edge], node_ids: Set[str]) -> List[ValidationIssue]:
        issues = []
        for edge in edges:
            if edge.source not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_SOURCE_NODE",
                    message=f"Edge references non-existent source node '{edge.source}'",
                    edge_id=edge.id,
                ))
            if edge.target not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_TARGET_NODE",
                    message=f"Edge references non-existent target node '{edge.target}'",
                    edge_id=edge.id,
                ))
        return issues

    def _check_self_loops(self, edges: List[Edge]) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity=ValidationSeverity.ERROR,
                code="SELF_LOOP",
                message=f"Edge creates self-loop on node '{edge.source}'",
                node_id=edge.source,
                edge_id=edge.id,
            )
            for edge in edges
            if edge.source == edge.target
        ]

    def _check_duplicate_edges(self, edges: List[Edge]) -> List[ValidationIssue]:
        issues = []
        kept: List[Edge] = []
        for edge in edges:
            clash = next(
                (k for k in kept if k.id == edge.id or k.duplicates(edge)),
                None,
            )
            if clash is not None:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_EDGE",
                    message=f"Edge '{edge.id}' duplicates '{clash.id}'",
                    edge_id=edge.id,
                ))
            else:
                kept.append(edge)
        return issues

    def _check_adjacency(self, nodes: List[Node], edges: List[Edge]) -> List[ValidationIssue]:
        expected = expected_adjacency(nodes, edges)
        issues = []
        for node in nodes:
            if node.adjacency != expected.get(node.id, frozenset()):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="ADJACENCY_MISMATCH",
                    message=f"Adjacency of node '{node.id}' does not match its edges",
                    node_id=node.id,
                ))
        return issues

    def _check_orphaned_nodes(self, nodes: List[Node], edges: List[Edge]) -> List[ValidationIssue]:
        connected = set()
        for edge in edges:
            connected.add(edge.source)
            connected.add(edge.target)
        return [
            ValidationIssue(
                severity=ValidationSeverity.INFO,
                code="ORPHANED_NODE",
                message=f"Node '{node.id}' ({node.kind.value}) has no connections",
                node_id=node.id,
            )
            for node in nodes
            if node.id not in connected
        ]

    def _check_overlapping_nodes(self, nodes: List[Node]) -> List[ValidationIssue]:
        issues = []
        rects = [(n, node_rect(n)) for n in nodes]
        for i, (a, rect_a) in enumerate(rects):
            for b, rect_b in rects[i + 1:]:
                if rects_overlap(rect_a, rect_b):
                    issues.append(ValidationIssue(
                        severity=ValidationSeverity.INFO,
                        code="OVERLAPPING_NODES",
                        message=f"Nodes '{a.id}' and '{b.id}' overlap",
                        node_id=a.id,
                    ))
        return issues

    def _calculate_stats(self, nodes: List[Node], edges: List[Edge]) -> Dict[str, int]:
        connected = set()
        for edge in edges:
            connected.add(edge.source)
            connected.add(edge.target)
        owners: Dict[str, int] = defaultdict(int)
        for node in nodes:
            owners[node.owner] += 1
        stats = {
            "nodes": len(nodes),
            "edges": len(edges),
            "orphaned_nodes": sum(1 for n in nodes if n.id not in connected),
            "user_nodes": owners.get("user", 0),
        }
        return stats


def expected_adjacency(nodes: Iterable[Node], edges: Iterable[Edge]) -> Dict[str, frozenset]:
    """Neighbour sets implied by `edges`, ignoring edges with a missing endpoint."""
    node_ids = {n.id for n in nodes}
    neighbours: Dict[str, Set[str]] = defaultdict(set)
    for edge in edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            continue
        if edge.source == edge.target:
            continue
        neighbours[edge.source].add(edge.target)
        neighbours[edge.target].add(edge.source)
    return {node_id: frozenset(ids) for node_id, ids in neighbours.items()}


def validate_graph(nodes: Iterable[Node], edges: Iterable[Edge], strict: bool = False) -> GraphValidationResult:
    return GraphValidator(strict_mode=strict).validate(nodes, edges)


def raise_on_errors(result: GraphValidationResult) -> None:
    """Opt-in strict mode: raise ValueError listing every error issue."""
    errors = [i for i in result.issues if i.severity == ValidationSeverity.ERROR]
    if errors:
        details = "; ".join(f"[{i.code}] {i.message}" for i in errors)
        raise ValueError(f"Graph validation failed: {details}")
