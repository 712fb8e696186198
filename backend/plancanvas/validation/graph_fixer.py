"""
Graph Fixer - rule-based repair of a node/edge graph.

Every fix is deterministic:
- duplicate node ids: the first occurrence wins
- edges with a missing endpoint are dropped
- self loops are dropped
- duplicate edges: the first occurrence wins
- adjacency is recomputed from the surviving edges
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from plancanvas.ir import Edge, Node
from plancanvas.validation.graph_validator import expected_adjacency

logger = logging.getLogger(__name__)


@dataclass
class FixResult:
    """Result of a fix operation"""
    issues_fixed: List[str] = field(default_factory=list)
    changes_made: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes_made)

    def to_dict(self) -> dict:
        return {
            "issues_fixed": self.issues_fixed,
            "changes_made": self.changes_made,
        }


class GraphFixer:
    """
    Usage:
        nodes, edges, result = GraphFixer().fix(nodes, edges)
    """

    AUTO_FIXABLE = {
        "DUPLICATE_NODE_ID",
        "MISSING_SOURCE_NODE",
        "MISSING_TARGET_NODE",
        "SELF_LOOP",
        "DUPLICATE_EDGE",
        "ADJACENCY_MISMATCH",
    }

    def fix(
        self,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
    ) -> Tuple[List[Node], List[Edge], FixResult]:
        result = FixResult()

        kept_nodes = self._fix_duplicate_nodes(nodes, result)
        node_ids = {n.id for n in kept_nodes}
        kept_edges = self._fix_edges(edges, node_ids, result)
        kept_nodes = self._fix_adjacency(kept_nodes, kept_edges, result)

        if result.changed:
            logger.info("[FIXER] Applied %d fixes", len(result.changes_made))
        return kept_nodes, kept_edges, result

    def _fix_duplicate_nodes(self, nodes: Iterable[Node], result: FixResult) -> List[Node]:
        kept: List[Node] = []
        seen = set()
        for node in nodes:
            if node.id in seen:
                result.issues_fixed.append("DUPLICATE_NODE_ID")
                result.changes_made.append(f"Dropped duplicate node '{node.id}'")
                continue
            seen.add(node.id)
            kept.append(node)
        return kept

    def _fix_edges(self, edges: Iterable[Edge], node_ids, result: FixResult) -> List[Edge]:
        kept: List[Edge] = []
        for edge in edges:
            if edge.source not in node_ids:
                result.issues_fixed.append("MISSING_SOURCE_NODE")
                result.changes_made.append(f"Dropped edge '{edge.id}' with missing source")
                continue
            if edge.target not in node_ids:
                result.issues_fixed.append("MISSING_TARGET_NODE")
                result.changes_made.append(f"Dropped edge '{edge.id}' with missing target")
                continue
            if edge.source == edge.target:
                result.issues_fixed.append("SELF_LOOP")
                result.changes_made.append(f"Dropped self-loop '{edge.id}'")
                continue
            if any(k.id == edge.id or k.duplicates(edge) for k in kept):
                result.issues_fixed.append("DUPLICATE_EDGE")
                result.changes_made.append(f"Dropped duplicate edge '{edge.id}'")
                continue
            kept.append(edge)
        return kept

    def _fix_adjacency(self, nodes: List[Node], edges: List[Edge], result: FixResult) -> List[Node]:
        expected: Dict[str, frozenset] = expected_adjacency(nodes, edges)
        fixed = []
        for node in nodes:
            adjacency = expected.get(node.id, frozenset())
            if node.adjacency != adjacency:
                result.issues_fixed.append("ADJACENCY_MISMATCH")
                result.changes_made.append(f"Recomputed adjacency of '{node.id}'")
                node = node.with_adjacency(adjacency)
            fixed.append(node)
        return fixed


def fix_graph(nodes: Iterable[Node], edges: Iterable[Edge]) -> Tuple[List[Node], List[Edge], FixResult]:
    return GraphFixer().fix(nodes, edges)
