"""
GRAPHNODE ONTOLOGY - The Vocabulary

Enums shared by every stage of the pipeline:
- GraphKind: directed or undirected construction
- Direction: the tag stored against each neighbour key in a node's relations
- DiagnosticKind / DiagnosticSeverity: non-fatal construction findings

A single key -> set-of-Direction mapping represents adjacency for both kinds of
graph. Directed nodes only ever hold PARENT/CHILD tags, undirected nodes
only ever hold LINKED.
"""
from enum import Enum
from typing import FrozenSet, Dict


class GraphKind(str, Enum):
    """How relationship keys are interpreted."""
    DIRECTED = "directed"
    UNDIRECTED = "undirected"


class Direction(str, Enum):
    """Tag attached to a neighbour key in Node.relations."""
    PARENT = "parent"      # neighbour points at this node
    CHILD = "child"        # this node points at neighbour
    LINKED = "linked"      # undirected adjacency


class DiagnosticKind(str, Enum):
    """Construction-time anomalies. None of these abort construction."""
    DUPLICATE_KEY = "duplicate_key"
    NO_ROOT_NODES = "no_root_nodes"
    DETECTED_CYCLE = "detected_cycle"
    UNREACHABLE_CYCLE = "unreachable_cycle"
    EMPTY_GRAPH = "empty_graph"


class DiagnosticSeverity(str, Enum):
    """Severity levels, mapped onto logging levels when emitted."""
    WARNING = "warning"
    INFO = "info"


# Tags a node of each kind is allowed to carry
ALLOWED_DIRECTIONS: Dict[GraphKind, FrozenSet[Direction]] = {
    GraphKind.DIRECTED: frozenset({Direction.PARENT, Direction.CHILD}),
    GraphKind.UNDIRECTED: frozenset({Direction.LINKED}),
}

# Tags that count as "outbound" when the weighted edge index is built
OUTBOUND_DIRECTIONS: Dict[GraphKind, Direction] = {
    GraphKind.DIRECTED: Direction.CHILD,
    GraphKind.UNDIRECTED: Direction.LINKED,
}

DIAGNOSTIC_SEVERITY: Dict[DiagnosticKind, DiagnosticSeverity] = {
    DiagnosticKind.DUPLICATE_KEY: DiagnosticSeverity.WARNING,
    DiagnosticKind.NO_ROOT_NODES: DiagnosticSeverity.WARNING,
    DiagnosticKind.DETECTED_CYCLE: DiagnosticSeverity.INFO,
    DiagnosticKind.UNREACHABLE_CYCLE: DiagnosticSeverity.WARNING,
    DiagnosticKind.EMPTY_GRAPH: DiagnosticSeverity.INFO,
}


def coerce_kind(kind) -> GraphKind:
    """Accept a GraphKind or its string value."""
    if isinstance(kind, GraphKind):
        return kind
    try:
        return GraphKind(str(kind).lower())
    except ValueError:
        raise ValueError(
            f"Unknown graph kind: {kind!r} (expected 'directed' or 'undirected')"
        ) from None
