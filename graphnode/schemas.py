"""
GRAPHNODE SCHEMAS - The Structures That Flow Through the Pipeline

- Node: one host record plus its derived key and tagged relations
- Path: a shortest-path query result
- GraphDiagnostic: a non-fatal construction finding

Design Principles:
1. msgspec.Struct for every value type (cheap attribute access during walks)
2. A single key -> directions mapping for adjacency, whatever the graph kind
3. Keys are derived once; relations only grow
"""
from typing import Any, Dict, FrozenSet, List, Optional

import msgspec

from graphnode.builders import RecordFields, read_record
from graphnode.ontology import ALLOWED_DIRECTIONS, Direction, DiagnosticKind, DiagnosticSeverity, GraphKind


_NO_DIRECTIONS: FrozenSet[Direction] = frozenset()


# =============================================================================
# NODE
# =============================================================================

class Node(msgspec.Struct, kw_only=True):
    """
    A graph node wrapping one host record.

    `relations` maps a neighbour key to the set of direction tags linking
    the two nodes. A set rather than a single tag so that a pair of nodes
    that are both parent and child of each other keeps both facts.

    Relation order follows declaration order (children, then parents, for
    directed records), followed by whatever completion added.
    """
    key: str
    data: Any = None
    kind: GraphKind = GraphKind.DIRECTED
    relations: Dict[str, FrozenSet[Direction]] = msgspec.field(default_factory=dict)
    circular: bool = False

    @classmethod
    def from_record(
        cls,
        record: Any,
        kind: GraphKind = GraphKind.DIRECTED,
        fields: Optional[RecordFields] = None,
    ) -> "Node":
        """Build a node, deriving key and relations from the record."""
        keys = read_record(record, kind, fields)
        node = cls(key=keys.key, data=record, kind=kind)
        if kind is GraphKind.DIRECTED:
            for child_key in keys.children:
                node.add_child(child_key)
            for parent_key in keys.parents:
                node.add_parent(parent_key)
        else:
            for neighbour_key in keys.neighbours:
                node.add_neighbour(neighbour_key)
        return node

    # =========================================================================
    # RELATION QUERIES
    # =========================================================================

    def get_directions(self, key: str) -> FrozenSet[Direction]:
        """Tags linking this node to `key` (empty if unrelated)."""
        return self.relations.get(key, _NO_DIRECTIONS)

    def keys_tagged(self, direction: Direction) -> List[str]:
        return [key for key, tags in self.relations.items() if direction in tags]

    def get_parent_keys(self) -> List[str]:
        return self.keys_tagged(Direction.PARENT)

    def get_child_keys(self) -> List[str]:
        return self.keys_tagged(Direction.CHILD)

    def get_neighbour_keys(self) -> List[str]:
        return self.keys_tagged(Direction.LINKED)

    def has_parents(self) -> bool:
        return any(Direction.PARENT in tags for tags in self.relations.values())

    def has_children(self) -> bool:
        return any(Direction.CHILD in tags for tags in self.relations.values())

    def has_neighbours(self) -> bool:
        return any(Direction.LINKED in tags for tags in self.relations.values())

    # =========================================================================
    # RELATION INSERTION (idempotent)
    # =========================================================================

    def add_relation(self, key: str, direction: Direction) -> None:
        if direction not in ALLOWED_DIRECTIONS[self.kind]:
            raise ValueError(f"{direction.value} relation on {self.kind.value} node {self.key!r}")
        tags = self.relations.get(key, _NO_DIRECTIONS)
        if direction not in tags:
            self.relations[key] = tags | {direction}

    def add_parent(self, key: str) -> None:
        self.add_relation(key, Direction.PARENT)

    def add_child(self, key: str) -> None:
        self.add_relation(key, Direction.CHILD)

    def add_neighbour(self, key: str) -> None:
        self.add_relation(key, Direction.LINKED)

    def __repr__(self) -> str:
        flag = ", circular" if self.circular else ""
        return f"Node({self.key!r}, {self.kind.value}, relations={len(self.relations)}{flag})"


# =============================================================================
# PATH
# =============================================================================

class Path(msgspec.Struct, frozen=True):
    """Ordered keys from origin to destination and their cumulative weight."""
    nodes: List[str]
    weight: float = 0.0

    @property
    def origin(self) -> str:
        return self.nodes[0]

    @property
    def destination(self) -> str:
        return self.nodes[-1]

    def extended_with(self, key: str, weight: float) -> "Path":
        """Return a new path one hop longer."""
        return Path(nodes=[*self.nodes, key], weight=self.weight + weight)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, key: object) -> bool:
        return key in self.nodes


# =============================================================================
# DIAGNOSTICS
# =============================================================================

class GraphDiagnostic(msgspec.Struct, kw_only=True, frozen=True):
    """A construction-time finding. Never raised, only recorded and logged."""
    kind: DiagnosticKind
    severity: DiagnosticSeverity
    message: str
    keys: List[str] = msgspec.field(default_factory=list)
