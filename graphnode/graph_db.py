"""
GRAPHNODE GRAPH - Construction and the Query Surface

One Graph type for both directed and undirected data. Construction runs
three passes over the host records:

1. Deduplicate: first occurrence of a key wins, later ones are dropped
   with a DUPLICATE_KEY diagnostic.
2. Complete relationships (directed only): if B declares A as a child,
   A records B as a parent, and vice versa. One pass over declared keys
   through the key index, O(N * avg degree).
3. Detect cycles: a non-empty directed graph without roots is flagged
   circular as a whole; otherwise the cycle walk marks circular nodes.

Usage:
    graph = Graph.directed(records)
    graph.get_root_nodes()
    graph.get_child_nodes("name1")

    graph = Graph.undirected(cities, fields=RecordFields(key="city", neighbours="roads"),
                             weight_function=weight_from_field("roads"))
    graph.build_edges()
    graph.shortest_path("Paris", "Praha")

Thread Safety:
    NOT thread-safe. A Graph belongs to the caller that built it.
"""
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

import polars as pl

from graphnode.builders import RecordFields, WeightFunction
from graphnode.config import GraphConfig, get_config
from graphnode.diagnostics import DiagnosticBuffer
from graphnode.dijkstra import Dijkstra
from graphnode.edges import EdgeIndex, build_edge_index
from graphnode.errors import GraphKindError, NodeNotFoundError
from graphnode.graph_invariants import (
    CycleDetector,
    RustworkxExport,
    export_rustworkx,
    get_graph_metrics,
)
from graphnode.ontology import DiagnosticKind, GraphKind, coerce_kind
from graphnode.schemas import GraphDiagnostic, Node, Path

logger = logging.getLogger(__name__)

NodeRef = Union[Node, str]


class Graph:
    """
    In-memory graph built from host records.

    Attributes:
        kind: GraphKind.DIRECTED or GraphKind.UNDIRECTED
        edges: Weighted edge index (empty until build_edges())
        has_circular_ref: True when a cycle was detected or no root exists
    """

    def __init__(
        self,
        records: Iterable[Any] = (),
        kind: Union[GraphKind, str] = GraphKind.DIRECTED,
        *,
        fields: Optional[RecordFields] = None,
        weight_function: Optional[WeightFunction] = None,
        config: Optional[GraphConfig] = None,
    ):
        """
        Build a graph from records.

        Args:
            records: Host records satisfying the capability contract
            kind: Directed or undirected
            fields: Attribute names for plain records (see builders)
            weight_function: (node, target_key) -> (source, (target, weight))
            config: Settings; defaults to the process-wide config

        Raises:
            RecordContractError: If a record cannot produce key/relations
        """
        self.kind = coerce_kind(kind)
        self.config = config or get_config()
        self.weight_function = weight_function
        self.edges = EdgeIndex()
        self.has_circular_ref = False

        self._fields = fields
        self._nodes: Dict[str, Node] = {}
        self._diagnostics = DiagnosticBuffer(self.config.diagnostic_buffer_size)

        self._build_nodes(records)
        if self.kind is GraphKind.DIRECTED:
            self._build_relationships()
        self._check_circular_ref()
        logger.debug(f"Constructed {self!r}")

    @classmethod
    def directed(cls, records: Iterable[Any] = (), **kwargs) -> "Graph":
        return cls(records, GraphKind.DIRECTED, **kwargs)

    @classmethod
    def undirected(cls, records: Iterable[Any] = (), **kwargs) -> "Graph":
        return cls(records, GraphKind.UNDIRECTED, **kwargs)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def nodes(self) -> List[Node]:
        """Nodes in insertion order."""
        return list(self._nodes.values())

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def is_directed(self) -> bool:
        return self.kind is GraphKind.DIRECTED

    @property
    def is_empty(self) -> bool:
        return not self._nodes

    @property
    def diagnostics(self) -> List[GraphDiagnostic]:
        """Construction diagnostics, oldest first."""
        return list(self._diagnostics)

    def keys(self) -> List[str]:
        return list(self._nodes)

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    def _build_nodes(self, records: Iterable[Any]) -> None:
        for record in records:
            node = Node.from_record(record, self.kind, self._fields)
            if node.key in self._nodes:
                self._diagnostics.emit(
                    DiagnosticKind.DUPLICATE_KEY,
                    f"Duplicate node with key: {node.key}, only the first one is added to the graph",
                    [node.key],
                )
                continue
            self._nodes[node.key] = node

    def _build_relationships(self) -> None:
        """Add the inverse of every declared parent/child relation."""
        declared = [
            (node.key, node.get_child_keys(), node.get_parent_keys())
            for node in self._nodes.values()
        ]
        for key, child_keys, parent_keys in declared:
            for child_key in child_keys:
                child = self._nodes.get(child_key)
                if child is not None:
                    child.add_parent(key)
            for parent_key in parent_keys:
                parent = self._nodes.get(parent_key)
                if parent is not None:
                    parent.add_child(key)

    def _check_circular_ref(self) -> None:
        if not self._nodes:
            self._diagnostics.emit(DiagnosticKind.EMPTY_GRAPH, "Graph has no nodes.")
            return

        report = CycleDetector.detect(
            self.nodes,
            self.kind,
            stop_at_first=self.config.stop_at_first_cycle,
        )
        self.has_circular_ref = report.has_cycle

        if report.rootless:
            self._diagnostics.emit(
                DiagnosticKind.NO_ROOT_NODES,
                "Graph has no root nodes and could have circular reference but cannot determine where.",
            )
            return

        for key in report.circular_keys:
            self._nodes[key].circular = True

        if report.localized or (report.has_cycle and not report.unreached_keys):
            where = ", ".join(report.circular_keys) if report.localized else "undetermined nodes"
            self._diagnostics.emit(
                DiagnosticKind.DETECTED_CYCLE,
                f"Circular reference detected at {where}",
                report.circular_keys,
            )
        if report.unreached_keys:
            self._diagnostics.emit(
                DiagnosticKind.UNREACHABLE_CYCLE,
                "Graph has a circular reference no root node reaches: "
                f"{', '.join(report.unreached_keys)}",
                report.unreached_keys,
            )

    # =========================================================================
    # LOOKUP AND MUTATION
    # =========================================================================

    def get_node_by_key(self, key: str) -> Optional[Node]:
        """Node with `key`, or None."""
        return self._nodes.get(key)

    def has_node(self, key: str) -> bool:
        return key in self._nodes

    def update_node_by_key(self, key: str, new_node: Node) -> bool:
        """
        Replace the node stored under `key`, keeping its position.

        Returns:
            True if a node was replaced, False if `key` is unknown

        Raises:
            ValueError: If new_node.key differs from key
        """
        if new_node.key != key:
            raise ValueError(f"Node key mismatch: {key} vs {new_node.key}")
        if key not in self._nodes:
            return False
        self._nodes[key] = new_node
        return True

    def delete_node_by_key(self, key: str) -> Optional[Node]:
        """
        Remove a node and return it (None if `key` is unknown).

        Relations naming the removed key stay on the other nodes; queries
        only ever return nodes that exist. Rebuild the edge index to drop
        its edges.
        """
        node = self._nodes.pop(key, None)
        if node is not None:
            logger.debug(f"Deleted node {key}; edge index is stale until build_edges()")
        return node

    # =========================================================================
    # STRUCTURAL QUERIES
    # =========================================================================

    def get_root_nodes(self) -> List[Node]:
        """Directed nodes without parents."""
        self._require(GraphKind.DIRECTED, "get_root_nodes")
        return [node for node in self._nodes.values() if not node.has_parents()]

    def get_leaf_nodes(self) -> List[Node]:
        """Directed nodes without children."""
        self._require(GraphKind.DIRECTED, "get_leaf_nodes")
        return [node for node in self._nodes.values() if not node.has_children()]

    def get_circular_nodes(self) -> List[Node]:
        """Nodes localized on a cycle (always empty for undirected graphs)."""
        return [node for node in self._nodes.values() if node.circular]

    def get_parent_nodes(self, node: NodeRef) -> List[Node]:
        """Parents of `node` in graph order. A self-loop does not list `node` itself."""
        self._require(GraphKind.DIRECTED, "get_parent_nodes")
        current = self._resolve(node)
        if current is None:
            return []
        return self._existing(current.get_parent_keys(), exclude=current.key)

    def get_child_nodes(self, node: NodeRef) -> List[Node]:
        """Children of `node` in graph order. A self-loop does not list `node` itself."""
        self._require(GraphKind.DIRECTED, "get_child_nodes")
        current = self._resolve(node)
        if current is None:
            return []
        return self._existing(current.get_child_keys(), exclude=current.key)

    def get_sibling_nodes(self, node: NodeRef) -> List[Node]:
        """Other directed nodes sharing at least one parent with `node`."""
        self._require(GraphKind.DIRECTED, "get_sibling_nodes")
        current = self._resolve(node)
        if current is None:
            return []
        parents = set(current.get_parent_keys())
        return [
            other for other in self._nodes.values()
            if other.key != current.key and parents.intersection(other.get_parent_keys())
        ]

    def get_neighbour_nodes(self, node: NodeRef) -> List[Node]:
        """
        Undirected nodes adjacent to `node`, in graph order.

        Adjacency is symmetric here: a node that names `node` as a
        neighbour counts even if `node` did not name it back.
        """
        self._require(GraphKind.UNDIRECTED, "get_neighbour_nodes")
        current = self._resolve(node)
        if current is None:
            return []
        declared = set(current.get_neighbour_keys())
        return [
            other for other in self._nodes.values()
            if other.key != current.key
            and (other.key in declared or current.key in other.get_neighbour_keys())
        ]

    # =========================================================================
    # WEIGHTED EDGES AND PATHS
    # =========================================================================

    def build_edges(self, weight_function: Optional[WeightFunction] = None) -> EdgeIndex:
        """
        (Re)build the weighted edge index from current adjacency.

        Args:
            weight_function: Overrides the one given at construction

        Returns:
            The new edge index (also stored on self.edges)
        """
        if weight_function is not None:
            self.weight_function = weight_function
        self.edges = build_edge_index(
            self._nodes.values(),
            self.kind,
            self.weight_function,
            self.config.default_weight,
        )
        return self.edges

    def get_edge_weight(self, from_key: str, to_key: str) -> Optional[float]:
        return self.edges.get_weight(from_key, to_key)

    def shortest_path(self, origin_key: str, dest_key: str) -> Optional[Path]:
        """Dijkstra search over the current edge index."""
        return Dijkstra.search(
            self,
            origin_key,
            dest_key,
            max_expansions=self.config.max_search_expansions,
        )

    # =========================================================================
    # EXPORT (in-memory interop only)
    # =========================================================================

    def to_rustworkx(self) -> RustworkxExport:
        """Copy adjacency (and edge weights, if built) into rustworkx."""
        return export_rustworkx(
            self.nodes,
            self.kind,
            weight_lookup=self.edges.get_weight,
            default_weight=self.config.default_weight,
        )

    def get_metrics(self) -> Dict[str, Any]:
        """Structural metrics computed by rustworkx."""
        metrics = get_graph_metrics(self.to_rustworkx())
        metrics["has_circular_ref"] = self.has_circular_ref
        metrics["circular_node_count"] = len(self.get_circular_nodes())
        return metrics

    def to_polars_nodes(self) -> pl.DataFrame:
        """One row per node: key, circular flag and relation keys."""
        schema = {
            "key": pl.Utf8,
            "circular": pl.Boolean,
            "parents": pl.List(pl.Utf8),
            "children": pl.List(pl.Utf8),
            "neighbours": pl.List(pl.Utf8),
        }
        nodes = self.nodes
        return pl.DataFrame(
            {
                "key": [n.key for n in nodes],
                "circular": [n.circular for n in nodes],
                "parents": [n.get_parent_keys() for n in nodes],
                "children": [n.get_child_keys() for n in nodes],
                "neighbours": [n.get_neighbour_keys() for n in nodes],
            },
            schema=schema,
        )

    def to_polars_edges(self) -> pl.DataFrame:
        """One row per weighted edge (empty until build_edges())."""
        rows = list(self.edges.pairs())
        return pl.DataFrame(
            {
                "source": [r[0] for r in rows],
                "target": [r[1] for r in rows],
                "weight": [r[2] for r in rows],
            },
            schema={"source": pl.Utf8, "target": pl.Utf8, "weight": pl.Float64},
        )

    # =========================================================================
    # INTERNAL UTILITIES
    # =========================================================================

    def _require(self, kind: GraphKind, operation: str) -> None:
        if self.kind is not kind:
            raise GraphKindError(operation, self.kind.value)

    def _resolve(self, node: NodeRef) -> Optional[Node]:
        key = node.key if isinstance(node, Node) else node
        return self._nodes.get(key)

    def _existing(self, keys: Iterable[str], exclude: str) -> List[Node]:
        """Nodes named in `keys`, in graph order."""
        wanted = set(keys)
        wanted.discard(exclude)
        return [node for key, node in self._nodes.items() if key in wanted]

    def __getitem__(self, key: str) -> Node:
        """Strict lookup. Raises NodeNotFoundError."""
        try:
            return self._nodes[key]
        except KeyError:
            raise NodeNotFoundError(key) from None

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    def __repr__(self) -> str:
        return (
            f"Graph({self.kind.value}, nodes={len(self._nodes)}, "
            f"edges={len(self.edges)}, circular={self.has_circular_ref})"
        )
