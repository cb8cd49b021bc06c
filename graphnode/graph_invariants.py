"""
GRAPHNODE INVARIANTS - Cycle Detection and Structural Metrics

Cycle detection runs once, immediately after construction:

Directed:
    Strongly connected components are computed with rustworkx first. A key
    can only repeat on a path inside a cyclic component (more than one node,
    or a self-loop), so:
    1. Reachability from every root (node without parents) is walked once,
       in linear time, visiting children in declaration order.
    2. Each time that walk enters a cyclic component through a new entry
       key, simple paths from the entry are enumerated inside the component.
       A key reached again on the current path is marked circular.
    3. Cyclic components no root reaches flag the graph without marking
       nodes. A non-empty graph without any root is circular as a whole.

Undirected:
    Walk each connected component from its first node in insertion order,
    carrying the set of keys visited by this walk. Reaching a visited key
    through anything other than the immediate predecessor is a cycle of
    length >= 3. No per-node localization.

All walks use explicit stacks, so depth is bounded by memory rather than
the interpreter's recursion limit. Path enumeration is confined to cyclic
components, so acyclic regions cost O(V + E) however many paths they hold;
a dense cyclic component still costs one walk per simple path inside it.

Structural metrics are cross-checked with rustworkx (see get_graph_metrics).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

import rustworkx as rx

from graphnode.ontology import GraphKind
from graphnode.schemas import Node


# =============================================================================
# CYCLE REPORT
# =============================================================================

@dataclass
class CycleReport:
    """Outcome of a cycle walk."""
    has_cycle: bool = False
    circular_keys: List[str] = field(default_factory=list)
    rootless: bool = False       # directed graph with no root at all
    unreached_keys: List[str] = field(default_factory=list)   # on cycles no root reaches

    @property
    def localized(self) -> bool:
        return bool(self.circular_keys)


# =============================================================================
# CYCLE DETECTOR
# =============================================================================

class CycleDetector:
    """
    Cycle walks over constructed nodes.

    All methods are static and only read the nodes they are given; marking
    nodes circular is the caller's job.
    """

    @staticmethod
    def detect(
        nodes: Sequence[Node],
        kind: GraphKind,
        stop_at_first: bool = False,
    ) -> CycleReport:
        """Run the walk matching the graph kind."""
        by_key = {node.key: node for node in nodes}
        if kind is GraphKind.DIRECTED:
            return CycleDetector.detect_directed(nodes, by_key, stop_at_first)
        return CycleDetector.detect_undirected(nodes, by_key)

    @staticmethod
    def detect_directed(
        nodes: Sequence[Node],
        by_key: Mapping[str, Node],
        stop_at_first: bool = False,
    ) -> CycleReport:
        """
        Reachability walk from every root, with path enumeration inside
        cyclic components.

        Args:
            nodes: Nodes in insertion order
            by_key: key -> node lookup for the same nodes
            stop_at_first: End the whole walk at the first revisited key

        Returns:
            CycleReport with circular keys in discovery order
        """
        roots = [node.key for node in nodes if not node.has_parents()]
        if not roots:
            return CycleReport(has_cycle=bool(nodes), rootless=bool(nodes))

        component_of = cyclic_components(nodes)
        report = CycleReport()
        marked: Set[str] = set()
        entered: Set[str] = set()
        reached: Set[str] = set()

        # Frames are (key, key it was reached from). Pushed in reverse so the
        # walk visits children in declaration order.
        stack: List[Tuple[str, Optional[str]]] = [(key, None) for key in reversed(roots)]
        while stack:
            key, source = stack.pop()

            component = component_of.get(key)
            if component is not None and key not in entered and component_of.get(source) != component:
                entered.add(key)
                for circular_key in CycleDetector._revisited_keys(key, component_of, by_key):
                    report.has_cycle = True
                    if circular_key not in marked:
                        marked.add(circular_key)
                        report.circular_keys.append(circular_key)
                    if stop_at_first:
                        return report

            if key in reached:
                continue
            reached.add(key)
            for child_key in reversed(by_key[key].get_child_keys()):
                if child_key in by_key:
                    stack.append((child_key, key))

        report.unreached_keys = [
            node.key for node in nodes
            if node.key in component_of and node.key not in reached
        ]
        if report.unreached_keys:
            report.has_cycle = True
        return report

    @staticmethod
    def _revisited_keys(
        entry: str,
        component_of: Mapping[str, int],
        by_key: Mapping[str, Node],
    ) -> Iterator[str]:
        """
        Keys reached again by a simple path from `entry`, staying inside the
        entry's component. Yields in walk order, once per revisit.
        """
        component = component_of[entry]

        def inside(key: str) -> Iterator[str]:
            return (
                child_key for child_key in by_key[key].get_child_keys()
                if component_of.get(child_key) == component
            )

        path = [entry]
        on_path = {entry}
        frames = [inside(entry)]
        while frames:
            child_key = next(frames[-1], None)
            if child_key is None:
                frames.pop()
                on_path.discard(path.pop())
                continue
            if child_key in on_path:
                yield child_key
                continue
            path.append(child_key)
            on_path.add(child_key)
            frames.append(inside(child_key))

    @staticmethod
    def detect_undirected(
        nodes: Sequence[Node],
        by_key: Mapping[str, Node],
    ) -> CycleReport:
        """Predecessor-excluding walk over every component."""
        seen: Set[str] = set()

        for start in nodes:
            if start.key in seen:
                continue

            visited: Set[str] = set()
            stack: List[Tuple[str, Optional[str]]] = [(start.key, None)]
            while stack:
                key, predecessor = stack.pop()
                if key in visited:
                    # Reached twice from two different visited nodes
                    return CycleReport(has_cycle=True)
                visited.add(key)

                for neighbour_key in by_key[key].get_neighbour_keys():
                    if neighbour_key == predecessor:
                        continue
                    if neighbour_key == key or neighbour_key in visited:
                        return CycleReport(has_cycle=True)
                    if neighbour_key in by_key:
                        stack.append((neighbour_key, key))

            seen |= visited

        return CycleReport()


# =============================================================================
# RUSTWORKX EXPORT AND METRICS
# =============================================================================

@dataclass
class RustworkxExport:
    """
    A rustworkx copy of a graph plus the key <-> index bridge.

    Node payloads are graphnode keys; edge payloads are weights.
    """
    graph: Any                      # rx.PyDiGraph or rx.PyGraph
    node_map: Dict[str, int]        # key -> rustworkx index
    inv_map: Dict[int, str]         # rustworkx index -> key


def export_rustworkx(
    nodes: Sequence[Node],
    kind: GraphKind,
    weight_lookup=None,
    default_weight: float = 1.0,
) -> RustworkxExport:
    """
    Copy node adjacency into a rustworkx graph.

    Directed graphs become PyDiGraph with parent -> child edges; undirected
    graphs become PyGraph with one edge per linked pair. Relations naming
    keys outside the graph are skipped.

    Args:
        weight_lookup: Optional (source, target) -> Optional[float]
    """
    if kind is GraphKind.DIRECTED:
        graph = rx.PyDiGraph(multigraph=False)
    else:
        graph = rx.PyGraph(multigraph=False)

    keys = [node.key for node in nodes]
    indices = graph.add_nodes_from(keys)
    node_map = dict(zip(keys, indices))
    inv_map = {idx: key for key, idx in node_map.items()}

    def weight_of(source: str, target: str) -> float:
        weight = weight_lookup(source, target) if weight_lookup else None
        return default_weight if weight is None else weight

    edges = []
    linked: Set[FrozenSet[str]] = set()
    for node in nodes:
        if kind is GraphKind.DIRECTED:
            outbound = node.get_child_keys()
        else:
            outbound = node.get_neighbour_keys()
        for target in outbound:
            if target not in node_map:
                continue
            if kind is GraphKind.UNDIRECTED:
                pair = frozenset((node.key, target))
                if pair in linked:
                    continue
                linked.add(pair)
            edges.append((node_map[node.key], node_map[target], weight_of(node.key, target)))
    graph.add_edges_from(edges)

    return RustworkxExport(graph=graph, node_map=node_map, inv_map=inv_map)


def cyclic_components(nodes: Sequence[Node]) -> Dict[str, int]:
    """
    Keys lying on a directed cycle, mapped to their component number.

    A component is cyclic when it has more than one node, or one node that
    names itself as a child. Keys off every cycle are absent.
    """
    export = export_rustworkx(nodes, GraphKind.DIRECTED)
    component_of: Dict[str, int] = {}
    for number, component in enumerate(rx.strongly_connected_components(export.graph)):
        keys = [export.inv_map[idx] for idx in component]
        if len(keys) == 1:
            key = keys[0]
            if not export.graph.has_edge(export.node_map[key], export.node_map[key]):
                continue
        for key in keys:
            component_of[key] = number
    return component_of


def compute_cyclomatic_complexity(graph) -> int:
    """|E| - |V| + components; > 0 means the underlying graph has a cycle."""
    if isinstance(graph, rx.PyDiGraph):
        components = rx.number_weakly_connected_components(graph)
    else:
        components = rx.number_connected_components(graph)
    return graph.num_edges() - graph.num_nodes() + components


def get_graph_metrics(export: RustworkxExport) -> Dict[str, Any]:
    """
    Basic structural metrics from a rustworkx export.

    `is_acyclic` is rustworkx's own verdict and can be compared with the
    graph's has_circular_ref for directed graphs.
    """
    graph = export.graph
    metrics: Dict[str, Any] = {
        "node_count": graph.num_nodes(),
        "edge_count": graph.num_edges(),
        "cyclomatic_complexity": compute_cyclomatic_complexity(graph),
    }
    if isinstance(graph, rx.PyDiGraph):
        metrics["is_acyclic"] = rx.is_directed_acyclic_graph(graph)
        metrics["weakly_connected_components"] = rx.number_weakly_connected_components(graph)
    else:
        metrics["is_acyclic"] = metrics["cyclomatic_complexity"] == 0
        metrics["connected_components"] = rx.number_connected_components(graph)
    return metrics
