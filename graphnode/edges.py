"""
GRAPHNODE EDGES - The Weighted Edge Index

source key -> target key -> weight, layered on top of structural adjacency.
The index is never structural: it is derived on demand from node relations
plus a weight function, and rebuilding it replaces the previous table.

Weights must be finite and non-negative; the shortest-path search relies on
it.
"""
import logging
import math
from typing import Callable, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from graphnode.builders import WeightFunction, uniform_weight
from graphnode.ontology import GraphKind, OUTBOUND_DIRECTIONS
from graphnode.schemas import Node

logger = logging.getLogger(__name__)


class EdgeIndex:
    """Mapping of source key to {target key: weight}."""

    def __init__(self, edges: Optional[Mapping[str, Mapping[str, float]]] = None):
        self._edges: Dict[str, Dict[str, float]] = {}
        if edges:
            for source, targets in edges.items():
                for target, weight in targets.items():
                    self.insert(source, target, weight)

    def insert(self, source: str, target: str, weight: float) -> None:
        """Insert or overwrite the weight of source -> target."""
        weight = float(weight)
        if not math.isfinite(weight) or weight < 0:
            raise ValueError(f"Edge {source} -> {target} has invalid weight {weight!r}")
        self._edges.setdefault(source, {})[target] = weight

    def get_weight(self, source: str, target: str) -> Optional[float]:
        """Weight of source -> target, or None if there is no such edge."""
        targets = self._edges.get(source)
        if targets is None:
            return None
        return targets.get(target)

    def has_key(self, key: str) -> bool:
        """True if `key` is the source or target of any edge."""
        return key in self._edges or any(key in targets for targets in self._edges.values())

    def outgoing(self, source: str) -> Mapping[str, float]:
        """Targets reachable in one hop from `source` (empty if none)."""
        return self._edges.get(source, {})

    def pairs(self) -> Iterator[Tuple[str, str, float]]:
        """Iterate (source, target, weight) in insertion order."""
        for source, targets in self._edges.items():
            for target, weight in targets.items():
                yield source, target, weight

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {source: dict(targets) for source, targets in self._edges.items()}

    def __getitem__(self, source: str) -> Mapping[str, float]:
        return self._edges[source]

    def __contains__(self, source: object) -> bool:
        return source in self._edges

    def __iter__(self) -> Iterator[str]:
        return iter(self._edges)

    def __len__(self) -> int:
        """Number of edges (not sources)."""
        return sum(len(targets) for targets in self._edges.values())

    def __bool__(self) -> bool:
        return bool(self._edges)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EdgeIndex):
            return self._edges == other._edges
        if isinstance(other, Mapping):
            return self._edges == {k: dict(v) for k, v in other.items()}
        return NotImplemented

    def __repr__(self) -> str:
        return f"EdgeIndex(sources={len(self._edges)}, edges={len(self)})"


def build_edge_index(
    nodes: Iterable[Node],
    kind: GraphKind,
    weight_function: Optional[WeightFunction] = None,
    default_weight: float = 1.0,
) -> EdgeIndex:
    """
    Derive the edge index from node adjacency.

    For every node and every outbound key (children when directed,
    neighbours when undirected) the weight function is asked for
    (source_key, (target_key, weight)).
    """
    build_edge: Callable = weight_function or uniform_weight(default_weight)
    outbound = OUTBOUND_DIRECTIONS[kind]
    index = EdgeIndex()

    for node in nodes:
        for target_key in node.keys_tagged(outbound):
            source_key, (edge_target, weight) = build_edge(node, target_key)
            index.insert(source_key, edge_target, weight)

    logger.debug(f"Built edge index: {index!r}")
    return index
