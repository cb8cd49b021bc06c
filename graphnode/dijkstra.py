"""
GRAPHNODE DIJKSTRA - Shortest Path Over the Weighted Edge Index

Best-first search over explicit candidate paths (no separate distance
table). The frontier is a heapq min-priority queue keyed on path weight,
ties broken by insertion order.

    frontier = [ [origin] @ 0 ]
    loop:
        pop the lightest candidate, expand its last node
        an edge reaching the destination -> return candidate + edge
        an edge to a key not already on this candidate -> push candidate + edge
    frontier empty -> None

The destination check happens when an edge is discovered, not when a
candidate is popped: the first candidate whose expansion touches the
destination wins. Candidates never revisit a key already on their own path.

Example:
    graph = Graph.undirected(cities, fields=..., weight_function=...)
    graph.build_edges()
    Dijkstra.search(graph, "Paris", "Praha")
    # Path(nodes=['Paris', 'Bruxelles', 'Praha'], weight=1209.0)

Policies:
- origin == destination -> Path([origin], 0.0) if the key is known (a node
  of the graph searched, or any key in the edge index), else None
- unknown origin, dead ends, unreachable destination -> None
"""
import heapq
import itertools
import logging
from typing import Any, List, Mapping, Optional, Tuple

from graphnode.edges import EdgeIndex
from graphnode.errors import SearchLimitExceeded
from graphnode.schemas import Path

logger = logging.getLogger(__name__)


class Dijkstra:
    """Namespace for the search; call Dijkstra.search(...)."""

    @staticmethod
    def search(
        edges: Any,
        origin_key: str,
        dest_key: str,
        max_expansions: Optional[int] = None,
    ) -> Optional[Path]:
        """
        Find the lightest path from origin_key to dest_key.

        Args:
            edges: An EdgeIndex, a {source: {target: weight}} mapping, or any
                object with an `edges` attribute holding one (e.g. a Graph)
            origin_key: Start key
            dest_key: Destination key
            max_expansions: Bound on candidate expansions. None = unbounded.

        Returns:
            The Path, or None if the destination cannot be reached

        Raises:
            SearchLimitExceeded: If max_expansions is exceeded
        """
        index = _as_edge_index(edges)

        if origin_key == dest_key:
            if not _knows(edges, index, origin_key):
                return None
            return Path(nodes=[origin_key], weight=0.0)

        if not index:
            logger.debug("Search on an empty edge index; was build_edges() called?")

        counter = itertools.count()
        frontier: List[Tuple[float, int, Path]] = [
            (0.0, next(counter), Path(nodes=[origin_key], weight=0.0))
        ]
        expansions = 0

        while frontier:
            _, _, candidate = heapq.heappop(frontier)

            expansions += 1
            if max_expansions is not None and expansions > max_expansions:
                raise SearchLimitExceeded(origin_key, dest_key, max_expansions)

            for target, weight in index.outgoing(candidate.destination).items():
                if target == dest_key:
                    path = candidate.extended_with(target, weight)
                    logger.debug(
                        f"Path {origin_key} -> {dest_key} found after {expansions} expansions"
                    )
                    return path
                if target not in candidate:
                    extended = candidate.extended_with(target, weight)
                    heapq.heappush(frontier, (extended.weight, next(counter), extended))

        logger.debug(f"No path {origin_key} -> {dest_key} ({expansions} expansions)")
        return None


def shortest_path(
    edges: Any,
    origin_key: str,
    dest_key: str,
    max_expansions: Optional[int] = None,
) -> Optional[Path]:
    """Convenience wrapper around Dijkstra.search."""
    return Dijkstra.search(edges, origin_key, dest_key, max_expansions=max_expansions)


def _as_edge_index(edges: Any) -> EdgeIndex:
    if isinstance(edges, EdgeIndex):
        return edges
    if isinstance(edges, Mapping):
        return EdgeIndex(edges)
    index = getattr(edges, "edges", None)
    if isinstance(index, EdgeIndex):
        return index
    raise TypeError(f"Cannot search over {type(edges).__name__}; expected an edge index")


def _knows(edges: Any, index: EdgeIndex, key: str) -> bool:
    """Whether `key` exists: as a node of a graph, else as an index endpoint."""
    has_node = getattr(edges, "has_node", None)
    if callable(has_node):
        return has_node(key)
    return index.has_key(key)
