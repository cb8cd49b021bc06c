"""
GRAPHNODE BUILDERS - The Capability Contracts

A host record becomes a graph node by answering three questions:
- What is your key?
- (directed) Which keys are your parents / your children?
- (undirected) Which keys are your neighbours?

Two ways to answer them:
1. Implement DirectedGraphBuilder / UndirectedGraphBuilder on the record type.
2. Pass plain mappings or objects together with RecordFields naming the
   attributes that hold the key and the relation collections.

Relation collections may hold bare keys or (key, weight) pairs; only the key
is used for adjacency. weight_from_field() turns the pairs into a weight
function for the edge index.

Usage:
    class Task:
        def build_node_key(self): return self.name
        def build_parent_keys(self): return self.depends_on
        def build_child_keys(self): return []

    graph = Graph.directed(tasks)

    graph = Graph.undirected(
        [{"city": "Paris", "roads": [("Brest", 591.0)]}, ...],
        fields=RecordFields(key="city", neighbours="roads"),
        weight_function=weight_from_field("roads"),
    )
"""
from typing import Any, Callable, Iterable, List, Mapping, NamedTuple, Optional, Protocol, Tuple, runtime_checkable

import msgspec

from graphnode.errors import RecordContractError
from graphnode.ontology import GraphKind


# (source_key, (target_key, weight))
WeightedEdge = Tuple[str, Tuple[str, float]]
WeightFunction = Callable[[Any, str], WeightedEdge]


# =============================================================================
# CAPABILITY CONTRACTS
# =============================================================================

@runtime_checkable
class DirectedGraphBuilder(Protocol):
    """Records usable in a directed graph."""

    def build_node_key(self) -> str:
        ...

    def build_parent_keys(self) -> Iterable[str]:
        ...

    def build_child_keys(self) -> Iterable[str]:
        ...


@runtime_checkable
class UndirectedGraphBuilder(Protocol):
    """Records usable in an undirected graph."""

    def build_node_key(self) -> str:
        ...

    def build_neighbour_keys(self) -> Iterable[str]:
        ...


class RecordFields(msgspec.Struct, kw_only=True, frozen=True):
    """
    Attribute names used to read plain records (mappings or objects).

    A missing relation attribute reads as an empty collection; a missing
    key attribute is a contract violation.
    """
    key: str = "key"
    parents: str = "parents"
    children: str = "children"
    neighbours: str = "neighbours"


class RecordKeys(NamedTuple):
    """Everything construction needs from one record."""
    key: str
    parents: List[str]
    children: List[str]
    neighbours: List[str]


# =============================================================================
# CONTRACT RESOLUTION
# =============================================================================

def read_record(
    record: Any,
    kind: GraphKind,
    fields: Optional[RecordFields] = None,
) -> RecordKeys:
    """
    Derive the key and relation keys of a record.

    Each contract method is called exactly once. Builder methods on the
    record take precedence over `fields`.

    Raises:
        RecordContractError: If the record satisfies neither form of the
            contract for this graph kind.
    """
    if kind is GraphKind.DIRECTED:
        if isinstance(record, DirectedGraphBuilder):
            return RecordKeys(
                key=_as_key(record, record.build_node_key()),
                parents=_relation_keys(record.build_parent_keys()),
                children=_relation_keys(record.build_child_keys()),
                neighbours=[],
            )
    elif isinstance(record, UndirectedGraphBuilder):
        return RecordKeys(
            key=_as_key(record, record.build_node_key()),
            parents=[],
            children=[],
            neighbours=_relation_keys(record.build_neighbour_keys()),
        )

    if fields is None:
        if isinstance(record, Mapping):
            fields = RecordFields()
        else:
            contract = (
                "build_node_key/build_parent_keys/build_child_keys"
                if kind is GraphKind.DIRECTED
                else "build_node_key/build_neighbour_keys"
            )
            raise RecordContractError(record, contract)

    key = _read_field(record, fields.key)
    if key is None:
        raise RecordContractError(record, f"key field '{fields.key}'")

    if kind is GraphKind.DIRECTED:
        return RecordKeys(
            key=_as_key(record, key),
            parents=_relation_keys(_read_field(record, fields.parents)),
            children=_relation_keys(_read_field(record, fields.children)),
            neighbours=[],
        )
    return RecordKeys(
        key=_as_key(record, key),
        parents=[],
        children=[],
        neighbours=_relation_keys(_read_field(record, fields.neighbours)),
    )


def _read_field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _as_key(record: Any, value: Any) -> str:
    if not isinstance(value, str):
        raise RecordContractError(record, f"string key (got {type(value).__name__})")
    return value


def _relation_keys(values: Optional[Iterable[Any]]) -> List[str]:
    """Normalize a relation collection to keys, keeping declaration order."""
    if values is None:
        return []
    if isinstance(values, str):
        return [values]
    keys = []
    for value in values:
        if isinstance(value, (tuple, list)):
            value = value[0]
        keys.append(str(value))
    return keys


# =============================================================================
# WEIGHT FUNCTIONS
# =============================================================================

def uniform_weight(weight: float = 1.0) -> WeightFunction:
    """Weight function assigning the same weight to every edge."""
    def build_edge(node, target_key: str) -> WeightedEdge:
        return node.key, (target_key, weight)
    return build_edge


def weight_from_field(name: str, missing: float = 0.0) -> WeightFunction:
    """
    Weight function reading (target_key, weight) pairs from a record field.

    Targets the record does not list (e.g. relations it never declared)
    get `missing`.
    """
    def build_edge(node, target_key: str) -> WeightedEdge:
        for entry in _read_field(node.data, name) or ():
            if isinstance(entry, (tuple, list)) and len(entry) >= 2 and entry[0] == target_key:
                return node.key, (target_key, float(entry[1]))
        return node.key, (target_key, missing)
    return build_edge
