"""
Unit tests for graphnode/schemas.py and graphnode/builders.py

Node model, Path values and the record contracts.
"""
import msgspec
import pytest

from graphnode import (
    Direction,
    DirectedGraphBuilder,
    GraphKind,
    Node,
    Path,
    RecordFields,
    UndirectedGraphBuilder,
    weight_from_field,
)
from graphnode.builders import read_record


# =============================================================================
# NODE MODEL
# =============================================================================

class TestNode:
    """Tests for the Node struct."""

    def test_from_directed_record(self, task_record):
        node = Node.from_record(task_record("a", ["b", "c"], ["p"]), GraphKind.DIRECTED)

        assert node.key == "a"
        assert node.get_child_keys() == ["b", "c"]
        assert node.get_parent_keys() == ["p"]
        assert node.has_children()
        assert node.has_parents()
        assert not node.has_neighbours()
        assert node.circular is False

    def test_from_undirected_record(self, city_record):
        node = Node.from_record(city_record("Paris", [("Brest", 591.0)]), GraphKind.UNDIRECTED)

        assert node.kind is GraphKind.UNDIRECTED
        assert node.get_neighbour_keys() == ["Brest"]
        assert node.get_directions("Brest") == frozenset({Direction.LINKED})
        assert not node.has_parents()
        assert not node.has_children()

    def test_contract_called_once(self):
        calls = {"key": 0, "parents": 0, "children": 0}

        class Counting:
            def build_node_key(self):
                calls["key"] += 1
                return "k"

            def build_parent_keys(self):
                calls["parents"] += 1
                return []

            def build_child_keys(self):
                calls["children"] += 1
                return ["c"]

        Node.from_record(Counting(), GraphKind.DIRECTED)

        assert calls == {"key": 1, "parents": 1, "children": 1}

    def test_add_parent_is_idempotent(self):
        node = Node(key="a")
        node.add_parent("p")
        node.add_parent("p")

        assert node.get_parent_keys() == ["p"]
        assert node.relations == {"p": frozenset({Direction.PARENT})}

    def test_relations_only_grow(self):
        node = Node(key="a")
        node.add_child("b")
        node.add_parent("b")

        assert node.get_directions("b") == frozenset({Direction.CHILD, Direction.PARENT})
        assert node.get_directions("zzz") == frozenset()

    def test_tag_must_match_kind(self):
        with pytest.raises(ValueError):
            Node(key="a", kind=GraphKind.UNDIRECTED).add_parent("b")
        with pytest.raises(ValueError):
            Node(key="a").add_neighbour("b")

    def test_duplicate_declared_keys_collapse(self, task_record):
        node = Node.from_record(task_record("a", ["b", "b", "c"]), GraphKind.DIRECTED)
        assert node.get_child_keys() == ["b", "c"]

    def test_repr(self):
        node = Node(key="a", circular=True)
        assert "'a'" in repr(node)
        assert "circular" in repr(node)


# =============================================================================
# PATH
# =============================================================================

class TestPath:
    """Tests for the Path struct."""

    def test_extended_with_returns_new_path(self):
        start = Path(nodes=["a"])
        extended = start.extended_with("b", 2.5)

        assert start.nodes == ["a"]
        assert extended.nodes == ["a", "b"]
        assert extended.weight == 2.5
        assert len(extended) == 2
        assert "b" in extended

    def test_frozen(self):
        path = Path(nodes=["a"], weight=1.0)
        with pytest.raises(AttributeError):
            path.weight = 2.0

    def test_json_roundtrip_shape(self):
        encoded = msgspec.json.encode(Path(nodes=["Paris", "Bruxelles", "Praha"], weight=1209.0))
        assert msgspec.json.decode(encoded) == {
            "nodes": ["Paris", "Bruxelles", "Praha"],
            "weight": 1209.0,
        }


# =============================================================================
# RECORD CONTRACTS
# =============================================================================

class TestRecordContracts:
    """Tests for builders.read_record and the protocols."""

    def test_protocols_are_runtime_checkable(self, task_record, city_record):
        assert isinstance(task_record("a"), DirectedGraphBuilder)
        assert isinstance(city_record("Paris"), UndirectedGraphBuilder)
        assert not isinstance(city_record("Paris"), DirectedGraphBuilder)

    def test_mapping_defaults(self):
        keys = read_record({"key": "a", "children": ["b"]}, GraphKind.DIRECTED)

        assert keys.key == "a"
        assert keys.children == ["b"]
        assert keys.parents == []

    def test_object_with_fields(self):
        class Employee:
            def __init__(self):
                self.login = "ada"
                self.manager = "grace"

        keys = read_record(Employee(), GraphKind.DIRECTED, RecordFields(key="login", parents="manager"))

        assert keys.key == "ada"
        assert keys.parents == ["grace"]

    def test_weighted_pairs_become_keys(self):
        keys = read_record(
            {"city": "Paris", "roads": [("Brest", 591.0), ["Berne", 572.0]]},
            GraphKind.UNDIRECTED,
            RecordFields(key="city", neighbours="roads"),
        )
        assert keys.neighbours == ["Brest", "Berne"]

    def test_builder_methods_take_precedence(self, task_record):
        record = task_record("from-method")
        record.key = "from-field"

        keys = read_record(record, GraphKind.DIRECTED, RecordFields())

        assert keys.key == "from-method"

    def test_weight_from_field_on_mapping(self):
        node = Node(key="Paris", data={"roads": [("Brest", 591.0)]}, kind=GraphKind.UNDIRECTED)
        build_edge = weight_from_field("roads", missing=-1.0)

        assert build_edge(node, "Brest") == ("Paris", ("Brest", 591.0))
        assert build_edge(node, "Berne") == ("Paris", ("Berne", -1.0))
