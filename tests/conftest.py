"""
Pytest configuration and shared fixtures for the graphnode test suite.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


# =============================================================================
# RECORD TYPES
# =============================================================================

class TaskRecord:
    """Directed record implementing the builder contract."""

    def __init__(self, name, children=(), parents=()):
        self.name = name
        self.children = list(children)
        self.parents = list(parents)

    def build_node_key(self):
        return self.name

    def build_parent_keys(self):
        return self.parents

    def build_child_keys(self):
        return self.children


class CityRecord:
    """Undirected record: a city and the roads (city, km) leaving it."""

    def __init__(self, city_name, connected_cities=()):
        self.city_name = city_name
        self.connected_cities = list(connected_cities)

    def build_node_key(self):
        return self.city_name

    def build_neighbour_keys(self):
        return [city for city, _ in self.connected_cities]


# =============================================================================
# GLOBAL STATE
# =============================================================================

@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    """Each test starts from the packaged default config."""
    from graphnode.config import CONFIG_ENV_VAR, reset_config

    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    reset_config()
    yield
    reset_config()


# =============================================================================
# DIRECTED COLLECTIONS
# =============================================================================

@pytest.fixture
def task_record():
    """The TaskRecord class, for tests that build their own collections."""
    return TaskRecord


@pytest.fixture
def basic_tasks():
    """name1 -> name2, name3; name2 -> name3; name3 -> name4 (both sides declared)."""
    return [
        TaskRecord("name1", ["name2", "name3"], []),
        TaskRecord("name2", ["name3"], ["name1"]),
        TaskRecord("name3", ["name4"], ["name2", "name1"]),
        TaskRecord("name4", [], ["name3"]),
    ]


@pytest.fixture
def children_only_tasks():
    """Same shape as basic_tasks, only children declared."""
    return [
        TaskRecord("name1", ["name2", "name3"]),
        TaskRecord("name2", ["name3"]),
        TaskRecord("name3", ["name4"]),
        TaskRecord("name4", []),
    ]


@pytest.fixture
def parents_only_tasks():
    """Same shape as basic_tasks, only parents declared."""
    return [
        TaskRecord("name1", [], []),
        TaskRecord("name2", [], ["name1"]),
        TaskRecord("name3", [], ["name2", "name1"]),
        TaskRecord("name4", [], ["name3"]),
    ]


@pytest.fixture
def duplicated_tasks():
    return [
        TaskRecord("name1", ["name2", "name3"]),
        TaskRecord("name1", ["name3"]),
    ]


@pytest.fixture
def rootless_cycle_tasks():
    """name1 -> name2 -> name3 -> name4 -> name1: every node has a parent."""
    return [
        TaskRecord("name1", ["name2", "name3"]),
        TaskRecord("name2", ["name3"]),
        TaskRecord("name3", ["name4"]),
        TaskRecord("name4", ["name1"]),
    ]


@pytest.fixture
def rooted_cycle_tasks():
    """Root name1 above the cycle name2 -> name3 -> name4 -> name2."""
    return [
        TaskRecord("name1", ["name2", "name3"]),
        TaskRecord("name2", ["name3"]),
        TaskRecord("name3", ["name4"]),
        TaskRecord("name4", ["name2"]),
    ]


# =============================================================================
# UNDIRECTED COLLECTIONS
# =============================================================================

@pytest.fixture
def city_record():
    return CityRecord


@pytest.fixture
def friends():
    """Tree-shaped friendships: name1 - name2 - name4, name1 - name3."""
    return [
        {"key": "name1", "neighbours": ["name2", "name3"]},
        {"key": "name2", "neighbours": ["name1", "name4"]},
        {"key": "name3", "neighbours": ["name1"]},
        {"key": "name4", "neighbours": ["name2"]},
    ]


@pytest.fixture
def cities():
    """European road map, every road declared from both ends."""
    return [
        CityRecord("Paris", [("Berlin", 1054.0), ("Brest", 591.0), ("Berne", 572.0), ("Bruxelles", 312.0)]),
        CityRecord("Berlin", [("Paris", 1054.0), ("Roma", 1502.0)]),
        CityRecord("Brest", [("Paris", 591.0)]),
        CityRecord("Roma", [("Berlin", 1502.0), ("Berne", 924.0), ("Wien", 1122.0)]),
        CityRecord("Berne", [("Paris", 572.0), ("Wien", 840.0), ("Roma", 924.0)]),
        CityRecord("Wien", [("Berne", 840.0), ("Praha", 333.0), ("Roma", 1122.0)]),
        CityRecord("Bruxelles", [("Praha", 897.0), ("Paris", 312.0)]),
        CityRecord("Praha", [("Bruxelles", 897.0), ("Wien", 333.0)]),
    ]


@pytest.fixture
def one_sided_cities():
    """Same road map, each road declared from one end only."""
    return [
        CityRecord("Paris", [("Berlin", 1054.0), ("Bruxelles", 312.0)]),
        CityRecord("Berlin", [("Roma", 1502.0)]),
        CityRecord("Brest", [("Paris", 591.0)]),
        CityRecord("Berne", [("Paris", 572.0)]),
        CityRecord("Wien", [("Berne", 840.0)]),
        CityRecord("Roma", [("Berne", 924.0), ("Wien", 1122.0)]),
        CityRecord("Bruxelles", [("Praha", 897.0)]),
        CityRecord("Praha", [("Wien", 333.0)]),
    ]


@pytest.fixture
def city_graph(cities):
    """Undirected city graph with distances as edge weights, edges built."""
    from graphnode import Graph, weight_from_field

    graph = Graph.undirected(cities, weight_function=weight_from_field("connected_cities"))
    graph.build_edges()
    return graph
