"""
GRAPHNODE - In-memory graphs built from host records.

This package provides:
- Graph construction with duplicate collapse and relationship completion
- Cycle detection (directed, per node; undirected, per graph)
- A weighted edge index and Dijkstra shortest-path search
"""

from graphnode.builders import (
    DirectedGraphBuilder,
    UndirectedGraphBuilder,
    RecordFields,
    uniform_weight,
    weight_from_field,
)
from graphnode.config import GraphConfig, get_config, load_config, set_config, reset_config
from graphnode.diagnostics import configure_logging
from graphnode.dijkstra import Dijkstra, shortest_path
from graphnode.edges import EdgeIndex
from graphnode.errors import (
    GraphError,
    NodeNotFoundError,
    RecordContractError,
    GraphKindError,
    SearchLimitExceeded,
    ConfigError,
)
from graphnode.graph_db import Graph
from graphnode.graph_invariants import CycleDetector, CycleReport
from graphnode.ontology import Direction, DiagnosticKind, DiagnosticSeverity, GraphKind
from graphnode.schemas import GraphDiagnostic, Node, Path

__version__ = "0.3.0"

__all__ = [
    # Graph
    "Graph",
    "GraphKind",
    "Node",
    "Direction",
    # Contracts
    "DirectedGraphBuilder",
    "UndirectedGraphBuilder",
    "RecordFields",
    "uniform_weight",
    "weight_from_field",
    # Edges and paths
    "EdgeIndex",
    "Dijkstra",
    "Path",
    "shortest_path",
    # Cycles and diagnostics
    "CycleDetector",
    "CycleReport",
    "GraphDiagnostic",
    "DiagnosticKind",
    "DiagnosticSeverity",
    "configure_logging",
    # Config
    "GraphConfig",
    "get_config",
    "load_config",
    "set_config",
    "reset_config",
    # Errors
    "GraphError",
    "NodeNotFoundError",
    "RecordContractError",
    "GraphKindError",
    "SearchLimitExceeded",
    "ConfigError",
]
