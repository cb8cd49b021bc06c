"""
GRAPHNODE ERRORS - What Can Actually Go Wrong

Construction-time anomalies (duplicate keys, missing roots, cycles) are NOT
exceptions: they are recorded as diagnostics and the graph is still built.
Lookups by unknown key and unreachable destinations return None.

The exceptions below are reserved for programming errors and explicit
strict APIs:
- RecordContractError: a record cannot produce a key/relations
- GraphKindError: a directed-only query on an undirected graph (or reverse)
- NodeNotFoundError: strict lookup via graph[key]
- SearchLimitExceeded: configured expansion budget exhausted
- ConfigError: unreadable or malformed configuration
"""
from typing import Optional


class GraphError(Exception):
    """Base exception for graph operations."""
    pass


class NodeNotFoundError(GraphError, KeyError):
    """Raised by strict lookups when a key is not in the graph."""
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Node not found: {key}")

    def __str__(self) -> str:
        return f"Node not found: {self.key}"


class RecordContractError(GraphError, TypeError):
    """Raised when a record does not satisfy the capability contract."""
    def __init__(self, record: object, missing: str):
        self.record = record
        self.missing = missing
        super().__init__(
            f"{type(record).__name__} cannot build graph nodes: missing {missing}"
        )


class GraphKindError(GraphError):
    """Raised when a query does not apply to the graph's kind."""
    def __init__(self, operation: str, kind: str):
        self.operation = operation
        self.kind = kind
        super().__init__(f"{operation} is not available on a {kind} graph")


class SearchLimitExceeded(GraphError):
    """Raised when a path search exceeds its expansion budget."""
    def __init__(self, origin_key: str, dest_key: str, limit: int):
        self.origin_key = origin_key
        self.dest_key = dest_key
        self.limit = limit
        super().__init__(
            f"Search {origin_key} -> {dest_key} exceeded {limit} expansions"
        )


class ConfigError(GraphError):
    """Raised when a configuration file cannot be parsed or validated."""
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)
