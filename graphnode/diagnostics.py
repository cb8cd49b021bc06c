"""
GRAPHNODE DIAGNOSTICS - The Non-Fatal Channel

Construction never aborts on bad input. Duplicate keys, rootless directed
graphs and detected cycles are:
1. Logged through the standard logging module (logger "graphnode.diagnostics")
2. Recorded as GraphDiagnostic structs in a bounded buffer on the graph

Hosts decide what to surface. The library never installs handlers except
through configure_logging(), which is opt-in.

Usage:
    graph = Graph.directed(records)
    for d in graph.diagnostics:
        print(d.kind.value, d.message, d.keys)

    configure_logging("INFO")
"""
import logging
from collections import deque
from typing import Iterable, Iterator, List, Optional

from graphnode.ontology import DIAGNOSTIC_SEVERITY, DiagnosticKind, DiagnosticSeverity
from graphnode.schemas import GraphDiagnostic

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.INFO: logging.INFO,
}


class DiagnosticBuffer:
    """
    Ring buffer of the most recent diagnostics for one graph.

    O(1) append; filtering is a linear scan, which is fine at the sizes the
    buffer is bounded to.
    """

    def __init__(self, max_size: int = 1000):
        self._buffer: deque[GraphDiagnostic] = deque(maxlen=max_size)

    def emit(
        self,
        kind: DiagnosticKind,
        message: str,
        keys: Optional[Iterable[str]] = None,
    ) -> GraphDiagnostic:
        """Record a diagnostic and log it at its kind's severity."""
        severity = DIAGNOSTIC_SEVERITY[kind]
        diagnostic = GraphDiagnostic(
            kind=kind,
            severity=severity,
            message=message,
            keys=list(keys or ()),
        )
        self._buffer.append(diagnostic)
        logger.log(_LOG_LEVELS[severity], f"[{kind.value}] {message}")
        return diagnostic

    def get_by_kind(self, kind: DiagnosticKind) -> List[GraphDiagnostic]:
        return [d for d in self._buffer if d.kind == kind]

    def has(self, kind: DiagnosticKind) -> bool:
        return any(d.kind == kind for d in self._buffer)

    def clear(self) -> None:
        self._buffer.clear()

    def __iter__(self) -> Iterator[GraphDiagnostic]:
        return iter(list(self._buffer))

    def __len__(self) -> int:
        return len(self._buffer)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Args:
        level: Logging level name. Defaults to the configured log_level.

    Returns:
        The "graphnode" logger
    """
    if level is None:
        from graphnode.config import get_config
        level = get_config().log_level

    package_logger = logging.getLogger("graphnode")
    package_logger.setLevel(level.upper())
    if not any(getattr(h, "_graphnode", False) for h in package_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handler._graphnode = True
        package_logger.addHandler(handler)
    return package_logger
