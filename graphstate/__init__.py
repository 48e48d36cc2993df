"""graphstate — An immutable, command-driven graph state container."""

__version__ = "0.1.0"

from graphstate.client import GraphStore
from graphstate.engine import GraphReducer, GraphState, empty_graph
from graphstate.models import Edge, GraphStats, Node, ReducerConfig, ValidationResult

__all__ = [
    "Edge",
    "GraphReducer",
    "GraphState",
    "GraphStats",
    "GraphStore",
    "Node",
    "ReducerConfig",
    "ValidationResult",
    "__version__",
    "empty_graph",
]
