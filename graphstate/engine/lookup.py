"""Read-only queries over a snapshot.

Lookups never fail on unknown nodes: they return an empty list or None.
"""

from typing import Any

from .core import Edge, GraphState, as_ref, resolve_id


def edges_between(state: GraphState, first: Any, second: Any, *, id_key: str = "id") -> list[Edge]:
    """Edges linking two nodes, newest first.

    Orientation does not matter: an edge from ``second`` to ``first`` is
    returned as well.
    """
    first_id = resolve_id(as_ref(first), id_key)
    second_id = resolve_id(as_ref(second), id_key)
    edge_ids = state.edge_map.get(first_id, {}).get(second_id, ())
    return [state.edges[edge_id] for edge_id in edge_ids]


def edge_with_label_between(
    state: GraphState,
    label: str,
    first: Any,
    second: Any,
    *,
    id_key: str = "id",
) -> Edge | None:
    """The newest edge with ``label`` between two nodes, or None."""
    for edge in edges_between(state, first, second, id_key=id_key):
        if edge.label == label:
            return edge
    return None


def edges_of_node(state: GraphState, node: Any, *, id_key: str = "id") -> list[Edge]:
    """Every edge touching a node, grouped by neighbor in index order."""
    node_id = resolve_id(as_ref(node), id_key)
    row = state.edge_map.get(node_id, {})
    return [state.edges[edge_id] for edge_ids in row.values() for edge_id in edge_ids]
