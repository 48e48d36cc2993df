"""Adjacency index maintenance.

Pure functions over the edge map. None of them mutate their input; each
returns a new top-level dict (and new rows for the rows it touches), or the
input itself when there is nothing to change.

Invariants preserved:
- Every edge id appears under both ``[source][target]`` and ``[target][source]``
- Edge sequences are newest first
- No neighbor entry holds an empty sequence, no row is empty
"""

from .core import EdgeMap, NodeId


def _drop_neighbor(edge_map: dict, owner: NodeId, neighbor: NodeId) -> None:
    """Remove ``neighbor`` from ``owner``'s row in a freshly copied map.

    The row is replaced, never edited, so the previous snapshot keeps its own.
    """
    row = edge_map.get(owner)
    if row is None or neighbor not in row:
        return
    remaining = {k: v for k, v in row.items() if k != neighbor}
    if remaining:
        edge_map[owner] = remaining
    else:
        del edge_map[owner]


def insert_edge(
    edge_map: EdgeMap,
    edge_id: str,
    source_id: NodeId,
    target_id: NodeId,
) -> EdgeMap:
    """Index a new edge in both directions, newest first.

    A self-loop is recorded once, under ``[source][source]``.
    """
    new_map = dict(edge_map)

    source_row = dict(new_map.get(source_id, {}))
    source_row[target_id] = (edge_id, *source_row.get(target_id, ()))
    new_map[source_id] = source_row

    if target_id != source_id:
        target_row = dict(new_map.get(target_id, {}))
        target_row[source_id] = (edge_id, *target_row.get(source_id, ()))
        new_map[target_id] = target_row

    return new_map


def remove_incident(edge_map: EdgeMap, node_id: NodeId) -> tuple[EdgeMap, frozenset[str]]:
    """Drop every index entry touching a node.

    Args:
        edge_map: Current index
        node_id: Node whose edges are severed

    Returns:
        Tuple of (new index, ids of the edges that were removed). A node
        without edges yields the same index and an empty set.
    """
    row = edge_map.get(node_id)
    if row is None:
        return edge_map, frozenset()

    removed = frozenset(edge_id for edge_ids in row.values() for edge_id in edge_ids)

    new_map = dict(edge_map)
    del new_map[node_id]
    for neighbor in row:
        if neighbor != node_id:
            _drop_neighbor(new_map, neighbor, node_id)
    return new_map, removed


def remove_between(
    edge_map: EdgeMap,
    first: NodeId,
    second: NodeId,
) -> tuple[EdgeMap, frozenset[str]]:
    """Drop the index entries linking exactly two nodes.

    Only ``[first][second]`` and ``[second][first]`` go; other neighbors of
    either node are kept.

    Returns:
        Tuple of (new index, ids of the edges that were removed). An
        unlinked pair yields the same index and an empty set.
    """
    edge_ids = edge_map.get(first, {}).get(second)
    if not edge_ids:
        return edge_map, frozenset()

    new_map = dict(edge_map)
    _drop_neighbor(new_map, first, second)
    _drop_neighbor(new_map, second, first)
    return new_map, frozenset(edge_ids)
