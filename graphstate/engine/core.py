"""Core graph state data structures.

An immutable snapshot model for a labelled property graph driven by
discrete commands. A snapshot is the triple (nodes, edges, edge_map):

- ``nodes``: node id -> Node
- ``edges``: edge id -> Edge
- ``edge_map``: node id -> neighbor id -> edge ids (newest first)

The edge map is a derived adjacency index. Edges are undirected for
adjacency purposes: an edge from A to B is listed under both
``edge_map[A][B]`` and ``edge_map[B][A]``, while the Edge record keeps its
source/target orientation.

Immutability:
    Snapshots are never mutated after construction. Transitions build new
    dicts for the parts they touch and share the untouched sub-mappings
    with the previous snapshot. Callers must treat every mapping reachable
    from a snapshot as read-only.
"""

from collections import Counter
from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from typing import Any

NodeId = Hashable
EdgeMap = Mapping[NodeId, Mapping[NodeId, tuple[str, ...]]]


# ========== Identifier Resolution ==========


@dataclass(frozen=True)
class IdRef:
    """A node reference given as a bare identifier."""

    value: NodeId


@dataclass(frozen=True)
class RecordRef:
    """A node reference given as a record holding the identifier.

    The identifier lives under the engine's configured key name.
    """

    record: Mapping[str, Any]


NodeRef = IdRef | RecordRef


def as_ref(value: Any) -> NodeRef:
    """Coerce a host value into a NodeRef.

    Mappings become RecordRef, existing refs pass through, anything else is
    taken to be a bare identifier.
    """
    if isinstance(value, (IdRef, RecordRef)):
        return value
    if isinstance(value, Mapping):
        return RecordRef(value)
    return IdRef(value)


def resolve_id(ref: NodeRef, id_key: str) -> NodeId:
    """Return the canonical node id for a reference.

    Raises:
        KeyError: If a record reference lacks ``id_key``
    """
    match ref:
        case IdRef(value):
            return value
        case RecordRef(record):
            return record[id_key]
    raise TypeError(f"Expected IdRef or RecordRef, got: {type(ref).__name__}")


# ========== Records ==========


@dataclass(frozen=True)
class Node:
    """A node in the graph.

    Attributes:
        id: Value found under the configured identifier key
        labels: Labels in the order of the most recent write
        properties: Arbitrary key-value data, including the identifier

    Raises:
        TypeError: If any label is not a string
    """

    id: NodeId
    labels: tuple[str, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for label in self.labels:
            if not isinstance(label, str):
                raise TypeError(f"Node labels must be strings, got: {type(label).__name__}")


@dataclass(frozen=True)
class Edge:
    """A labelled edge between two nodes.

    ``source`` and ``target`` have the shape ``{id_key: node_id}``.

    Raises:
        TypeError: If id or label is not a string
    """

    id: str
    source: Mapping[str, NodeId]
    target: Mapping[str, NodeId]
    label: str
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            raise TypeError(f"Edge id must be a string, got: {type(self.id).__name__}")
        if not isinstance(self.label, str):
            raise TypeError(f"Edge label must be a string, got: {type(self.label).__name__}")

    def endpoints(self, id_key: str) -> tuple[NodeId, NodeId]:
        """(source id, target id) under the given key."""
        return self.source[id_key], self.target[id_key]


def normalize_labels(labels: str | tuple[str, ...] | list[str] | None) -> tuple[str, ...]:
    """A single string becomes a one-element tuple; None becomes empty."""
    if labels is None:
        return ()
    if isinstance(labels, str):
        return (labels,)
    return tuple(labels)


# ========== Snapshot ==========


@dataclass(frozen=True)
class GraphState:
    """One immutable snapshot of the graph.

    Use ``GraphState.empty()`` for the initial state.
    """

    nodes: Mapping[NodeId, Node] = field(default_factory=dict)
    edges: Mapping[str, Edge] = field(default_factory=dict)
    edge_map: EdgeMap = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "GraphState":
        """A snapshot with no nodes, no edges and an empty index."""
        return cls(nodes={}, edges={}, edge_map={})

    # ========== Serialization ==========

    def to_dict(self) -> dict[str, Any]:
        """Export as plain dicts and lists (``nodes``, ``edges``, ``edgeMap``)."""
        return {
            "nodes": {
                node_id: {
                    "id": n.id,
                    "labels": list(n.labels),
                    "properties": dict(n.properties),
                }
                for node_id, n in self.nodes.items()
            },
            "edges": {
                edge_id: {
                    "id": e.id,
                    "source": dict(e.source),
                    "target": dict(e.target),
                    "label": e.label,
                    "properties": dict(e.properties),
                }
                for edge_id, e in self.edges.items()
            },
            "edgeMap": {
                node_id: {neighbor: list(ids) for neighbor, ids in row.items()}
                for node_id, row in self.edge_map.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GraphState":
        """Import from the dict shape produced by ``to_dict``.

        JSON turns every mapping key into a string. Identifiers are taken
        from the node records and edge endpoints, and index keys are mapped
        back onto them so an integer id survives a JSON round trip.

        Raises:
            ValueError: If one of the three tables is missing
        """
        missing = [k for k in ("nodes", "edges", "edgeMap") if k not in data]
        if missing:
            raise ValueError(f"Snapshot is missing required keys: {missing}")

        nodes: dict[NodeId, Node] = {}
        for node_data in data["nodes"].values():
            node = Node(
                id=node_data["id"],
                labels=normalize_labels(node_data.get("labels")),
                properties=dict(node_data.get("properties", {})),
            )
            nodes[node.id] = node

        edges: dict[str, Edge] = {}
        known_ids: dict[str, NodeId] = {str(node_id): node_id for node_id in nodes}
        for edge_data in data["edges"].values():
            edge = Edge(
                id=edge_data["id"],
                source=dict(edge_data["source"]),
                target=dict(edge_data["target"]),
                label=edge_data["label"],
                properties=dict(edge_data.get("properties", {})),
            )
            edges[edge.id] = edge
            for endpoint in (edge.source, edge.target):
                for value in endpoint.values():
                    known_ids.setdefault(str(value), value)

        def restore(key: Any) -> NodeId:
            return known_ids.get(str(key), key)

        edge_map = {
            restore(node_id): {restore(neighbor): tuple(ids) for neighbor, ids in row.items()}
            for node_id, row in data["edgeMap"].items()
        }
        return cls(nodes=nodes, edges=edges, edge_map=edge_map)


def empty_graph() -> GraphState:
    """Return a new empty snapshot."""
    return GraphState.empty()


# ========== Utility Functions ==========


def graph_stats(state: GraphState) -> dict[str, Any]:
    """Get snapshot statistics.

    Returns:
        Dict with num_nodes, num_edges, nodes_by_label, edges_by_label
    """
    nodes_by_label: Counter[str] = Counter()
    for node in state.nodes.values():
        # duplicates in a label sequence count once
        nodes_by_label.update(set(node.labels))
    edges_by_label = Counter(edge.label for edge in state.edges.values())
    return {
        "num_nodes": len(state.nodes),
        "num_edges": len(state.edges),
        "nodes_by_label": dict(nodes_by_label),
        "edges_by_label": dict(edges_by_label),
    }


def validate_state(state: GraphState, id_key: str = "id") -> dict[str, Any]:
    """Check that the edge map agrees with the edge table.

    Checks for:
    - Index entries pointing at edges absent from the edge table
    - Index entries filed under a pair that is not the edge's endpoints
    - Edges missing from either direction of the index
    - Empty edge sequences and empty rows
    - Edges whose endpoints are absent from the node table (warning only,
      adding an edge does not require its nodes to exist)

    Returns:
        Dict with 'valid' (bool), 'errors' and 'warnings' (lists of str)
    """
    errors: list[str] = []
    warnings: list[str] = []

    for node_id, row in state.edge_map.items():
        if not row:
            errors.append(f"Edge map row for '{node_id}' is empty")
        for neighbor, edge_ids in row.items():
            if not edge_ids:
                errors.append(f"Edge map entry '{node_id}' -> '{neighbor}' is empty")
            for edge_id in edge_ids:
                edge = state.edges.get(edge_id)
                if edge is None:
                    errors.append(
                        f"Edge map entry '{node_id}' -> '{neighbor}' references "
                        f"non-existent edge: '{edge_id}'"
                    )
                    continue
                if {node_id, neighbor} != set(edge.endpoints(id_key)):
                    errors.append(
                        f"Edge '{edge_id}' is indexed under '{node_id}' -> '{neighbor}' "
                        f"but connects {edge.endpoints(id_key)}"
                    )

    for edge_id, edge in state.edges.items():
        source_id, target_id = edge.endpoints(id_key)
        if edge_id not in state.edge_map.get(source_id, {}).get(target_id, ()):
            errors.append(f"Edge '{edge_id}' missing from edge map '{source_id}' -> '{target_id}'")
        if edge_id not in state.edge_map.get(target_id, {}).get(source_id, ()):
            errors.append(f"Edge '{edge_id}' missing from edge map '{target_id}' -> '{source_id}'")
        missing = [n for n in (source_id, target_id) if n not in state.nodes]
        if missing:
            warnings.append(f"Edge '{edge_id}' references non-existent nodes: {missing}")

    return {"valid": len(errors) == 0, "errors": errors, "warnings": warnings}
