"""Transition engine: (snapshot, command) -> snapshot.

GraphReducer is stateless apart from its configuration. Every call builds a
new GraphState and leaves the one passed in untouched; unrecognized
commands return the input snapshot itself.

Example:
    reducer = GraphReducer()
    state = GraphState.empty()
    state = reducer(state, add_node({"id": "1", "name": "Sam"}, "Person"))
    state = reducer(state, add_node({"id": "2", "name": "Lev"}, "Person"))
    state = reducer(state, add_edge({"id": "1"}, "KNOWS", {"id": "2"}, {"since": 2015}))
    reducer.edge_with_label_between(state, "KNOWS", "1", "2")
"""

import logging
import uuid
from collections.abc import Callable
from typing import Any

from graphstate.models import ReducerConfig

from .commands import AddEdge, AddNode, ModifyNode, RemoveNode, UnlinkNode, UnlinkTwo
from .core import Edge, GraphState, Node, NodeId, RecordRef, normalize_labels, resolve_id
from .index import insert_edge, remove_between, remove_incident
from .lookup import edge_with_label_between, edges_between, edges_of_node

logger = logging.getLogger(__name__)


def new_edge_id() -> str:
    """Time-ordered unique edge id (UUID version 1)."""
    return str(uuid.uuid1())


class GraphReducer:
    """Pure transition function over GraphState snapshots.

    Args:
        config: Engine configuration; defaults to ``id_property_name="id"``
        id_factory: Zero-argument callable producing fresh edge ids
    """

    def __init__(
        self,
        config: ReducerConfig | None = None,
        *,
        id_factory: Callable[[], str] = new_edge_id,
    ) -> None:
        self.config = config or ReducerConfig()
        self._id_factory = id_factory

    @property
    def id_key(self) -> str:
        return self.config.id_property_name

    def __call__(self, state: GraphState, command: Any) -> GraphState:
        match command:
            case AddNode():
                new_state = self._add_node(state, command)
            case AddEdge():
                new_state = self._add_edge(state, command)
            case ModifyNode():
                new_state = self._modify_node(state, command)
            case RemoveNode():
                new_state = self._remove_node(state, command)
            case UnlinkNode():
                new_state = self._unlink_node(state, command)
            case UnlinkTwo():
                new_state = self._unlink_two(state, command)
            case _:
                logger.debug("Ignoring unrecognized command: %s", type(command).__name__)
                return state
        logger.debug(
            "Applied %s: %d nodes, %d edges",
            command.kind,
            len(new_state.nodes),
            len(new_state.edges),
        )
        return new_state

    # ========== Handlers ==========

    def _add_node(self, state: GraphState, command: AddNode) -> GraphState:
        node_id = resolve_id(RecordRef(command.properties), self.id_key)
        node = Node(
            id=node_id,
            labels=normalize_labels(command.labels),
            properties=dict(command.properties),
        )
        return GraphState(
            nodes={**state.nodes, node_id: node},
            edges=state.edges,
            edge_map=state.edge_map,
        )

    def _add_edge(self, state: GraphState, command: AddEdge) -> GraphState:
        edge_id = self._id_factory()
        source_id = resolve_id(command.source, self.id_key)
        target_id = resolve_id(command.target, self.id_key)
        edge = Edge(
            id=edge_id,
            source={self.id_key: source_id},
            target={self.id_key: target_id},
            label=command.label,
            properties=dict(command.properties),
        )
        return GraphState(
            nodes=state.nodes,
            edges={**state.edges, edge_id: edge},
            edge_map=insert_edge(state.edge_map, edge_id, source_id, target_id),
        )

    def _modify_node(self, state: GraphState, command: ModifyNode) -> GraphState:
        # Properties always merge; labels are kept unless new ones are given.
        # An empty string counts as no labels given.
        node_id = resolve_id(RecordRef(command.properties), self.id_key)
        existing = state.nodes[node_id]
        labels = (
            existing.labels
            if command.labels is None or command.labels == ""
            else normalize_labels(command.labels)
        )
        node = Node(
            id=node_id,
            labels=labels,
            properties={**existing.properties, **command.properties},
        )
        return GraphState(
            nodes={**state.nodes, node_id: node},
            edges=state.edges,
            edge_map=state.edge_map,
        )

    def _remove_node(self, state: GraphState, command: RemoveNode) -> GraphState:
        node_id = resolve_id(command.node, self.id_key)
        unlinked = self._sever(state, node_id)
        nodes = {k: v for k, v in state.nodes.items() if k != node_id}
        return GraphState(nodes=nodes, edges=unlinked.edges, edge_map=unlinked.edge_map)

    def _unlink_node(self, state: GraphState, command: UnlinkNode) -> GraphState:
        return self._sever(state, resolve_id(command.node, self.id_key))

    def _unlink_two(self, state: GraphState, command: UnlinkTwo) -> GraphState:
        first = resolve_id(command.first, self.id_key)
        second = resolve_id(command.second, self.id_key)
        edge_map, removed = remove_between(state.edge_map, first, second)
        return GraphState(
            nodes=state.nodes,
            edges=_without(state.edges, removed),
            edge_map=edge_map,
        )

    def _sever(self, state: GraphState, node_id: NodeId) -> GraphState:
        edge_map, removed = remove_incident(state.edge_map, node_id)
        return GraphState(
            nodes=state.nodes,
            edges=_without(state.edges, removed),
            edge_map=edge_map,
        )

    # ========== Lookups ==========

    def edges_between(self, state: GraphState, first: Any, second: Any) -> list[Edge]:
        """See ``lookup.edges_between``, using this engine's id key."""
        return edges_between(state, first, second, id_key=self.id_key)

    def edge_with_label_between(
        self, state: GraphState, label: str, first: Any, second: Any
    ) -> Edge | None:
        """See ``lookup.edge_with_label_between``, using this engine's id key."""
        return edge_with_label_between(state, label, first, second, id_key=self.id_key)

    def edges_of_node(self, state: GraphState, node: Any) -> list[Edge]:
        """See ``lookup.edges_of_node``, using this engine's id key."""
        return edges_of_node(state, node, id_key=self.id_key)


def _without(edges: dict, removed: frozenset[str]) -> dict:
    if not removed:
        return edges
    return {k: v for k, v in edges.items() if k not in removed}
