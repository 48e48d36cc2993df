"""GraphStore client — a single-writer dispatch loop over graph snapshots."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable, Generator, Mapping
from contextlib import contextmanager
from typing import Any

from graphstate.engine import commands
from graphstate.engine.core import Edge as CoreEdge
from graphstate.engine.core import GraphState, graph_stats, validate_state
from graphstate.engine.core import Node as CoreNode
from graphstate.engine.core import as_ref, resolve_id
from graphstate.engine.reducer import GraphReducer, new_edge_id
from graphstate.models import Edge, GraphStats, Node, ReducerConfig, ValidationResult

logger = logging.getLogger(__name__)

# --- Conversion helpers: engine core types <-> pydantic models ---


def _core_node_to_model(cn: CoreNode) -> Node:
    return Node(id=cn.id, labels=list(cn.labels), properties=dict(cn.properties))


def _core_edge_to_model(ce: CoreEdge) -> Edge:
    return Edge(
        id=ce.id,
        source=dict(ce.source),
        target=dict(ce.target),
        label=ce.label,
        properties=dict(ce.properties),
    )


class GraphStore:
    """Holds the current snapshot and threads it through the reducer.

    Every dispatch replaces the current snapshot with the reducer's result
    and pushes the previous one onto the undo history. Snapshots are never
    mutated, so any snapshot read from ``state`` or ``history`` stays valid.

    Thread Safety:
        Dispatches are serialized by an internal RLock. Use ``batch()`` to
        apply several commands without other threads interleaving.

    Example:
        ```python
        store = GraphStore()
        store.add_node({"id": "1", "name": "Sam"}, "Person")
        store.add_node({"id": "2", "name": "Lev"}, "Person")
        store.add_edge({"id": "1"}, "KNOWS", {"id": "2"}, {"since": 2015})
        store.edges_between("1", "2")
        store.undo()  # the edge is gone again
        ```
    """

    def __init__(
        self,
        state: GraphState | None = None,
        *,
        config: ReducerConfig | None = None,
        id_factory: Callable[[], str] = new_edge_id,
        history_limit: int | None = None,
    ) -> None:
        if history_limit is not None and history_limit < 0:
            raise ValueError(f"history_limit must be >= 0, got: {history_limit}")
        self._reducer = GraphReducer(config, id_factory=id_factory)
        self._state = state if state is not None else GraphState.empty()
        self._past: deque[GraphState] = deque(maxlen=history_limit)
        self._future: list[GraphState] = []
        self._lock = threading.RLock()

    @property
    def state(self) -> GraphState:
        """The current snapshot."""
        with self._lock:
            return self._state

    @property
    def reducer(self) -> GraphReducer:
        return self._reducer

    @property
    def history(self) -> tuple[GraphState, ...]:
        """Previous snapshots, oldest first."""
        with self._lock:
            return tuple(self._past)

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Hold the lock across several dispatches - isolation, NOT rollback.

        Each dispatch inside the block is still recorded as its own history
        entry.
        """
        with self._lock:
            yield

    # --- Dispatch ---

    def dispatch(self, command: Any) -> GraphState:
        """Apply a command and return the new snapshot.

        An unrecognized command leaves the snapshot (and the history) as is.
        """
        with self._lock:
            new_state = self._reducer(self._state, command)
            if new_state is not self._state:
                self._past.append(self._state)
                self._future.clear()
                self._state = new_state
            return self._state

    def add_node(self, properties: Mapping[str, Any], labels: Any = None) -> Node:
        """Create or overwrite a node.

        Args:
            properties: Node properties, including the identifier.
            labels: A label or a sequence of labels.

        Returns:
            The stored Node.
        """
        state = self.dispatch(commands.add_node(properties, labels))
        node_id = resolve_id(as_ref(properties), self._reducer.id_key)
        return _core_node_to_model(state.nodes[node_id])

    def add_edge(
        self,
        source: Any,
        label: str,
        target: Any,
        properties: Mapping[str, Any] | None = None,
    ) -> Edge:
        """Create an edge; returns the new Edge (newest between the pair)."""
        state = self.dispatch(commands.add_edge(source, label, target, properties))
        newest = self._reducer.edges_between(state, source, target)[0]
        return _core_edge_to_model(newest)

    def modify_node(self, properties: Mapping[str, Any], labels: Any = None) -> Node:
        """Merge properties into an existing node and optionally replace its labels.

        Raises:
            KeyError: If the node does not exist.
        """
        state = self.dispatch(commands.modify_node(properties, labels))
        node_id = resolve_id(as_ref(properties), self._reducer.id_key)
        return _core_node_to_model(state.nodes[node_id])

    def remove_node(self, node: Any) -> GraphState:
        """Remove a node and all of its edges."""
        return self.dispatch(commands.remove_node(node))

    def unlink_node(self, node: Any) -> GraphState:
        """Remove all edges of a node, keeping the node."""
        return self.dispatch(commands.unlink_node(node))

    def unlink_two(self, first: Any, second: Any) -> GraphState:
        """Remove all edges between two nodes."""
        return self.dispatch(commands.unlink_two(first, second))

    # --- History ---

    def can_undo(self) -> bool:
        with self._lock:
            return bool(self._past)

    def can_redo(self) -> bool:
        with self._lock:
            return bool(self._future)

    def undo(self) -> bool:
        """Step back to the previous snapshot.

        Returns:
            ``True`` if a step was undone, ``False`` if history is empty.
        """
        with self._lock:
            if not self._past:
                return False
            self._future.append(self._state)
            self._state = self._past.pop()
            logger.debug("Undo: %d steps left", len(self._past))
            return True

    def redo(self) -> bool:
        """Re-apply the most recently undone snapshot.

        Returns:
            ``True`` if a step was redone, ``False`` if there is nothing to redo.
        """
        with self._lock:
            if not self._future:
                return False
            self._past.append(self._state)
            self._state = self._future.pop()
            logger.debug("Redo: %d steps left", len(self._future))
            return True

    def reset(self, state: GraphState | None = None) -> None:
        """Replace the current snapshot and clear history."""
        with self._lock:
            self._state = state if state is not None else GraphState.empty()
            self._past.clear()
            self._future.clear()

    # --- Queries ---

    def get_node(self, node: Any) -> Node | None:
        """Get a node by id or record, or ``None``."""
        node_id = resolve_id(as_ref(node), self._reducer.id_key)
        cn = self.state.nodes.get(node_id)
        return _core_node_to_model(cn) if cn else None

    def nodes(self, *, label: str | None = None) -> list[Node]:
        """All nodes, optionally only those carrying ``label``."""
        return [
            _core_node_to_model(n)
            for n in self.state.nodes.values()
            if label is None or label in n.labels
        ]

    def get_edge(self, id: str) -> Edge | None:
        ce = self.state.edges.get(id)
        return _core_edge_to_model(ce) if ce else None

    def edges_between(self, first: Any, second: Any) -> list[Edge]:
        """Edges between two nodes, newest first."""
        return [
            _core_edge_to_model(e)
            for e in self._reducer.edges_between(self.state, first, second)
        ]

    def edge_with_label_between(self, label: str, first: Any, second: Any) -> Edge | None:
        """Newest edge with ``label`` between two nodes, or ``None``."""
        ce = self._reducer.edge_with_label_between(self.state, label, first, second)
        return _core_edge_to_model(ce) if ce else None

    def edges_of_node(self, node: Any) -> list[Edge]:
        """All edges touching a node."""
        return [_core_edge_to_model(e) for e in self._reducer.edges_of_node(self.state, node)]

    # --- Stats ---

    def validate(self) -> ValidationResult:
        """Check the current snapshot for index consistency."""
        result = validate_state(self.state, self._reducer.id_key)
        return ValidationResult(
            valid=result["valid"],
            errors=result.get("errors", []),
            warnings=result.get("warnings", []),
        )

    def stats(self) -> GraphStats:
        """Node and edge counts by label."""
        s = graph_stats(self.state)
        return GraphStats(
            node_count=s["num_nodes"],
            edge_count=s["num_edges"],
            nodes_by_label=s.get("nodes_by_label", {}),
            edges_by_label=s.get("edges_by_label", {}),
        )
