from graphstate.engine.commands import (
    AddEdge,
    AddNode,
    Command,
    ModifyNode,
    RemoveNode,
    UnlinkNode,
    UnlinkTwo,
    add_edge,
    add_node,
    command_from_dict,
    modify_node,
    remove_node,
    unlink_node,
    unlink_two,
)
from graphstate.engine.core import (
    Edge,
    GraphState,
    IdRef,
    Node,
    NodeRef,
    RecordRef,
    as_ref,
    empty_graph,
    graph_stats,
    resolve_id,
    validate_state,
)
from graphstate.engine.index import insert_edge, remove_between, remove_incident
from graphstate.engine.lookup import edge_with_label_between, edges_between, edges_of_node
from graphstate.engine.reducer import GraphReducer, new_edge_id

__all__ = [
    "AddEdge",
    "AddNode",
    "Command",
    "Edge",
    "GraphReducer",
    "GraphState",
    "IdRef",
    "ModifyNode",
    "Node",
    "NodeRef",
    "RecordRef",
    "RemoveNode",
    "UnlinkNode",
    "UnlinkTwo",
    "add_edge",
    "add_node",
    "as_ref",
    "command_from_dict",
    "edge_with_label_between",
    "edges_between",
    "edges_of_node",
    "empty_graph",
    "graph_stats",
    "insert_edge",
    "modify_node",
    "new_edge_id",
    "remove_between",
    "remove_incident",
    "remove_node",
    "resolve_id",
    "unlink_node",
    "unlink_two",
    "validate_state",
]
