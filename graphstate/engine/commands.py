"""Command value types for graph state transitions.

Each command is a frozen dataclass with a ``kind`` discriminant. Node
references are coerced into NodeRef values on construction, so the
transition engine resolves them with a single match.

Creator functions take their arguments positionally in the same order as
the command fields:

    add_node({"id": "1", "name": "Sam"}, "Person")
    add_edge({"id": "1"}, "KNOWS", {"id": "2"}, {"since": 2015})
    unlink_two({"id": "2"}, {"id": "3"})
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from .core import IdRef, NodeRef, RecordRef, as_ref

ADD_NODE = "ADD_NODE"
ADD_EDGE = "ADD_EDGE"
MODIFY_NODE = "MODIFY_NODE"
REMOVE_NODE = "REMOVE_NODE"
UNLINK_NODE = "UNLINK_NODE"
UNLINK_TWO = "UNLINK_TWO"


def _coerce_refs(command: Any, *names: str) -> None:
    for name in names:
        object.__setattr__(command, name, as_ref(getattr(command, name)))


def _ref_to_value(ref: NodeRef) -> Any:
    match ref:
        case IdRef(value):
            return value
        case RecordRef(record):
            return dict(record)
    raise TypeError(f"Expected IdRef or RecordRef, got: {type(ref).__name__}")


@dataclass(frozen=True)
class AddNode:
    """Insert or overwrite a node. ``properties`` must hold the identifier."""

    kind: ClassVar[str] = ADD_NODE

    properties: Mapping[str, Any]
    labels: str | tuple[str, ...] | list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "properties": dict(self.properties), "labels": self.labels}


@dataclass(frozen=True)
class AddEdge:
    """Create a new edge from ``source`` to ``target``."""

    kind: ClassVar[str] = ADD_EDGE

    source: Any
    label: str
    target: Any
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _coerce_refs(self, "source", "target")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "source": _ref_to_value(self.source),
            "label": self.label,
            "target": _ref_to_value(self.target),
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class ModifyNode:
    """Merge properties into an existing node; replace labels when given."""

    kind: ClassVar[str] = MODIFY_NODE

    properties: Mapping[str, Any]
    labels: str | tuple[str, ...] | list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "properties": dict(self.properties), "labels": self.labels}


@dataclass(frozen=True)
class RemoveNode:
    """Remove a node together with its edges."""

    kind: ClassVar[str] = REMOVE_NODE

    node: Any

    def __post_init__(self) -> None:
        _coerce_refs(self, "node")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "node": _ref_to_value(self.node)}


@dataclass(frozen=True)
class UnlinkNode:
    """Remove every edge of a node, keeping the node."""

    kind: ClassVar[str] = UNLINK_NODE

    node: Any

    def __post_init__(self) -> None:
        _coerce_refs(self, "node")

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "node": _ref_to_value(self.node)}


@dataclass(frozen=True)
class UnlinkTwo:
    """Remove every edge between two nodes, in either orientation."""

    kind: ClassVar[str] = UNLINK_TWO

    first: Any
    second: Any

    def __post_init__(self) -> None:
        _coerce_refs(self, "first", "second")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "first": _ref_to_value(self.first),
            "second": _ref_to_value(self.second),
        }


Command = AddNode | AddEdge | ModifyNode | RemoveNode | UnlinkNode | UnlinkTwo


# --- Creators ---


def add_node(properties: Mapping[str, Any], labels: Any = None) -> AddNode:
    return AddNode(properties, labels)


def add_edge(
    source: Any, label: str, target: Any, properties: Mapping[str, Any] | None = None
) -> AddEdge:
    return AddEdge(source, label, target, properties or {})


def modify_node(properties: Mapping[str, Any], labels: Any = None) -> ModifyNode:
    return ModifyNode(properties, labels)


def remove_node(node: Any) -> RemoveNode:
    return RemoveNode(node)


def unlink_node(node: Any) -> UnlinkNode:
    return UnlinkNode(node)


def unlink_two(first: Any, second: Any) -> UnlinkTwo:
    return UnlinkTwo(first, second)


def command_from_dict(data: Mapping[str, Any]) -> Command:
    """Build a command from its ``to_dict`` form.

    ``REMOVE_NODE`` and ``UNLINK_NODE`` also accept the node record under
    ``properties`` in place of ``node``.

    Raises:
        ValueError: If ``data`` is not a mapping, or ``type`` is missing or unknown
        KeyError: If a required field is missing
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Command must be a mapping, got: {type(data).__name__}")
    kind = data.get("type")
    if kind == ADD_NODE:
        return AddNode(data["properties"], data.get("labels"))
    if kind == ADD_EDGE:
        return AddEdge(data["source"], data["label"], data["target"], data.get("properties") or {})
    if kind == MODIFY_NODE:
        return ModifyNode(data["properties"], data.get("labels"))
    if kind in (REMOVE_NODE, UNLINK_NODE):
        node = data["node"] if "node" in data else data["properties"]
        return RemoveNode(node) if kind == REMOVE_NODE else UnlinkNode(node)
    if kind == UNLINK_TWO:
        return UnlinkTwo(data["first"], data["second"])
    if kind is None:
        raise ValueError("Command is missing 'type'")
    raise ValueError(f"Unknown command type: {kind!r}")
