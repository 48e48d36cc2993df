"""Pydantic models for the graphstate public API.

These are thin wrappers over the engine types (engine.core), providing
validation and serialization for client-facing results and configuration.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReducerConfig(BaseModel):
    """Per-engine configuration.

    ``id_property_name`` names the key that holds the node identifier in
    node properties and edge endpoint records. It is fixed for the lifetime
    of an engine.
    """

    model_config = ConfigDict(frozen=True)

    id_property_name: str = "id"

    @field_validator("id_property_name")
    @classmethod
    def _check_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("id_property_name must be a non-empty string")
        return value


class Node(BaseModel):
    """A node as returned by GraphStore queries."""

    id: Any
    labels: list[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Node({self.id!r}, labels={self.labels!r})"


class Edge(BaseModel):
    """An edge as returned by GraphStore queries.

    ``source`` and ``target`` keep the ``{id_key: node_id}`` shape.
    """

    id: str
    source: dict[str, Any]
    target: dict[str, Any]
    label: str
    properties: dict[str, Any] = Field(default_factory=dict)

    def __repr__(self) -> str:
        return f"Edge({self.label!r}: {self.source!r} -> {self.target!r})"


class ValidationResult(BaseModel):
    """Outcome of checking a snapshot's edge map against its edge table.

    ``errors`` list index entries that break the adjacency invariant;
    ``warnings`` list edges whose endpoints are not in the node table.
    """

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class GraphStats(BaseModel):
    """Summary counts for a snapshot, broken down by label."""

    node_count: int
    edge_count: int
    nodes_by_label: dict[str, int]
    edges_by_label: dict[str, int]
