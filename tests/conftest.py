"""Shared fixtures for graphstate tests.

Reference graph (people):
    1 Sam, 2 Lev, 3 Steven — all labelled "Person"

    edge1: 1 -[KNOWS {since: 2015}]-> 2
    edge2: 2 -[KNOWS {since: 2015}]-> 3   (three-node fixtures)
    edge2: 1 -[WORKS_WITH {since: 2015}]-> 2   (two-node, two-edge fixture)
"""

import itertools

import pytest

from graphstate import GraphReducer, GraphState, GraphStore
from graphstate.engine import Edge, Node

NAMES = {"1": "Sam", "2": "Lev", "3": "Steven"}


def person(node_id: str) -> Node:
    return Node(id=node_id, labels=("Person",), properties={"id": node_id, "name": NAMES[node_id]})


def knows(edge_id: str, source: str, target: str, label: str = "KNOWS") -> Edge:
    return Edge(
        id=edge_id,
        source={"id": source},
        target={"id": target},
        label=label,
        properties={"since": 2015},
    )


@pytest.fixture()
def id_factory():
    """Deterministic edge ids: generated-1, generated-2, ..."""
    counter = itertools.count(1)
    return lambda: f"generated-{next(counter)}"


@pytest.fixture()
def reducer(id_factory):
    """Reducer with the default "id" key and deterministic edge ids."""
    return GraphReducer(id_factory=id_factory)


@pytest.fixture()
def store(id_factory):
    """Fresh GraphStore with deterministic edge ids."""
    return GraphStore(id_factory=id_factory)


@pytest.fixture()
def empty():
    return GraphState.empty()


@pytest.fixture()
def one_node():
    return GraphState(nodes={"1": person("1")}, edges={}, edge_map={})


@pytest.fixture()
def two_nodes():
    return GraphState(nodes={"1": person("1"), "2": person("2")}, edges={}, edge_map={})


@pytest.fixture()
def two_nodes_one_edge():
    return GraphState(
        nodes={"1": person("1"), "2": person("2")},
        edges={"edge1": knows("edge1", "1", "2")},
        edge_map={"1": {"2": ("edge1",)}, "2": {"1": ("edge1",)}},
    )


@pytest.fixture()
def two_nodes_two_edges():
    return GraphState(
        nodes={"1": person("1"), "2": person("2")},
        edges={
            "edge1": knows("edge1", "1", "2"),
            "edge2": knows("edge2", "1", "2", label="WORKS_WITH"),
        },
        edge_map={"1": {"2": ("edge2", "edge1")}, "2": {"1": ("edge2", "edge1")}},
    )


@pytest.fixture()
def three_nodes_one_edge():
    return GraphState(
        nodes={"1": person("1"), "2": person("2"), "3": person("3")},
        edges={"edge1": knows("edge1", "1", "2")},
        edge_map={"1": {"2": ("edge1",)}, "2": {"1": ("edge1",)}},
    )


@pytest.fixture()
def three_nodes_two_edges():
    return GraphState(
        nodes={"1": person("1"), "2": person("2"), "3": person("3")},
        edges={
            "edge1": knows("edge1", "1", "2"),
            "edge2": knows("edge2", "2", "3"),
        },
        edge_map={
            "1": {"2": ("edge1",)},
            "2": {"1": ("edge1",), "3": ("edge2",)},
            "3": {"2": ("edge2",)},
        },
    )
