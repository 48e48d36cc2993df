"""Tests for core graph state data structures."""

import json

import pytest

from graphstate.engine.core import (
    Edge,
    GraphState,
    IdRef,
    Node,
    RecordRef,
    as_ref,
    empty_graph,
    graph_stats,
    normalize_labels,
    resolve_id,
    validate_state,
)


class TestIdentifierResolution:
    """Tests for NodeRef coercion and resolution."""

    def test_bare_id(self):
        assert resolve_id(IdRef("1"), "id") == "1"

    def test_record(self):
        assert resolve_id(RecordRef({"id": "1", "name": "Sam"}), "id") == "1"

    def test_custom_key(self):
        assert resolve_id(RecordRef({"uid": 7}), "uid") == 7

    def test_record_missing_key_raises(self):
        with pytest.raises(KeyError):
            resolve_id(RecordRef({"name": "Sam"}), "id")

    def test_as_ref_mapping(self):
        assert as_ref({"id": "1"}) == RecordRef({"id": "1"})

    def test_as_ref_scalar(self):
        assert as_ref(42) == IdRef(42)

    def test_as_ref_passthrough(self):
        ref = IdRef("1")
        assert as_ref(ref) is ref


class TestRecords:
    """Tests for Node and Edge dataclasses."""

    def test_basic_node(self):
        node = Node(id="1", labels=("Person",), properties={"id": "1"})
        assert node.labels == ("Person",)
        assert node.properties["id"] == "1"

    def test_node_label_must_be_string(self):
        with pytest.raises(TypeError, match="labels must be strings"):
            Node(id="1", labels=("Person", 3))

    def test_node_is_frozen(self):
        node = Node(id="1")
        with pytest.raises(AttributeError):
            node.labels = ("Other",)

    def test_edge_label_must_be_string(self):
        with pytest.raises(TypeError, match="label must be a string"):
            Edge(id="e1", source={"id": "1"}, target={"id": "2"}, label=None)

    def test_edge_endpoints(self):
        edge = Edge(id="e1", source={"uid": 1}, target={"uid": 2}, label="KNOWS")
        assert edge.endpoints("uid") == (1, 2)

    def test_normalize_labels(self):
        assert normalize_labels("Person") == ("Person",)
        assert normalize_labels(["A", "B", "A"]) == ("A", "B", "A")
        assert normalize_labels(None) == ()


class TestGraphState:
    """Tests for the snapshot value type."""

    def test_empty(self):
        state = GraphState.empty()
        assert state.nodes == {}
        assert state.edges == {}
        assert state.edge_map == {}

    def test_empty_graph_returns_distinct_snapshots(self):
        assert empty_graph() == empty_graph()
        assert empty_graph() is not empty_graph()

    def test_equality_is_structural(self, two_nodes_one_edge, three_nodes_one_edge):
        assert two_nodes_one_edge == GraphState(
            nodes=dict(two_nodes_one_edge.nodes),
            edges=dict(two_nodes_one_edge.edges),
            edge_map=dict(two_nodes_one_edge.edge_map),
        )
        assert two_nodes_one_edge != three_nodes_one_edge

    def test_to_dict_shape(self, two_nodes_one_edge):
        data = two_nodes_one_edge.to_dict()
        assert set(data) == {"nodes", "edges", "edgeMap"}
        assert data["nodes"]["1"] == {
            "id": "1",
            "labels": ["Person"],
            "properties": {"id": "1", "name": "Sam"},
        }
        assert data["edges"]["edge1"] == {
            "id": "edge1",
            "source": {"id": "1"},
            "target": {"id": "2"},
            "label": "KNOWS",
            "properties": {"since": 2015},
        }
        assert data["edgeMap"] == {"1": {"2": ["edge1"]}, "2": {"1": ["edge1"]}}

    def test_dict_round_trip(self, three_nodes_two_edges):
        assert GraphState.from_dict(three_nodes_two_edges.to_dict()) == three_nodes_two_edges

    def test_json_round_trip_restores_integer_ids(self):
        state = GraphState(
            nodes={1: Node(id=1, labels=("Person",), properties={"id": 1})},
            edges={"e1": Edge(id="e1", source={"id": 1}, target={"id": 2}, label="KNOWS")},
            edge_map={1: {2: ("e1",)}, 2: {1: ("e1",)}},
        )
        restored = GraphState.from_dict(json.loads(json.dumps(state.to_dict())))
        assert restored == state
        assert 1 in restored.nodes
        assert restored.edge_map[2][1] == ("e1",)

    def test_from_dict_missing_table_raises(self):
        with pytest.raises(ValueError, match="missing required keys"):
            GraphState.from_dict({"nodes": {}, "edges": {}})


class TestGraphStats:
    def test_counts_by_label(self, two_nodes_two_edges):
        stats = graph_stats(two_nodes_two_edges)
        assert stats["num_nodes"] == 2
        assert stats["num_edges"] == 2
        assert stats["nodes_by_label"] == {"Person": 2}
        assert stats["edges_by_label"] == {"KNOWS": 1, "WORKS_WITH": 1}

    def test_duplicate_labels_count_once(self):
        state = GraphState(nodes={"1": Node(id="1", labels=("A", "A"))}, edges={}, edge_map={})
        assert graph_stats(state)["nodes_by_label"] == {"A": 1}


class TestValidateState:
    """Tests for the index consistency check."""

    def test_valid_snapshot(self, three_nodes_two_edges):
        result = validate_state(three_nodes_two_edges)
        assert result["valid"] is True
        assert result["errors"] == []
        assert result["warnings"] == []

    def test_dangling_edge_id(self, two_nodes_one_edge):
        broken = GraphState(
            nodes=two_nodes_one_edge.nodes,
            edges={},
            edge_map=two_nodes_one_edge.edge_map,
        )
        result = validate_state(broken)
        assert result["valid"] is False
        assert any("non-existent edge: 'edge1'" in e for e in result["errors"])

    def test_one_sided_index(self, two_nodes_one_edge):
        broken = GraphState(
            nodes=two_nodes_one_edge.nodes,
            edges=two_nodes_one_edge.edges,
            edge_map={"1": {"2": ("edge1",)}},
        )
        result = validate_state(broken)
        assert result["valid"] is False
        assert any("missing from edge map '2' -> '1'" in e for e in result["errors"])

    def test_empty_sequence_and_row(self, one_node):
        broken = GraphState(nodes=one_node.nodes, edges={}, edge_map={"1": {"2": ()}, "3": {}})
        errors = validate_state(broken)["errors"]
        assert any("'1' -> '2' is empty" in e for e in errors)
        assert any("row for '3' is empty" in e for e in errors)

    def test_misfiled_edge(self, three_nodes_two_edges):
        edge_map = {
            "1": {"2": ("edge1",), "3": ("edge2",)},
            "2": {"1": ("edge1",), "3": ("edge2",)},
            "3": {"2": ("edge2",), "1": ("edge2",)},
        }
        broken = GraphState(
            nodes=three_nodes_two_edges.nodes,
            edges=three_nodes_two_edges.edges,
            edge_map=edge_map,
        )
        errors = validate_state(broken)["errors"]
        assert any("indexed under '1' -> '3'" in e for e in errors)

    def test_missing_endpoint_is_warning(self, two_nodes_one_edge):
        state = GraphState(
            nodes={"1": two_nodes_one_edge.nodes["1"]},
            edges=two_nodes_one_edge.edges,
            edge_map=two_nodes_one_edge.edge_map,
        )
        result = validate_state(state)
        assert result["valid"] is True
        assert result["warnings"] == ["Edge 'edge1' references non-existent nodes: ['2']"]
