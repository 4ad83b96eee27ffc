import pytest

from struktogramm.core.exceptions import FlowParseError
from struktogramm.flowchart.model import FlowGraph, NodeKind


def test_flowchart_from_dict_normalizes_nodes_and_edges():
    data = {
        "nodes": [
            {"id": "n1", "type": "unknown", "text": "Alpha"},
            {"id": "n1", "label": "Beta"},
            "not a node",
        ],
        "edges": [
            {"from": "n1", "to": "n1_1", "label": "Yes"},
            {"from": "missing", "to": "n1"},
        ],
    }

    graph = FlowGraph.from_dict(data)
    assert list(graph.nodes) == ["n1", "n1_1"]
    assert graph.nodes["n1"].kind is NodeKind.PROCESS
    assert graph.nodes["n1"].label == "Alpha"
    assert graph.nodes["n1_1"].label == "Beta"
    assert len(graph.edges) == 1
    assert graph.edge_label("n1", "n1_1") == "Yes"


def test_from_dict_accepts_source_target_aliases():
    graph = FlowGraph.from_dict(
        {
            "nodes": [{"id": "a", "type": "decision"}, {"id": "b", "type": "LOOP"}],
            "edges": [{"source": "a", "target": "b"}],
        }
    )
    assert graph.nodes["a"].kind is NodeKind.DECISION
    assert graph.nodes["b"].kind is NodeKind.LOOP
    assert graph.successors("a") == ["b"]


def test_from_dict_rejects_non_object():
    with pytest.raises(FlowParseError):
        FlowGraph.from_dict(["nodes"])


def test_from_dict_rejects_non_list_nodes():
    with pytest.raises(FlowParseError) as exc_info:
        FlowGraph.from_dict({"nodes": {"id": "a"}, "edges": []})
    assert "must be lists" in str(exc_info.value)


def test_add_node_merges_into_existing_node():
    graph = FlowGraph()
    graph.add_node("a", label="Check", kind="decision")
    graph.add_node("a", label="Check again")

    node = graph.get_node("a")
    assert node.label == "Check again"
    assert node.kind is NodeKind.DECISION
    assert len(graph) == 1


def test_add_node_defaults_label_to_id():
    graph = FlowGraph()
    node = graph.add_node("step_1")
    assert node.label == "step_1"
    assert node.kind is NodeKind.PROCESS


def test_successors_keep_insertion_order():
    graph = FlowGraph()
    for node_id in "abcd":
        graph.add_node(node_id)
    graph.add_edge("a", "c", "second")
    graph.add_edge("a", "b", "first")
    graph.add_edge("a", "d")

    assert graph.successors("a") == ["c", "b", "d"]
    assert graph.successors("d") == []


def test_in_degree_counts_parallel_edges():
    graph = FlowGraph()
    graph.add_node("a")
    graph.add_node("b")
    graph.add_edge("a", "b")
    graph.add_edge("a", "b")

    assert graph.in_degree("b") == 2
    assert graph.in_degree("a") == 0


def test_edge_data_returns_first_match():
    graph = FlowGraph()
    graph.add_node("a")
    graph.add_node("b")
    graph.add_edge("a", "b", "first")
    graph.add_edge("a", "b", "second")

    assert graph.edge_data("a", "b").label == "first"
    assert graph.edge_data("b", "a") is None
    assert graph.edge_label("b", "a") == ""


def test_find_start_prefers_unique_root():
    graph = FlowGraph()
    for node_id in ("b", "a", "c"):
        graph.add_node(node_id)
    graph.add_edge("b", "c")
    graph.add_edge("c", "b")
    graph.add_edge("a", "b")

    assert graph.find_start() == "a"


def test_find_start_falls_back_to_first_declared():
    graph = FlowGraph()
    graph.add_node("x")
    graph.add_node("y")
    # Two roots, no edges
    assert graph.find_start() == "x"

    graph.add_edge("x", "y")
    graph.add_edge("y", "x")
    # No roots at all
    assert graph.find_start() == "x"


def test_find_start_on_empty_graph():
    assert FlowGraph().find_start() is None


def test_to_dict_shape():
    graph = FlowGraph()
    graph.add_node("a", label="A", kind=NodeKind.LOOP)
    graph.add_node("b", label="B")
    graph.add_edge("a", "b", "Exit")

    assert graph.to_dict() == {
        "nodes": [
            {"id": "a", "label": "A", "type": "loop"},
            {"id": "b", "label": "B", "type": "process"},
        ],
        "edges": [{"from": "a", "to": "b", "label": "Exit"}],
    }
