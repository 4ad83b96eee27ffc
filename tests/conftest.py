"""Shared fixtures for struktogramm tests."""

import pytest

from struktogramm.core.tree import (
    CaseBlock,
    CaseBranch,
    DecisionBlock,
    LoopBlock,
    ProcessBlock,
    RootBlock,
)
from struktogramm.flowchart.model import FlowGraph
from struktogramm.structuring.engine import StructuringEngine

SCENARIO_A = (
    'graph TD\n'
    'A["Start"]\n'
    'A-->B{"x>0"}\n'
    'B-->|Ja|C["inc"]\n'
    'B-->|Nein|D["dec"]\n'
    'C-->E["End"]\n'
    'D-->E\n'
)

SCENARIO_B = (
    'A((cond))\n'
    'A-->|exit|Z\n'
    'A-->B["work"]\n'
    'B-->A\n'
)


@pytest.fixture
def scenario_a() -> str:
    return SCENARIO_A


@pytest.fixture
def scenario_b() -> str:
    return SCENARIO_B


@pytest.fixture
def engine() -> StructuringEngine:
    return StructuringEngine()


@pytest.fixture
def make_graph():
    """Factory building a FlowGraph from (id, label, kind) nodes and (from, to, label) edges."""

    def _make(nodes, edges) -> FlowGraph:
        graph = FlowGraph()
        for node_id, label, kind in nodes:
            graph.add_node(node_id, label=label, kind=kind)
        for edge in edges:
            source, target = edge[0], edge[1]
            label = edge[2] if len(edge) > 2 else ""
            graph.add_edge(source, target, label)
        return graph

    return _make


@pytest.fixture
def mixed_tree() -> RootBlock:
    """A tree using every block type, nested two levels deep."""
    return RootBlock(
        children=[
            ProcessBlock(label="read n"),
            LoopBlock(
                label="while n > 0",
                children=[
                    DecisionBlock(
                        label="n even?",
                        yes=[ProcessBlock(label="n = n / 2")],
                        no=[ProcessBlock(label="n = 3n + 1"), ProcessBlock(label="steps += 1")],
                    ),
                ],
            ),
            CaseBlock(
                label="steps",
                branches=[
                    CaseBranch(label="small", children=[ProcessBlock(label="print short")]),
                    CaseBranch(label="medium", children=[]),
                    CaseBranch(label="large", children=[ProcessBlock(label="print long")]),
                ],
            ),
            ProcessBlock(label="done"),
        ]
    )
