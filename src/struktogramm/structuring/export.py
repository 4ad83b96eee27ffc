"""Flow graph construction from a structured tree."""

from __future__ import annotations

from typing import List, Sequence

from ..core.tree import (
    LOOP_TYPES,
    Block,
    CaseBlock,
    DecisionBlock,
    LoopBlock,
    ProcessBlock,
    RootBlock,
)
from ..flowchart.model import END_NODE_ID, START_NODE_ID, FlowGraph, NodeKind

YES_LABEL = "Ja"
NO_LABEL = "Nein"
EXIT_LABEL = "Exit"


class TreeToGraphBuilder:
    """Serializes one structured tree into a flow graph.

    Every loop head is reused as the join point after its loop, so the edge
    leaving a loop head towards the next block is labeled "Exit". Node ids
    come from a counter owned by this builder, so repeated exports of the
    same tree produce identical graphs.
    """

    def __init__(self) -> None:
        self.graph = FlowGraph()
        self._counter = 0
        self._loop_heads: set[str] = set()

    def _next_id(self) -> str:
        node_id = f"node_{self._counter}"
        self._counter += 1
        return node_id

    def _add_node(self, label: str, kind: NodeKind) -> str:
        node_id = self._next_id()
        self.graph.add_node(node_id, label=label, kind=kind)
        return node_id

    def _connect(self, source: str, target: str, label: str = "") -> None:
        if not label and source in self._loop_heads:
            label = EXIT_LABEL
        self.graph.add_edge(source, target, label)

    def build(self, tree: RootBlock) -> FlowGraph:
        self.graph.add_node(START_NODE_ID, label="Start", kind=NodeKind.START)
        self.graph.add_node(END_NODE_ID, label="End", kind=NodeKind.END)
        last = self._build_sequence(tree.children, START_NODE_ID)
        self._connect(last, END_NODE_ID)
        return self.graph

    def _build_sequence(self, blocks: Sequence[Block], predecessor: str) -> str:
        """Chain blocks after `predecessor`; returns the last node id."""
        current = predecessor
        for block in blocks:
            current = self._build_block(block, current)
        return current

    def _build_block(self, block: Block, predecessor: str) -> str:
        if isinstance(block, DecisionBlock):
            node_id = self._add_node(block.label, NodeKind.DECISION)
            self._connect(predecessor, node_id)
            return self._build_branches(
                node_id,
                [(YES_LABEL, block.yes), (NO_LABEL, block.no)],
            )

        if isinstance(block, CaseBlock):
            node_id = self._add_node(block.label, NodeKind.CASE)
            self._connect(predecessor, node_id)
            return self._build_branches(
                node_id,
                [(branch.label, branch.children) for branch in block.branches],
            )

        if isinstance(block, LoopBlock) or getattr(block, "type", None) in LOOP_TYPES:
            node_id = self._add_node(block.label, NodeKind.LOOP)
            self._connect(predecessor, node_id)
            body_entry = self._add_node("", NodeKind.JOIN)
            self.graph.add_edge(node_id, body_entry)
            last = self._build_sequence(block.children, body_entry)
            self._connect(last, node_id)
            self._loop_heads.add(node_id)
            return node_id

        label = block.label if isinstance(block, ProcessBlock) else str(getattr(block, "label", ""))
        node_id = self._add_node(label, NodeKind.PROCESS)
        self._connect(predecessor, node_id)
        return node_id

    def _build_branches(self, head: str, branches: List[tuple[str, Sequence[Block]]]) -> str:
        merge = self._add_node("", NodeKind.JOIN)
        for label, children in branches:
            entry = self._add_node("", NodeKind.JOIN)
            self.graph.add_edge(head, entry, label)
            last = self._build_sequence(children, entry)
            self._connect(last, merge)
        return merge


def tree_to_graph(tree: RootBlock) -> FlowGraph:
    """Export a structured tree as a flow graph with start/end sentinels."""
    return TreeToGraphBuilder().build(tree)
