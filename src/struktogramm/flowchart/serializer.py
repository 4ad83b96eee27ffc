"""Flow graph to flow-notation text."""

from __future__ import annotations

import re
from typing import Dict, List

from .model import FlowGraph, FlowNode, NodeKind

_SHAPE_BRACKETS: Dict[NodeKind, tuple[str, str]] = {
    NodeKind.PROCESS: ("[", "]"),
    NodeKind.DECISION: ("{", "}"),
    NodeKind.CASE: ("{", "}"),
    NodeKind.TERMINAL: ("([", "])"),
    NodeKind.LOOP: ("((", "))"),
    NodeKind.JOIN: ("{{", "}}"),
}
_UNSAFE_LABEL_CHARS = re.compile(r'["\n\r]')
_UNSAFE_EDGE_CHARS = re.compile(r"[|\n\r]")


def _escape(label: str) -> str:
    return _UNSAFE_LABEL_CHARS.sub("", label).replace("-->", "->")


def render_node(node: FlowNode) -> str:
    opener, closer = _SHAPE_BRACKETS.get(node.kind, ("[", "]"))
    label = _escape(node.label) if node.kind is not NodeKind.JOIN else " "
    return f'{node.id}{opener}"{label}"{closer}'


def render_flow_text(graph: FlowGraph, *, direction: str = "TD") -> str:
    """Render `graph` as flow notation that `parse_flow_text` reads back.

    Start/end sentinel nodes and their edges are left out; the first
    declared node becomes the entry point on re-import.
    """
    lines: List[str] = [f"graph {direction}"]
    sentinels = {node.id for node in graph if node.is_sentinel}

    for node in graph:
        if node.id in sentinels:
            continue
        lines.append(render_node(node))

    for edge in graph.edges:
        if edge.from_id in sentinels or edge.to_id in sentinels:
            continue
        label = _UNSAFE_EDGE_CHARS.sub("", edge.label).strip()
        arrow = f"-->|{label}|" if label else "-->"
        lines.append(f"{edge.from_id} {arrow} {edge.to_id}")

    return "\n".join(lines) + "\n"
