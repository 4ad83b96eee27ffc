"""Flow graph model, flow-notation parser and serializer."""

from .model import END_NODE_ID, START_NODE_ID, FlowEdge, FlowGraph, FlowNode, NodeKind
from .parser import ParseResult, parse_flow_text, parse_node_ref
from .serializer import render_flow_text

__all__ = [
    "END_NODE_ID",
    "START_NODE_ID",
    "FlowEdge",
    "FlowGraph",
    "FlowNode",
    "NodeKind",
    "ParseResult",
    "parse_flow_text",
    "parse_node_ref",
    "render_flow_text",
]
