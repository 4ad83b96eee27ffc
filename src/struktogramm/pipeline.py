"""End-to-end conversions between flow text, graph JSON, trees and geometry."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from .config.settings import Settings
from .core.exceptions import FlowParseError
from .core.tree import RootBlock, is_tree_document, load_tree
from .flowchart.model import END_NODE_ID, START_NODE_ID, FlowGraph, NodeKind
from .flowchart.parser import parse_flow_text
from .flowchart.serializer import render_flow_text
from .layout.engine import DiagramGeometry, LayoutEngine
from .structuring.engine import StructuringEngine
from .structuring.export import tree_to_graph
from .utils.logging import get_logger

logger = get_logger(__name__)


def graph_entry_and_stop(graph: FlowGraph) -> Tuple[Optional[str], Optional[str]]:
    """Resolve the structuring entry and stop nodes of a graph document.

    A sentinel start node typed `start` hands over to its first successor;
    an untyped one is itself the entry. Without a sentinel the graph's
    zero-in-degree rule applies. The sentinel end node, if any, is the stop.
    """
    stop = END_NODE_ID if END_NODE_ID in graph else None
    start = graph.get_node(START_NODE_ID)
    if start is None:
        return graph.find_start(), stop
    if start.kind is NodeKind.START:
        successors = graph.successors(start.id)
        return (successors[0] if successors else None), stop
    return start.id, stop


class DiagramPipeline:
    """Text / graph JSON -> structured tree -> geometry, and back."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.logger = get_logger(__name__)
        self.structuring = StructuringEngine.from_settings(self.settings)
        self.layout_engine = LayoutEngine.from_settings(self.settings)

    def structure_text(self, text: str) -> Optional[RootBlock]:
        """Structure flow notation. Returns None when there is nothing to structure."""
        result = parse_flow_text(text)
        if result.start is None:
            self.logger.info("Flow text has no nodes")
            return None
        return self.structuring.structure(result.graph, result.start)

    def structure_graph(self, graph: FlowGraph) -> Optional[RootBlock]:
        entry, stop = graph_entry_and_stop(graph)
        return self.structuring.structure(graph, entry, stop)

    def structure_graph_json(self, data: Dict[str, Any]) -> Optional[RootBlock]:
        return self.structure_graph(FlowGraph.from_dict(data))

    def load_document(self, data: Any) -> Optional[RootBlock]:
        """Accept either a graph document or a tree document."""
        if isinstance(data, dict) and "nodes" in data and "edges" in data:
            return self.structure_graph_json(data)
        if is_tree_document(data):
            return load_tree(data)
        raise FlowParseError(
            "Document is neither a flow graph nor a structured tree",
            context={"keys": sorted(data) if isinstance(data, dict) else type(data).__name__},
        )

    def layout(self, tree: RootBlock, width: Optional[float] = None) -> DiagramGeometry:
        return self.layout_engine.layout(tree, width)

    def export_graph(self, tree: RootBlock) -> Dict[str, Any]:
        return tree_to_graph(tree).to_dict()

    def export_text(self, tree: RootBlock) -> str:
        return render_flow_text(tree_to_graph(tree))


def tree_to_flow_text(tree: RootBlock) -> str:
    """Export a structured tree as flow notation."""
    return render_flow_text(tree_to_graph(tree))
