"""Flow graph schema, adjacency queries and JSON interchange."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from ..core.exceptions import FlowParseError

START_NODE_ID = "start"
END_NODE_ID = "end"


class NodeKind(str, Enum):
    """Kinds of nodes in a flow graph."""
    PROCESS = "process"
    DECISION = "decision"
    LOOP = "loop"
    TERMINAL = "terminal"
    START = "start"
    END = "end"
    JOIN = "join"
    CASE = "case"

    @classmethod
    def coerce(cls, value: Any) -> "NodeKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.PROCESS


def _unique_id(prefix: str, used: set[str]) -> str:
    idx = 1
    base = prefix or "node"
    candidate = f"{base}_{idx}"
    while candidate in used:
        idx += 1
        candidate = f"{base}_{idx}"
    used.add(candidate)
    return candidate


@dataclass
class FlowNode:
    id: str
    label: str = ""
    kind: NodeKind = NodeKind.PROCESS

    @property
    def is_sentinel(self) -> bool:
        return self.kind in (NodeKind.START, NodeKind.END)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "type": self.kind.value}


@dataclass
class FlowEdge:
    from_id: str
    to_id: str
    label: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.from_id, "to": self.to_id, "label": self.label}


@dataclass
class FlowGraph:
    """Directed multigraph of control-flow nodes.

    Node and edge insertion order is preserved. Edge order out of a node is
    significant: the structuring engine tells a decision's first and second
    successor apart by it. Cycles are allowed.
    """

    nodes: Dict[str, FlowNode] = field(default_factory=dict)
    edges: List[FlowEdge] = field(default_factory=list)
    _outgoing: Dict[str, List[FlowEdge]] = field(default_factory=dict, init=False, repr=False)
    _in_degree: Dict[str, int] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        existing = list(self.edges)
        self.edges = []
        for edge in existing:
            self._register_edge(edge)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[FlowNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_node(
        self,
        node_id: str,
        *,
        label: Optional[str] = None,
        kind: Optional[NodeKind | str] = None,
    ) -> FlowNode:
        """Insert a node, or merge the given fields into an existing one."""
        node = self.nodes.get(node_id)
        if node is None:
            node = FlowNode(
                id=node_id,
                label=node_id if label is None else label,
                kind=NodeKind.coerce(kind) if kind is not None else NodeKind.PROCESS,
            )
            self.nodes[node_id] = node
            return node

        if label is not None:
            node.label = label
        if kind is not None:
            node.kind = NodeKind.coerce(kind)
        return node

    def add_edge(self, from_id: str, to_id: str, label: str = "") -> FlowEdge:
        edge = FlowEdge(from_id=from_id, to_id=to_id, label=label or "")
        self._register_edge(edge)
        return edge

    def _register_edge(self, edge: FlowEdge) -> None:
        self.edges.append(edge)
        self._outgoing.setdefault(edge.from_id, []).append(edge)
        self._in_degree[edge.to_id] = self._in_degree.get(edge.to_id, 0) + 1

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        return self.nodes.get(node_id)

    def successors(self, node_id: str) -> List[str]:
        """Target ids of the node's outgoing edges, in insertion order."""
        return [edge.to_id for edge in self._outgoing.get(node_id, [])]

    def outgoing(self, node_id: str) -> List[FlowEdge]:
        return list(self._outgoing.get(node_id, []))

    def in_degree(self, node_id: str) -> int:
        return self._in_degree.get(node_id, 0)

    def edge_data(self, from_id: str, to_id: str) -> Optional[FlowEdge]:
        """First edge from `from_id` to `to_id`, if any."""
        for edge in self._outgoing.get(from_id, []):
            if edge.to_id == to_id:
                return edge
        return None

    def edge_label(self, from_id: str, to_id: str) -> str:
        edge = self.edge_data(from_id, to_id)
        return edge.label if edge else ""

    def find_start(self) -> Optional[str]:
        """The unique node with in-degree 0, else the first declared node.

        Returns None only for an empty graph.
        """
        roots = [node_id for node_id in self.nodes if self.in_degree(node_id) == 0]
        if len(roots) == 1:
            return roots[0]
        return next(iter(self.nodes), None)

    # -------------------------------------------------------------------------
    # JSON interchange
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes.values()],
            "edges": [edge.to_dict() for edge in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlowGraph":
        if not isinstance(data, dict):
            raise FlowParseError("Graph document must be a JSON object")

        nodes_raw = data.get("nodes") or []
        edges_raw = data.get("edges") or []
        if not isinstance(nodes_raw, list) or not isinstance(edges_raw, list):
            raise FlowParseError(
                "Graph document 'nodes' and 'edges' must be lists",
                context={"nodes": type(nodes_raw).__name__, "edges": type(edges_raw).__name__},
            )

        graph = cls()
        used_ids: set[str] = set()

        for idx, node in enumerate(nodes_raw):
            if not isinstance(node, dict):
                continue
            raw_id = str(node.get("id") or f"n{idx + 1}")
            node_id = raw_id
            if node_id in used_ids:
                node_id = _unique_id(raw_id, used_ids)
            else:
                used_ids.add(node_id)

            label = node.get("text")
            if label is None:
                label = node.get("label")
            graph.add_node(
                node_id,
                label="" if label is None else str(label),
                kind=NodeKind.coerce(node.get("type")),
            )

        for edge in edges_raw:
            if not isinstance(edge, dict):
                continue
            source = edge.get("from") or edge.get("source")
            target = edge.get("to") or edge.get("target")
            if not source or not target:
                continue
            if str(source) not in graph or str(target) not in graph:
                continue
            graph.add_edge(str(source), str(target), str(edge.get("label") or ""))

        return graph
