"""Best-effort parser for the line-oriented flow notation.

A line is either a node declaration (``A["Read input"]``) or a transition
(``A -->|Ja| B{"x > 0"}``). Directives, comments and anything the parser
does not understand are skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..utils.logging import get_logger
from .model import FlowGraph, NodeKind

logger = get_logger(__name__)

ARROW_TOKEN = "-->"
DIRECTIVE_KEYWORDS = frozenset(
    {
        "graph",
        "flowchart",
        "subgraph",
        "end",
        "direction",
        "classDef",
        "class",
        "style",
        "linkStyle",
        "click",
    }
)
COMMENT_PREFIX = "%%"

# Longest openers first so "((" wins over "(" and "{{" over "{".
_SHAPES: Tuple[Tuple[str, str, NodeKind], ...] = (
    ("((", "))", NodeKind.LOOP),
    ("([", "])", NodeKind.TERMINAL),
    ("{{", "}}", NodeKind.JOIN),
    ("[", "]", NodeKind.PROCESS),
    ("{", "}", NodeKind.DECISION),
)
_NODE_REF_PATTERN = re.compile(r"^\s*(?P<id>\w+)\s*(?P<shape>\S.*?)?\s*$")


@dataclass
class NodeRef:
    """A node reference as written on one side of a transition."""

    id: str
    label: Optional[str] = None
    kind: Optional[NodeKind] = None

    @property
    def is_declaration(self) -> bool:
        return self.kind is not None


@dataclass
class ParseResult:
    graph: FlowGraph
    start: Optional[str]


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        return text[1:-1]
    return text


def parse_node_ref(text: str) -> Optional[NodeRef]:
    """Split ``id<shape>label<shape>`` into its parts.

    Returns None when the text does not start with an identifier.
    """
    match = _NODE_REF_PATTERN.match(text)
    if not match:
        return None

    node_id = match.group("id")
    shape = match.group("shape")
    if not shape:
        return NodeRef(id=node_id)

    for opener, closer, kind in _SHAPES:
        if shape.startswith(opener) and shape.endswith(closer) and len(shape) >= len(opener) + len(closer):
            label = _unquote(shape[len(opener) : len(shape) - len(closer)])
            if kind is NodeKind.JOIN:
                label = label.strip()
            return NodeRef(id=node_id, label=label, kind=kind)

    return NodeRef(id=node_id)


def _split_edge_label(text: str) -> Tuple[str, str]:
    """Strip a ``|label|`` prefix from the right-hand side of an arrow."""
    text = text.strip()
    if text.startswith("|"):
        end_pipe = text.find("|", 1)
        if end_pipe != -1:
            return text[1:end_pipe].strip(), text[end_pipe + 1 :].strip()
    return "", text


def _is_directive(line: str) -> bool:
    if line.startswith(COMMENT_PREFIX):
        return True
    return line.split(maxsplit=1)[0] in DIRECTIVE_KEYWORDS


def _register(graph: FlowGraph, ref: NodeRef) -> None:
    if ref.is_declaration:
        graph.add_node(ref.id, label=ref.label, kind=ref.kind)
    elif ref.id not in graph:
        graph.add_node(ref.id)


def parse_flow_text(content: str) -> ParseResult:
    """Parse flow notation into a graph and pick its start node."""
    graph = FlowGraph()

    for line_no, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip().rstrip(";")
        if not line or _is_directive(line):
            continue

        if ARROW_TOKEN not in line:
            ref = parse_node_ref(line)
            if ref is None:
                logger.debug("Skipping unrecognized line", extra={"line_no": line_no, "line": line})
                continue
            _register(graph, ref)
            continue

        parts = line.split(ARROW_TOKEN)
        refs: List[NodeRef] = []
        labels: List[str] = []
        for idx, part in enumerate(parts):
            label = ""
            if idx > 0:
                label, part = _split_edge_label(part)
            ref = parse_node_ref(part)
            if ref is None:
                refs = []
                break
            refs.append(ref)
            labels.append(label)

        if len(refs) < 2:
            logger.debug("Skipping malformed transition", extra={"line_no": line_no, "line": line})
            continue

        for ref in refs:
            _register(graph, ref)
        for left, right, label in zip(refs, refs[1:], labels[1:]):
            graph.add_edge(left.id, right.id, label)

    start = graph.find_start()
    logger.debug(
        "Parsed flow text",
        extra={"nodes": len(graph.nodes), "edges": len(graph.edges), "start": start},
    )
    return ParseResult(graph=graph, start=start)
