"""Merge-point search between divergent branches."""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional, Sequence, Set

from ..utils.logging import get_logger
from ..flowchart.model import FlowGraph

logger = get_logger(__name__)

DEFAULT_MERGE_SEARCH_LIMIT = 1000


def find_merge_node(
    graph: FlowGraph,
    node_a: Optional[str],
    node_b: Optional[str],
    forbidden: Optional[str] = None,
    *,
    max_steps: int = DEFAULT_MERGE_SEARCH_LIMIT,
) -> Optional[str]:
    """Find the first node reachable from both `node_a` and `node_b`.

    Two breadth-first frontiers advance alternately, one dequeue each. The
    first node dequeued by one frontier that the other has already visited
    is the merge node. Edges into `forbidden` are never followed. Gives up
    and returns None after `max_steps` dequeues in total.
    """
    if node_a is None or node_b is None:
        return None

    queue_a: Deque[str] = deque([node_a])
    queue_b: Deque[str] = deque([node_b])
    visited_a: Set[str] = set()
    visited_b: Set[str] = set()
    steps = 0

    def advance(queue: Deque[str], own: Set[str], other: Set[str]) -> Optional[str]:
        node = queue.popleft()
        if node in other:
            return node
        if node not in own:
            own.add(node)
            for succ in graph.successors(node):
                if succ != forbidden:
                    queue.append(succ)
        return None

    while queue_a or queue_b:
        if queue_a:
            if steps >= max_steps:
                break
            steps += 1
            found = advance(queue_a, visited_a, visited_b)
            if found is not None:
                return found
        if queue_b:
            if steps >= max_steps:
                break
            steps += 1
            found = advance(queue_b, visited_b, visited_a)
            if found is not None:
                return found
    else:
        return None

    logger.warning(
        "Merge search exhausted its step budget",
        extra={"node_a": node_a, "node_b": node_b, "forbidden": forbidden, "max_steps": max_steps},
    )
    return None


def find_common_merge_node(
    graph: FlowGraph,
    nodes: Sequence[str],
    forbidden: Optional[str] = None,
    *,
    max_steps: int = DEFAULT_MERGE_SEARCH_LIMIT,
) -> Optional[str]:
    """Fold `find_merge_node` pairwise over `nodes`."""
    if len(nodes) < 2:
        return None
    merge = find_merge_node(graph, nodes[0], nodes[1], forbidden, max_steps=max_steps)
    for node in nodes[2:]:
        if merge is None:
            break
        merge = find_merge_node(graph, merge, node, forbidden, max_steps=max_steps)
    return merge
