"""Recover a structured block tree from an unstructured flow graph."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Sequence

from ..core.exceptions import StructuringError
from ..core.tree import Block, CaseBlock, CaseBranch, DecisionBlock, LoopBlock, ProcessBlock, RootBlock
from ..flowchart.model import FlowGraph, FlowNode, NodeKind
from ..utils.logging import get_logger
from .convergence import DEFAULT_MERGE_SEARCH_LIMIT, find_common_merge_node, find_merge_node
from .vocabulary import BranchVocabulary

if TYPE_CHECKING:
    from ..config.settings import Settings

logger = get_logger(__name__)

_ROUTING_KINDS = (NodeKind.START, NodeKind.END, NodeKind.JOIN)
_LOOP_KINDS = (NodeKind.LOOP, NodeKind.TERMINAL)


class MergeFallback(str, Enum):
    """What to do with a branch set whose branches never converge."""
    KEEP_BRANCHES = "keep_branches"
    FIRST_BRANCH = "first_branch"
    RAISE = "raise"


class StructuringEngine:
    """Walks a flow graph and emits structured blocks.

    The walk starts at an entry node and consumes nodes until it reaches the
    stop node or a node it has already seen on the current path. Branches
    are bounded by their merge node and structured recursively, each with its
    own copy of the visited set.
    """

    def __init__(
        self,
        *,
        vocabulary: Optional[BranchVocabulary] = None,
        merge_search_limit: int = DEFAULT_MERGE_SEARCH_LIMIT,
        merge_fallback: MergeFallback | str = MergeFallback.KEEP_BRANCHES,
    ):
        self.vocabulary = vocabulary or BranchVocabulary()
        self.merge_search_limit = merge_search_limit
        self.merge_fallback = MergeFallback(merge_fallback)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "StructuringEngine":
        return cls(
            vocabulary=BranchVocabulary.from_settings(settings),
            merge_search_limit=settings.merge_search_limit,
            merge_fallback=settings.merge_fallback,
        )

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def structure(
        self,
        graph: FlowGraph,
        entry: Optional[str],
        stop: Optional[str] = None,
    ) -> Optional[RootBlock]:
        """Structure the whole graph. Returns None when there is no entry."""
        if entry is None or entry not in graph:
            logger.info("Nothing to structure", extra={"entry": entry})
            return None
        return RootBlock(children=self.build(graph, entry, stop, frozenset()))

    def build(
        self,
        graph: FlowGraph,
        entry: Optional[str],
        stop: Optional[str],
        visited: FrozenSet[str],
    ) -> List[Block]:
        blocks: List[Block] = []
        seen = set(visited)
        current = entry

        while current is not None and current != stop:
            if current in seen:
                logger.debug("Cycle guard stopped walk", extra={"node": current})
                break
            seen.add(current)

            node = graph.get_node(current)
            if node is None:
                break
            successors = graph.successors(current)

            if self._is_routing(node):
                if len(successors) > 1:
                    # Branching routing node: structure it under its id.
                    node = FlowNode(id=node.id, label=node.label or node.id, kind=node.kind)
                else:
                    logger.debug("Skipping routing node", extra={"node": current})
                    current = successors[0] if successors else None
                    continue

            if not successors:
                blocks.append(ProcessBlock(label=node.label))
                current = None
            elif len(successors) == 1:
                if node.kind is NodeKind.LOOP:
                    body = self.build(graph, successors[0], current, frozenset(seen))
                    blocks.append(LoopBlock(label=node.label, children=body))
                    current = None
                else:
                    blocks.append(ProcessBlock(label=node.label))
                    current = successors[0]
            elif len(successors) == 2 and node.kind in _LOOP_KINDS:
                current = self._build_loop(graph, node, successors, seen, blocks)
            elif (
                len(successors) == 2
                and node.kind is not NodeKind.CASE
                and self.vocabulary.is_binary(graph.edge_label(current, successors[0]))
            ):
                current = self._build_decision(graph, node, successors, stop, seen, blocks)
            else:
                current = self._build_case(graph, node, successors, stop, seen, blocks)

        return blocks

    # -------------------------------------------------------------------------
    # Block recognizers
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_routing(node: FlowNode) -> bool:
        return node.kind in _ROUTING_KINDS or not node.label.strip()

    def _build_loop(
        self,
        graph: FlowGraph,
        node: FlowNode,
        successors: Sequence[str],
        seen: set[str],
        blocks: List[Block],
    ) -> Optional[str]:
        first, second = successors
        if self.vocabulary.is_exit(graph.edge_label(node.id, first)):
            exit_node, body_start = first, second
        else:
            body_start, exit_node = first, second

        body = self.build(graph, body_start, node.id, frozenset(seen))
        blocks.append(LoopBlock(label=node.label, children=body))
        logger.debug("Recognized loop", extra={"node": node.id, "exit": exit_node})
        return exit_node

    def _build_decision(
        self,
        graph: FlowGraph,
        node: FlowNode,
        successors: Sequence[str],
        stop: Optional[str],
        seen: set[str],
        blocks: List[Block],
    ) -> Optional[str]:
        first, second = successors
        if self.vocabulary.is_affirmative(graph.edge_label(node.id, first)):
            yes_node, no_node = first, second
        else:
            yes_node, no_node = second, first

        merge = find_merge_node(
            graph, yes_node, no_node, node.id, max_steps=self.merge_search_limit
        )
        if merge is None:
            return self._handle_no_merge(
                graph, node, successors, stop, seen, blocks, binary=(yes_node, no_node)
            )

        yes = self.build(graph, yes_node, merge, frozenset(seen))
        no = self.build(graph, no_node, merge, frozenset(seen))
        blocks.append(DecisionBlock(label=node.label, yes=yes, no=no))
        logger.debug("Recognized decision", extra={"node": node.id, "merge": merge})
        return merge

    def _build_case(
        self,
        graph: FlowGraph,
        node: FlowNode,
        successors: Sequence[str],
        stop: Optional[str],
        seen: set[str],
        blocks: List[Block],
    ) -> Optional[str]:
        merge = find_common_merge_node(
            graph, successors, node.id, max_steps=self.merge_search_limit
        )
        if merge is None:
            return self._handle_no_merge(graph, node, successors, stop, seen, blocks)

        blocks.append(self._case_block(graph, node, successors, merge, seen))
        logger.debug(
            "Recognized case",
            extra={"node": node.id, "merge": merge, "branches": len(successors)},
        )
        return merge

    def _case_block(
        self,
        graph: FlowGraph,
        node: FlowNode,
        successors: Sequence[str],
        stop: Optional[str],
        seen: set[str],
    ) -> CaseBlock:
        branches = [
            CaseBranch(
                label=graph.edge_label(node.id, succ),
                children=self.build(graph, succ, stop, frozenset(seen)),
            )
            for succ in successors
        ]
        return CaseBlock(label=node.label, branches=branches)

    def _handle_no_merge(
        self,
        graph: FlowGraph,
        node: FlowNode,
        successors: Sequence[str],
        stop: Optional[str],
        seen: set[str],
        blocks: List[Block],
        *,
        binary: Optional[tuple[str, str]] = None,
    ) -> Optional[str]:
        context = {"node": node.id, "successors": list(successors), "policy": self.merge_fallback.value}

        if self.merge_fallback is MergeFallback.RAISE:
            raise StructuringError("Branches never converge", context=context)

        if self.merge_fallback is MergeFallback.FIRST_BRANCH:
            logger.warning(
                "No merge node; keeping only the first branch",
                extra={**context, "dropped": list(successors[1:])},
            )
            blocks.append(ProcessBlock(label=node.label))
            return successors[0]

        logger.warning("No merge node; structuring branches without a join", extra=context)
        if binary is not None:
            yes_node, no_node = binary
            blocks.append(
                DecisionBlock(
                    label=node.label,
                    yes=self.build(graph, yes_node, stop, frozenset(seen)),
                    no=self.build(graph, no_node, stop, frozenset(seen)),
                )
            )
        else:
            blocks.append(self._case_block(graph, node, successors, stop, seen))
        return None


def structure_graph(
    graph: FlowGraph,
    entry: Optional[str],
    stop: Optional[str] = None,
    *,
    engine: Optional[StructuringEngine] = None,
) -> Optional[RootBlock]:
    """Module-level convenience wrapper around `StructuringEngine.structure`."""
    return (engine or StructuringEngine()).structure(graph, entry, stop)
