"""Structured diagram layout.

Two passes over a structured tree:

1. Bottom-up minimum widths. Every block needs room for its label; a
   decision needs room for both branches side by side, a case for all of its
   branches, a loop for its body plus the sidebar.
2. Top-down widths and heights for a given diagram width. Branch widths are
   apportioned by each branch's share of the minimum width, so wordy
   branches get more room. Side-by-side branches are padded to a common
   height so the diagram is fully rectangular.

The tree is never mutated; pass 1 results live in a side table keyed by
object identity for the duration of one layout call.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from ..core.tree import CaseBlock, DecisionBlock, LoopBlock, RootBlock

if TYPE_CHECKING:
    from ..config.settings import Settings


@dataclass(frozen=True)
class LayoutMetrics:
    """Text metrics and block size constants, in pixels."""

    char_width_avg: float = 8
    line_height: float = 20
    padding_x: float = 10
    padding_y: float = 10
    min_block_width: float = 100
    min_block_height: float = 40
    header_min_height: float = 40
    header_margin: float = 20
    loop_header_min_height: float = 30
    loop_sidebar_width: float = 30
    min_diagram_width: float = 800

    @classmethod
    def from_settings(cls, settings: "Settings") -> "LayoutMetrics":
        return cls(**{name: getattr(settings, name) for name in cls.__dataclass_fields__})

    def text_width(self, label: str) -> float:
        return len(label or "") * self.char_width_avg + self.padding_x * 2

    def line_count(self, label: str, width: float) -> int:
        text_len = len(label or "") * self.char_width_avg
        return math.ceil(text_len / max(1.0, width - self.padding_x * 2))

    def text_height(self, label: str, width: float) -> float:
        return self.line_count(label, width) * self.line_height + self.padding_y * 2


@dataclass
class SequenceGeometry:
    """A vertical run of blocks (diagram body, branch or loop body)."""

    x: float
    y: float
    width: float
    min_width: float
    natural_height: float
    height: float
    blocks: List["BlockGeometry"] = field(default_factory=list)
    label: Optional[str] = None
    filler_height: float = 0.0


@dataclass
class BlockGeometry:
    type: str
    label: str
    x: float
    y: float
    min_width: float
    width: float
    height: float
    header_height: Optional[float] = None
    content_height: Optional[float] = None
    yes: Optional[SequenceGeometry] = None
    no: Optional[SequenceGeometry] = None
    yes_width: Optional[float] = None
    no_width: Optional[float] = None
    branches: List[SequenceGeometry] = field(default_factory=list)
    body: Optional[SequenceGeometry] = None
    sidebar_width: Optional[float] = None
    content_width: Optional[float] = None


@dataclass
class DiagramGeometry:
    width: float
    height: float
    min_width: float
    root: SequenceGeometry

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _split_widths(width: float, min_widths: Sequence[float]) -> List[float]:
    """Apportion `width` by each entry's share of the summed minimum widths."""
    total = sum(min_widths)
    ratios = [w / total if total else math.nan for w in min_widths]
    if not all(math.isfinite(r) for r in ratios):
        ratios = [1.0 / len(min_widths)] * len(min_widths)
    widths = [width * r for r in ratios[:-1]]
    widths.append(width - sum(widths))
    return widths


class LayoutEngine:
    def __init__(self, metrics: Optional[LayoutMetrics] = None):
        self.metrics = metrics or LayoutMetrics()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "LayoutEngine":
        return cls(LayoutMetrics.from_settings(settings))

    def layout(self, tree: RootBlock, width: Optional[float] = None) -> DiagramGeometry:
        min_widths: Dict[int, float] = {}
        root_min = self.sequence_min_width(tree.children, min_widths)
        requested = width if width is not None and math.isfinite(width) else 0
        diagram_width = max(requested, self.metrics.min_diagram_width, root_min)
        root = self._layout_sequence(tree.children, 0.0, 0.0, diagram_width, min_widths)
        return DiagramGeometry(
            width=diagram_width,
            height=root.height,
            min_width=root_min,
            root=root,
        )

    # -------------------------------------------------------------------------
    # Pass 1: minimum widths
    # -------------------------------------------------------------------------

    def sequence_min_width(self, blocks: Sequence[Any], table: Dict[int, float]) -> float:
        """Widest child, never below the block floor (also for empty runs)."""
        widest = self.metrics.min_block_width
        for block in blocks:
            widest = max(widest, self.block_min_width(block, table))
        return widest

    def block_min_width(self, block: Any, table: Dict[int, float]) -> float:
        m = self.metrics
        text_width = m.text_width(block.label)

        if isinstance(block, DecisionBlock):
            yes = self.sequence_min_width(block.yes, table)
            no = self.sequence_min_width(block.no, table)
            table[id(block.yes)] = yes
            table[id(block.no)] = no
            result = max(yes + no, text_width)
        elif isinstance(block, CaseBlock):
            total = 0.0
            for branch in block.branches:
                branch_min = max(
                    self.sequence_min_width(branch.children, table),
                    m.text_width(branch.label),
                )
                table[id(branch)] = branch_min
                total += branch_min
            result = max(total, text_width)
        elif isinstance(block, LoopBlock):
            body = self.sequence_min_width(block.children, table)
            result = max(text_width, body + m.loop_sidebar_width)
        else:
            result = max(text_width, m.min_block_width)

        table[id(block)] = result
        return result

    # -------------------------------------------------------------------------
    # Pass 2: widths, heights and positions
    # -------------------------------------------------------------------------

    def _layout_sequence(
        self,
        blocks: Sequence[Any],
        x: float,
        y: float,
        width: float,
        table: Dict[int, float],
        *,
        label: Optional[str] = None,
        min_width: Optional[float] = None,
    ) -> SequenceGeometry:
        placed: List[BlockGeometry] = []
        cursor = y
        for block in blocks:
            geometry = self._layout_block(block, x, cursor, width, table)
            placed.append(geometry)
            cursor += geometry.height

        natural = cursor - y
        if min_width is None:
            min_width = max(
                [self.metrics.min_block_width] + [table[id(block)] for block in blocks]
            )
        return SequenceGeometry(
            x=x,
            y=y,
            width=width,
            min_width=min_width,
            natural_height=natural,
            height=natural,
            blocks=placed,
            label=label,
        )

    def _layout_block(
        self,
        block: Any,
        x: float,
        y: float,
        width: float,
        table: Dict[int, float],
    ) -> BlockGeometry:
        m = self.metrics
        text_height = m.text_height(block.label, width)
        geometry = BlockGeometry(
            type=block.type,
            label=block.label,
            x=x,
            y=y,
            min_width=table[id(block)],
            width=width,
            height=0.0,
        )

        if isinstance(block, DecisionBlock):
            header = max(m.header_min_height, text_height + m.header_margin)
            yes_width, no_width = _split_widths(width, [table[id(block.yes)], table[id(block.no)]])
            yes = self._layout_sequence(
                block.yes, x, y + header, yes_width, table, min_width=table[id(block.yes)]
            )
            no = self._layout_sequence(
                block.no, x + yes_width, y + header, no_width, table, min_width=table[id(block.no)]
            )
            content = _pad_to_common_height([yes, no])
            geometry.header_height = header
            geometry.content_height = content
            geometry.yes = yes
            geometry.no = no
            geometry.yes_width = yes_width
            geometry.no_width = no_width
            geometry.height = header + content
        elif isinstance(block, CaseBlock):
            header = max(m.header_min_height, text_height + m.header_margin)
            branch_mins = [table[id(branch)] for branch in block.branches]
            cursor_x = x
            for branch, branch_width, branch_min in zip(
                block.branches, _split_widths(width, branch_mins), branch_mins
            ):
                geometry.branches.append(
                    self._layout_sequence(
                        branch.children,
                        cursor_x,
                        y + header,
                        branch_width,
                        table,
                        label=branch.label,
                        min_width=branch_min,
                    )
                )
                cursor_x += branch_width
            content = _pad_to_common_height(geometry.branches)
            geometry.header_height = header
            geometry.content_height = content
            geometry.height = header + content
        elif isinstance(block, LoopBlock):
            header = max(m.loop_header_min_height, text_height)
            sidebar = m.loop_sidebar_width
            content_width = max(0.0, width - sidebar)
            body = self._layout_sequence(block.children, x + sidebar, y + header, content_width, table)
            geometry.header_height = header
            geometry.content_height = body.height
            geometry.body = body
            geometry.sidebar_width = sidebar
            geometry.content_width = content_width
            geometry.height = header + body.height
        else:
            geometry.height = max(m.min_block_height, text_height)

        return geometry


def _pad_to_common_height(sequences: Sequence[SequenceGeometry]) -> float:
    """Stretch side-by-side sequences to the tallest one; returns that height."""
    content = max((seq.natural_height for seq in sequences), default=0.0)
    for seq in sequences:
        seq.height = content
        seq.filler_height = content - seq.natural_height
    return content


def layout_tree(
    tree: RootBlock,
    width: Optional[float] = None,
    *,
    metrics: Optional[LayoutMetrics] = None,
) -> DiagramGeometry:
    """Compute the geometry of `tree` for a diagram at least `width` wide."""
    return LayoutEngine(metrics).layout(tree, width)
