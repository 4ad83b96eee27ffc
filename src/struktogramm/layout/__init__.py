"""Structured diagram layout."""

from .engine import (
    BlockGeometry,
    DiagramGeometry,
    LayoutEngine,
    LayoutMetrics,
    SequenceGeometry,
    layout_tree,
)

__all__ = [
    "BlockGeometry",
    "DiagramGeometry",
    "LayoutEngine",
    "LayoutMetrics",
    "SequenceGeometry",
    "layout_tree",
]
