"""Flow graph <-> structured tree conversion."""

from .convergence import find_common_merge_node, find_merge_node
from .engine import MergeFallback, StructuringEngine, structure_graph
from .export import TreeToGraphBuilder, tree_to_graph
from .vocabulary import BranchVocabulary

__all__ = [
    "BranchVocabulary",
    "MergeFallback",
    "StructuringEngine",
    "TreeToGraphBuilder",
    "find_common_merge_node",
    "find_merge_node",
    "structure_graph",
    "tree_to_graph",
]
