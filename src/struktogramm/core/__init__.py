"""Structured tree models and exceptions."""

from .exceptions import (
    ConfigurationError,
    FlowParseError,
    NothingToStructureError,
    StructuringError,
    StruktogrammError,
    TreeValidationError,
)
from .tree import (
    Block,
    BlockType,
    CaseBlock,
    CaseBranch,
    DecisionBlock,
    LoopBlock,
    ProcessBlock,
    RootBlock,
    load_tree,
)

__all__ = [
    "ConfigurationError",
    "FlowParseError",
    "NothingToStructureError",
    "StructuringError",
    "StruktogrammError",
    "TreeValidationError",
    "Block",
    "BlockType",
    "CaseBlock",
    "CaseBranch",
    "DecisionBlock",
    "LoopBlock",
    "ProcessBlock",
    "RootBlock",
    "load_tree",
]
