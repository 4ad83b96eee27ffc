"""Structured block tree (Nassi-Shneiderman diagram document).

This module defines the nested block model:
- ProcessBlock: a single statement (also command, exit, subprogram)
- DecisionBlock: if/else with a yes and a no sequence
- LoopBlock: loop head with a body sequence (also for/while/repeat loops)
- CaseBlock: N-way branch, one CaseBranch per outcome
- RootBlock: the outermost sequence

The JSON form uses the field names `type`, `label`, `yes`, `no`,
`children` and `branches`, and `type` discriminates the variants.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Literal, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import TreeValidationError


class BlockType(str, Enum):
    """Block types accepted in tree documents."""
    PROCESS = "process"
    COMMAND = "command"
    EXIT = "exit"
    SUBPROGRAM = "subprogram"
    DECISION = "decision"
    LOOP = "loop"
    FOR_LOOP = "for_loop"
    WHILE_LOOP = "while_loop"
    REPEAT_LOOP = "repeat_loop"
    CASE = "case"
    ROOT = "root"


PROCESS_TYPES = frozenset({"process", "command", "exit", "subprogram"})
LOOP_TYPES = frozenset({"loop", "for_loop", "while_loop", "repeat_loop"})


class BlockBase(BaseModel):
    """Base class for all blocks."""
    label: str = ""

    model_config = {"extra": "ignore"}


class ProcessBlock(BlockBase):
    """A single statement.

    Examples:
        ProcessBlock(label="x = x + 1")
        ProcessBlock(type="subprogram", label="sort(items)")
    """
    type: Literal["process", "command", "exit", "subprogram"] = "process"


class DecisionBlock(BlockBase):
    """Binary branch. `yes` is rendered left of `no`."""
    type: Literal["decision"] = "decision"
    yes: List["Block"] = Field(default_factory=list)
    no: List["Block"] = Field(default_factory=list)


class LoopBlock(BlockBase):
    """Loop head whose body runs before the head is tested again."""
    type: Literal["loop", "for_loop", "while_loop", "repeat_loop"] = "loop"
    children: List["Block"] = Field(default_factory=list)


class CaseBranch(BaseModel):
    """One outcome of a case block."""
    label: str = ""
    children: List["Block"] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class CaseBlock(BlockBase):
    """N-way branch with at least two ordered branches."""
    type: Literal["case"] = "case"
    branches: List[CaseBranch]

    @field_validator("branches")
    @classmethod
    def validate_branch_count(cls, v: List[CaseBranch]) -> List[CaseBranch]:
        if len(v) < 2:
            raise ValueError("case block needs at least two branches")
        return v


Block = Annotated[
    Union[ProcessBlock, DecisionBlock, LoopBlock, CaseBlock],
    Field(discriminator="type"),
]


class RootBlock(BaseModel):
    """The outermost sequence of a diagram."""
    type: Literal["root"] = "root"
    children: List[Block] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def iter_blocks(self) -> Iterator[Union[ProcessBlock, DecisionBlock, LoopBlock, CaseBlock]]:
        """Depth-first, pre-order walk over every block in the tree."""
        return _iter_sequence(self.children)


for _model in (DecisionBlock, LoopBlock, CaseBranch, CaseBlock, RootBlock):
    _model.model_rebuild()


def _iter_sequence(blocks: List[Any]) -> Iterator[Any]:
    for block in blocks:
        yield block
        if isinstance(block, DecisionBlock):
            yield from _iter_sequence(block.yes)
            yield from _iter_sequence(block.no)
        elif isinstance(block, LoopBlock):
            yield from _iter_sequence(block.children)
        elif isinstance(block, CaseBlock):
            for branch in block.branches:
                yield from _iter_sequence(branch.children)


def is_tree_document(data: Any) -> bool:
    return isinstance(data, dict) and data.get("type") == "root" and isinstance(data.get("children"), list)


def load_tree(data: Any) -> RootBlock:
    """Validate a tree document, raising TreeValidationError on bad input."""
    try:
        return RootBlock.model_validate(data)
    except ValidationError as exc:
        raise TreeValidationError(
            "Invalid structured tree document",
            context={"errors": exc.errors(include_url=False, include_context=False)},
        ) from exc
