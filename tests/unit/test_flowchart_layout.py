import pytest

from struktogramm.config.settings import Settings
from struktogramm.core.tree import (
    CaseBlock,
    CaseBranch,
    DecisionBlock,
    LoopBlock,
    ProcessBlock,
    RootBlock,
)
from struktogramm.layout.engine import LayoutEngine, LayoutMetrics, layout_tree


@pytest.fixture
def decision_tree():
    return RootBlock(
        children=[
            ProcessBlock(label="read x"),
            DecisionBlock(
                label="x > 0",
                yes=[ProcessBlock(label="a" * 20)],
                no=[ProcessBlock(label="dec"), ProcessBlock(label="log")],
            ),
        ]
    )


def test_minimum_widths(decision_tree):
    table = {}
    engine = LayoutEngine()
    decision = decision_tree.children[1]

    assert engine.block_min_width(decision, table) == 280
    assert table[id(decision.yes)] == 180
    assert table[id(decision.no)] == 100
    assert engine.block_min_width(ProcessBlock(label="x"), {}) == 100


def test_parent_minimum_width_covers_children(mixed_tree):
    table = {}
    engine = LayoutEngine()
    engine.sequence_min_width(mixed_tree.children, table)

    for block in mixed_tree.iter_blocks():
        if isinstance(block, DecisionBlock):
            assert table[id(block)] >= table[id(block.yes)] + table[id(block.no)]
            children = block.yes + block.no
        elif isinstance(block, LoopBlock):
            children = block.children
        elif isinstance(block, CaseBlock):
            assert table[id(block)] >= sum(table[id(branch)] for branch in block.branches)
            children = [child for branch in block.branches for child in branch.children]
        else:
            continue
        for child in children:
            assert table[id(block)] >= table[id(child)]


def test_branch_widths_follow_minimum_width_share(decision_tree):
    geometry = layout_tree(decision_tree, 800)
    decision = geometry.root.blocks[1]

    assert decision.yes_width == pytest.approx(800 * 180 / 280)
    assert decision.yes_width + decision.no_width == pytest.approx(800)
    assert decision.no.x == pytest.approx(decision.yes_width)


def test_side_by_side_branches_are_padded(decision_tree):
    geometry = layout_tree(decision_tree, 800)
    decision = geometry.root.blocks[1]

    assert decision.header_height == 60
    assert decision.yes.natural_height == 40
    assert decision.no.natural_height == 80
    assert decision.yes.height == decision.no.height == 80
    assert decision.yes.filler_height == 40
    assert decision.no.filler_height == 0
    assert decision.height == 140
    assert geometry.height == 180


def test_absolute_positions(decision_tree):
    geometry = layout_tree(decision_tree, 800)
    first, decision = geometry.root.blocks

    assert (first.x, first.y, first.height) == (0, 0, 40)
    assert decision.y == 40
    assert decision.yes.y == 100
    assert [block.y for block in decision.no.blocks] == [100, 140]


def test_zero_minimum_widths_split_evenly():
    metrics = LayoutMetrics(min_block_width=0, padding_x=0)
    tree = RootBlock(children=[DecisionBlock(label="", yes=[], no=[])])

    decision = layout_tree(tree, metrics=metrics).root.blocks[0]

    assert decision.yes_width == 400
    assert decision.no_width == 400


def test_loop_geometry():
    tree = RootBlock(
        children=[LoopBlock(label="while i < 3", children=[ProcessBlock(label="step")])]
    )
    loop = layout_tree(tree).root.blocks[0]

    assert loop.min_width == 130
    assert loop.header_height == 40
    assert loop.sidebar_width == 30
    assert loop.content_width == 770
    assert (loop.body.x, loop.body.y) == (30, 40)
    assert loop.body.blocks[0].width == 770
    assert loop.height == 80


def test_case_branch_widths_sum_to_block_width():
    tree = RootBlock(
        children=[
            CaseBlock(
                label="k",
                branches=[
                    CaseBranch(label="x", children=[ProcessBlock(label="one")]),
                    CaseBranch(label="y", children=[]),
                    CaseBranch(label="z", children=[ProcessBlock(label="three")]),
                ],
            )
        ]
    )
    case = layout_tree(tree, 900).root.blocks[0]

    widths = [branch.width for branch in case.branches]
    assert widths == pytest.approx([300, 300, 300])
    assert sum(widths) == 900
    assert [branch.label for branch in case.branches] == ["x", "y", "z"]
    assert [branch.x for branch in case.branches] == pytest.approx([0, 300, 600])
    assert case.branches[1].filler_height == 40


def test_case_branch_label_counts_towards_width():
    long_label = "b" * 30
    tree = RootBlock(
        children=[
            CaseBlock(
                label="k",
                branches=[CaseBranch(label="a"), CaseBranch(label=long_label)],
            )
        ]
    )
    case = tree.children[0]
    table = {}
    LayoutEngine().block_min_width(case, table)

    assert table[id(case.branches[1])] == 260
    assert table[id(case)] == 360


def test_diagram_width_floor_and_request(decision_tree):
    assert layout_tree(decision_tree, 200).width == 800
    assert layout_tree(decision_tree, 1200).width == 1200

    wide = RootBlock(children=[ProcessBlock(label="w" * 120)])
    geometry = layout_tree(wide)
    assert geometry.width == 980
    assert geometry.min_width == 980


def test_layout_does_not_mutate_tree(decision_tree):
    before = decision_tree.to_dict()
    layout_tree(decision_tree, 640)
    assert decision_tree.to_dict() == before


def test_geometry_to_dict(decision_tree):
    data = layout_tree(decision_tree).to_dict()

    assert set(data) == {"width", "height", "min_width", "root"}
    assert data["root"]["blocks"][1]["type"] == "decision"
    assert data["root"]["blocks"][1]["yes"]["blocks"][0]["label"] == "a" * 20


def test_empty_tree():
    geometry = layout_tree(RootBlock())
    assert geometry.height == 0
    assert geometry.root.blocks == []
    assert geometry.min_width == 100


def test_long_labels_wrap():
    metrics = LayoutMetrics()
    assert metrics.line_count("a" * 200, 800) == 3
    assert metrics.text_height("a" * 200, 800) == 80


def test_metrics_from_settings():
    engine = LayoutEngine.from_settings(Settings(padding_x=5, min_diagram_width=600))
    assert engine.metrics.padding_x == 5
    assert engine.layout(RootBlock()).width == 600


@pytest.mark.parametrize("width", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_width_falls_back_to_minimum(decision_tree, width):
    geometry = layout_tree(decision_tree, width)
    decision = geometry.root.blocks[1]

    assert geometry.width == 800
    assert decision.yes_width + decision.no_width == pytest.approx(800)
