from models import Block, Piece
from render import render_result
from solver.history import History
from solver.orchestrator import BlockResult


def _result():
    h = History(Piece(1, 1)).extend_real(Piece(1, 1)).extend_real(Piece(1, 1))
    h = h.extend_added(Piece(2, 1)).extend_real(Piece(2, 2))
    return BlockResult(Block((2, 2, 2)), h)


def test_every_slice_is_drawn():
    svg, legend = render_result(_result())
    assert svg.startswith("<svg")
    assert svg.count("<rect") == 4
    assert "#2 2x1 (added)" in svg
    assert svg.count("stroke-dasharray") == 1


def test_legend_lists_each_label_once():
    _, legend = render_result(_result())
    assert legend.count("<li>") == 3
    for label in ("1x1", "2x1", "2x2"):
        assert label in legend


def test_colors_are_stable_between_calls():
    assert render_result(_result()) == render_result(_result())


def test_long_history_wraps_rows():
    h = History(Piece(40, 1))
    for _ in range(30):
        h = h.extend_real(Piece(40, 1))
    svg, _ = render_result(BlockResult(Block((40, 30, 1)), h))
    height = int(svg.split('height="')[1].split('"')[0])
    width = int(svg.split('width="')[1].split('"')[0])
    assert width <= 740
    assert height > 20
