import pytest

from crystal.components.gem_palette import GemPalette
from crystal.components.grid import Cell, Grid
from tests.helpers import grid_from_letters, letters_of


def test_from_colors_assigns_increasing_ids():
    grid = grid_from_letters(["RG", "B."])
    ids = [grid.get(0, 0).id, grid.get(0, 1).id, grid.get(1, 0).id]
    assert ids == sorted(ids)
    assert len(set(ids)) == 3
    assert grid.get(1, 1) is None
    assert grid.next_token_id == ids[-1] + 1


def test_swap_and_snapshot_restore():
    grid = grid_from_letters(["RG", "BO"])
    before = grid.snapshot()
    grid.swap((0, 0), (0, 1))
    assert letters_of(grid) == ["GR", "BO"]
    grid.restore(before)
    assert grid.snapshot() == before


def test_empty_positions_and_is_full():
    grid = grid_from_letters(["R.", ".G"])
    assert grid.empty_positions() == [(0, 1), (1, 0)]
    assert not grid.is_full()
    grid.set(0, 1, grid.spawn('blue'))
    grid.set(1, 0, grid.spawn('blue'))
    assert grid.is_full()


def test_cells_are_immutable_values():
    cell = Cell(color='red', id=7)
    with pytest.raises(AttributeError):
        cell.color = 'blue'  # type: ignore[misc]
    assert cell == Cell(color='red', id=7)


def test_ragged_cells_rejected():
    with pytest.raises(ValueError):
        Grid(rows=2, cols=2, cells=[[None, None], [None]])


def test_palette_dedupes_spawnable_and_defaults_to_every_color():
    colors = {'red': (1, 0, 0), 'blue': (0, 0, 1)}
    assert GemPalette(colors=dict(colors), spawnable=['blue', 'blue']).spawnable_colors() == ['blue']
    assert GemPalette(colors=dict(colors)).spawnable_colors() == ['red', 'blue']


def test_palette_rejects_unknown_spawnable_color():
    with pytest.raises(ValueError):
        GemPalette(colors={'red': (1, 0, 0)}, spawnable=['red', 'nope'])
