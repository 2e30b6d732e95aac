import pytest

from crystal.events.bus import EventBus, EVENT_BOARD_RESET
from crystal.systems.board_ops import new_grid
from crystal.systems.match import find_matches
from crystal.utils.board_state import get_grid, get_palette
from crystal.world import create_world


def test_initial_board_has_no_matches():
    bus = EventBus(); world = create_world(bus, rows=8, cols=8)
    grid = get_grid(world)
    assert grid.is_full()
    assert not find_matches(grid), 'Initial board should not contain any matches'


@pytest.mark.parametrize("seed", range(10))
def test_new_grid_satisfies_no_match_invariant(seed):
    grid = new_grid(8, 8, 6, seed)
    assert (grid.rows, grid.cols) == (8, 8)
    assert grid.is_full()
    assert find_matches(grid) == []


def test_three_color_board_still_has_no_matches():
    for seed in range(10):
        grid = new_grid(9, 7, 3, seed)
        assert find_matches(grid) == []
        assert {cell.color for row in grid.cells for cell in row} <= {'red', 'blue', 'green'}


def test_same_seed_gives_same_board():
    assert new_grid(6, 5, 5, 42).snapshot() == new_grid(6, 5, 5, 42).snapshot()


def test_create_world_uses_requested_palette():
    bus = EventBus()
    world = create_world(bus, rows=4, cols=5, color_count=4, seed=3)
    palette = get_palette(world)
    assert palette.spawnable_colors() == ['red', 'blue', 'green', 'orange']
    assert palette.rgb_for('red') == (231, 76, 60)
    colors = {cell.color for row in get_grid(world).cells for cell in row}
    assert colors <= set(palette.spawnable_colors())


def test_create_world_announces_board():
    bus = EventBus()
    resets = []
    bus.subscribe(EVENT_BOARD_RESET, lambda sender, **payload: resets.append(payload))
    create_world(bus, rows=3, cols=4, seed=1)
    assert resets == [{'rows': 3, 'cols': 4, 'new_game': True}]


@pytest.mark.parametrize("kwargs", [{'rows': 0}, {'cols': -1}, {'color_count': 2}, {'color_count': 7}])
def test_create_world_rejects_bad_configuration(kwargs):
    with pytest.raises(ValueError):
        create_world(EventBus(), **kwargs)
