import pytest

from crystal.components.cascade_state import CascadePhase
from crystal.errors import InvalidRequest
from crystal.events.bus import (
    EVENT_BOARD_RESHUFFLED,
    EVENT_GAME_OVER,
    EVENT_NO_MOVES,
    EventBus,
)
from crystal.systems.cascade import CascadeEngine
from crystal.systems.level import DeadlockPolicy, LevelSystem
from crystal.systems.match import find_matches, find_valid_swaps, has_valid_move
from crystal.utils.board_state import get_grid, get_or_create_level_state
from crystal.world import create_world
from tests.helpers import grid_from_letters, install_grid, make_engine

# Diagonal stripes of three colors: no single swap can line up three.
STALEMATE = [
    "RBGRB",
    "BGRBG",
    "GRBGR",
    "RBGRB",
    "BGRBG",
]


def test_stalemate_pattern_has_no_valid_move():
    grid = grid_from_letters(STALEMATE)
    before = grid.snapshot()
    assert not find_matches(grid), "Setup should not contain initial matches"
    assert not has_valid_move(grid)
    assert find_valid_swaps(grid) == []
    # The brute-force search swaps back every pair it tries
    assert grid.snapshot() == before


def test_one_move_away_board_has_valid_move():
    grid = grid_from_letters(["RRG", "BGR", "GBB"])
    assert has_valid_move(grid)
    assert ((0, 2), (1, 2)) in find_valid_swaps(grid)


def test_engine_enters_no_moves_state_and_refuses_swaps():
    bus, world, engine = make_engine(STALEMATE, color_count=3)
    assert engine.phase is CascadePhase.NO_MOVES_PENDING
    assert engine.hint() is None
    before = get_grid(world).snapshot()
    with pytest.raises(InvalidRequest):
        engine.request_swap((0, 0), (0, 1))
    assert get_grid(world).snapshot() == before


def test_reshuffle_restores_playable_board():
    bus, world, engine = make_engine(STALEMATE, color_count=3)
    reshuffled = {}
    bus.subscribe(EVENT_BOARD_RESHUFFLED, lambda s, **k: reshuffled.update(k))
    old_ids = {cell.id for row in get_grid(world).cells for cell in row}

    new_tiles = engine.reshuffle(reason="test_stalemate")

    grid = get_grid(world)
    assert engine.phase is CascadePhase.IDLE
    assert len(new_tiles) == 25, "All tiles should be respawned"
    assert reshuffled['reason'] == "test_stalemate"
    assert reshuffled['attempts'] >= 1
    assert not find_matches(grid), "New board should start without matches"
    assert has_valid_move(grid), "New board should provide at least one valid move"
    assert old_ids.isdisjoint(cell.id for row in grid.cells for cell in row)


def test_level_system_reshuffles_a_board_that_started_dead():
    bus, world, engine = make_engine(STALEMATE, color_count=3)
    assert engine.phase is CascadePhase.NO_MOVES_PENDING
    reshuffles = []
    bus.subscribe(EVENT_BOARD_RESHUFFLED, lambda s, **k: reshuffles.append(k))

    LevelSystem(world, bus, deadlock_policy=DeadlockPolicy.RESHUFFLE)

    assert [k['reason'] for k in reshuffles] == ["no_moves"]
    assert engine.phase is CascadePhase.IDLE
    assert engine.has_valid_move()


def test_level_system_subscribed_first_reshuffles_on_engine_start():
    bus = EventBus()
    world = create_world(bus, rows=5, cols=5, color_count=3, seed=11)
    install_grid(world, grid_from_letters(STALEMATE))
    LevelSystem(world, bus, deadlock_policy=DeadlockPolicy.RESHUFFLE)
    reshuffles = []
    bus.subscribe(EVENT_BOARD_RESHUFFLED, lambda s, **k: reshuffles.append(k))

    engine = CascadeEngine(world, bus)

    assert [k['reason'] for k in reshuffles] == ["no_moves"]
    assert engine.phase is CascadePhase.IDLE
    assert engine.has_valid_move()


def test_end_game_policy_emits_game_over_for_a_dead_board():
    bus = EventBus()
    world = create_world(bus, rows=5, cols=5, color_count=3, seed=11)
    install_grid(world, grid_from_letters(STALEMATE))
    LevelSystem(world, bus, deadlock_policy=DeadlockPolicy.END_GAME)
    no_moves = []
    game_over = {}
    bus.subscribe(EVENT_NO_MOVES, lambda s, **k: no_moves.append(k))
    bus.subscribe(EVENT_GAME_OVER, lambda s, **k: game_over.update(k))

    engine = CascadeEngine(world, bus)

    assert no_moves == [{'reason': 'initial'}]
    assert game_over == {'score': 0, 'level': 1, 'reason': 'no_moves'}
    assert get_or_create_level_state(world).game_over
    assert engine.phase is CascadePhase.NO_MOVES_PENDING


def test_end_game_policy_applies_when_level_system_joins_late():
    bus, world, engine = make_engine(STALEMATE, color_count=3)
    game_over = {}
    bus.subscribe(EVENT_GAME_OVER, lambda s, **k: game_over.update(k))

    LevelSystem(world, bus, deadlock_policy=DeadlockPolicy.END_GAME)

    assert game_over['reason'] == 'no_moves'
    assert get_or_create_level_state(world).game_over
    assert engine.phase is CascadePhase.NO_MOVES_PENDING
