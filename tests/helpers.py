from __future__ import annotations

from typing import Sequence

from esper import World

from crystal.components.board import Board
from crystal.components.grid import Grid
from crystal.events.bus import EventBus
from crystal.systems.cascade import CascadeEngine
from crystal.utils.board_state import get_board_entity
from crystal.world import create_world

LETTER_COLORS = {
    'R': 'red',
    'B': 'blue',
    'G': 'green',
    'O': 'orange',
    'P': 'purple',
    'T': 'teal',
    '.': None,
}


def grid_from_letters(rows: Sequence[str]) -> Grid:
    """Build a Grid from strings such as ``"RRG"``; ``.`` marks an empty cell."""

    return Grid.from_colors([[LETTER_COLORS[ch] for ch in row] for row in rows])


def letters_of(grid: Grid) -> list[str]:
    names = {color: letter for letter, color in LETTER_COLORS.items()}
    return ["".join(names[color] for color in row) for row in grid.color_rows()]


def install_grid(world: World, grid: Grid) -> Grid:
    """Replace the world's board with the given grid."""

    board_entity = get_board_entity(world)
    board = world.component_for_entity(board_entity, Board)
    board.rows = grid.rows
    board.cols = grid.cols
    world.add_component(board_entity, grid)
    return grid


def make_engine(
    rows: Sequence[str],
    *,
    color_count: int = 6,
    seed: int = 1234,
) -> tuple[EventBus, World, CascadeEngine]:
    """Create a bus, a world holding the lettered grid, and a CascadeEngine over it."""

    grid = grid_from_letters(rows)
    bus = EventBus()
    world = create_world(bus, rows=grid.rows, cols=grid.cols, color_count=color_count, seed=seed)
    install_grid(world, grid)
    engine = CascadeEngine(world, bus)
    return bus, world, engine


def completes_filled_run(color_rows: Sequence[Sequence[object]], row: int, col: int) -> bool:
    """True when (row, col) lines up three with the two cells to its left or the two below it."""

    color = color_rows[row][col]
    left = col >= 2 and color_rows[row][col - 1] == color_rows[row][col - 2] == color
    below = row + 2 < len(color_rows) and color_rows[row + 1][col] == color_rows[row + 2][col] == color
    return left or below
