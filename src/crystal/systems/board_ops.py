from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from crystal.components.gravity_move import GravityMove
from crystal.components.grid import ColorId, Grid, Position
from crystal.constants import (
    DEFAULT_COLOR_COUNT,
    GEM_COLORS,
    MAX_RESHUFFLE_ATTEMPTS,
    MIN_COLOR_COUNT,
    MIN_MATCH_LENGTH,
)
from crystal.errors import InconsistentGrid
from crystal.systems.match import find_matches, has_valid_move

logger = logging.getLogger(__name__)


def default_colors(color_count: int = DEFAULT_COLOR_COUNT) -> List[ColorId]:
    palette = list(GEM_COLORS.keys())
    if not MIN_COLOR_COUNT <= color_count <= len(palette):
        raise ValueError(
            f"color_count must be between {MIN_COLOR_COUNT} and {len(palette)}, got {color_count}"
        )
    return palette[:color_count]


def _run_length(grid: Grid, row: int, col: int, d_row: int, d_col: int, color: ColorId) -> int:
    count = 0
    r, c = row + d_row, col + d_col
    while grid.in_bounds(r, c) and grid.color_at(r, c) == color:
        count += 1
        r += d_row
        c += d_col
    return count


def would_create_match(grid: Grid, row: int, col: int, color: ColorId) -> bool:
    """Return True if placing color at (row, col) completes a run with placed neighbours.

    Empty cells count as not yet placed and never extend a run.
    """
    horizontal = 1 + _run_length(grid, row, col, 0, -1, color) + _run_length(grid, row, col, 0, 1, color)
    if horizontal >= MIN_MATCH_LENGTH:
        return True
    vertical = 1 + _run_length(grid, row, col, -1, 0, color) + _run_length(grid, row, col, 1, 0, color)
    return vertical >= MIN_MATCH_LENGTH


def _completes_trailing_run(grid: Grid, row: int, col: int, color: ColorId, d_row: int) -> bool:
    # The two cells to the left and the two already filled in the column (d_row -1 above, +1 below).
    return (
        _run_length(grid, row, col, 0, -1, color) >= MIN_MATCH_LENGTH - 1
        or _run_length(grid, row, col, d_row, 0, color) >= MIN_MATCH_LENGTH - 1
    )


def pick_color(
    grid: Grid,
    row: int,
    col: int,
    colors: Sequence[ColorId],
    rng: random.Random,
    *,
    fill_upward: bool = False,
) -> ColorId:
    """Choose a color for (row, col) that does not complete a triple.

    Uniform over the colors that stay clear of every placed neighbour. When
    neighbours on opposite sides rule out the whole palette, only the cells
    the fill has already passed are honoured: the left neighbours plus the
    ones above (top-down fill) or below (``fill_upward``). With three or more
    colors that always leaves a choice.
    """
    if len(colors) < MIN_COLOR_COUNT:
        raise ValueError(f"need at least {MIN_COLOR_COUNT} colors to avoid matches, got {len(colors)}")
    available = [color for color in colors if not would_create_match(grid, row, col, color)]
    if not available:
        d_row = 1 if fill_upward else -1
        available = [color for color in colors if not _completes_trailing_run(grid, row, col, color, d_row)]
    if not available:
        logger.error("No color fits at %s with palette %s", (row, col), list(colors))
        raise InconsistentGrid(f"no color can be placed at {(row, col)}")
    return rng.choice(available)


def fill_grid(grid: Grid, colors: Sequence[ColorId], rng: random.Random) -> List[Position]:
    """Replace every cell with a fresh token in row-major order, top row first."""
    spawned: List[Position] = []
    for row in range(grid.rows):
        for col in range(grid.cols):
            grid.set(row, col, None)
    for row in range(grid.rows):
        for col in range(grid.cols):
            grid.set(row, col, grid.spawn(pick_color(grid, row, col, colors, rng)))
            spawned.append((row, col))
    return spawned


def new_grid(
    width: int,
    height: int,
    color_count: int = DEFAULT_COLOR_COUNT,
    rng_seed: Optional[int] = None,
    *,
    colors: Optional[Sequence[ColorId]] = None,
    rng: Optional[random.Random] = None,
) -> Grid:
    """Create a width x height grid with no pre-existing matches."""
    if width < 1 or height < 1:
        raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
    palette = list(colors) if colors is not None else default_colors(color_count)
    if rng is None:
        rng = random.Random(rng_seed)
    grid = Grid(rows=height, cols=width)
    fill_grid(grid, palette, rng)
    return grid


def apply_gravity(grid: Grid) -> List[GravityMove]:
    """Compact each column downward, keeping the order and ids of surviving tokens."""
    moves: List[GravityMove] = []
    for col in range(grid.cols):
        write_row = grid.rows - 1
        for row in range(grid.rows - 1, -1, -1):
            cell = grid.get(row, col)
            if cell is None:
                continue
            if row != write_row:
                grid.set(write_row, col, cell)
                grid.set(row, col, None)
                moves.append(GravityMove(source=(row, col), target=(write_row, col), token_id=cell.id))
            write_row -= 1
    return moves


def refill(grid: Grid, colors: Sequence[ColorId], rng: random.Random) -> List[Position]:
    """Fill empty cells with fresh tokens, bottom-most empty slot of each column first."""
    spawned: List[Position] = []
    for col in range(grid.cols):
        for row in range(grid.rows - 1, -1, -1):
            if grid.get(row, col) is not None:
                continue
            grid.set(row, col, grid.spawn(pick_color(grid, row, col, colors, rng, fill_upward=True)))
            spawned.append((row, col))
    return spawned


def respawn_full_board(
    grid: Grid,
    colors: Sequence[ColorId],
    rng: random.Random,
    *,
    max_attempts: int = MAX_RESHUFFLE_ATTEMPTS,
) -> int:
    """Fill the entire board with fresh tokens that contain no matches and at least one valid move.

    Returns the number of attempts used. On failure the previous board is restored.
    """
    previous = grid.snapshot()
    previous_next_id = grid.next_token_id
    for attempt in range(1, max_attempts + 1):
        # Abandoned layouts were never visible, so their ids can be handed out again.
        grid.next_token_id = previous_next_id
        fill_grid(grid, colors, rng)
        if find_matches(grid):
            continue
        if not has_valid_move(grid):
            continue
        return attempt
    grid.restore(previous)
    grid.next_token_id = previous_next_id
    logger.error("Unable to respawn %dx%d board after %d attempts", grid.rows, grid.cols, max_attempts)
    raise InconsistentGrid("Unable to respawn board without matches and valid swaps")
