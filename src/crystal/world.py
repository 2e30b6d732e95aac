import logging
import random

from esper import World
from crystal.events.bus import EventBus, EVENT_BOARD_RESET
from crystal.components.board import Board
from crystal.components.cascade_state import CascadeState
from crystal.components.combo_state import ComboState
from crystal.components.gem_palette import GemPalette, GemPaletteRegistry
from crystal.components.grid import Grid
from crystal.components.level_state import LevelState
from crystal.constants import (
    BASE_MATCH_VALUE,
    DEFAULT_COLOR_COUNT,
    GEM_COLORS,
    GRID_COLS,
    GRID_ROWS,
)
from crystal.systems.board_ops import default_colors, fill_grid

logger = logging.getLogger(__name__)


def create_world(
    event_bus: EventBus,
    *,
    rows: int = GRID_ROWS,
    cols: int = GRID_COLS,
    color_count: int = DEFAULT_COLOR_COUNT,
    base_value: int = BASE_MATCH_VALUE,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> World:
    """Build a world holding one freshly filled board with no pre-existing matches."""
    if rows < 1 or cols < 1:
        raise ValueError(f"grid dimensions must be positive, got {rows}x{cols}")
    if base_value < 1:
        raise ValueError(f"base_value must be positive, got {base_value}")
    colors = default_colors(color_count)

    world = World()
    setattr(world, "random", rng or random.Random(seed))

    # Create single registry entity with canonical gem colors
    world.create_entity(
        GemPaletteRegistry(),
        GemPalette(colors=dict(GEM_COLORS), spawnable=colors),
    )

    grid = Grid(rows=rows, cols=cols)
    fill_grid(grid, colors, world.random)
    world.create_entity(
        Board(rows=rows, cols=cols, base_value=base_value),
        grid,
        ComboState(),
        CascadeState(),
    )
    world.create_entity(LevelState())
    logger.debug("Created %dx%d board with colors %s", rows, cols, colors)
    event_bus.emit(EVENT_BOARD_RESET, rows=rows, cols=cols, new_game=True)
    return world
