from __future__ import annotations

from typing import List

from esper import World

from crystal.components.board import Board
from crystal.components.cascade_state import CascadeState
from crystal.components.combo_state import ComboState
from crystal.components.gem_palette import GemPalette, GemPaletteRegistry
from crystal.components.grid import Grid
from crystal.components.level_state import LevelState


def get_board_entity(world: World) -> int:
    for entity, _ in world.get_component(Board):
        return entity
    raise RuntimeError("Board entity not found")


def get_board(world: World) -> Board:
    return world.component_for_entity(get_board_entity(world), Board)


def get_grid(world: World) -> Grid:
    return world.component_for_entity(get_board_entity(world), Grid)


def get_combo_state(world: World) -> ComboState:
    return world.component_for_entity(get_board_entity(world), ComboState)


def get_cascade_state(world: World) -> CascadeState:
    return world.component_for_entity(get_board_entity(world), CascadeState)


def get_palette(world: World) -> GemPalette:
    for entity, _ in world.get_component(GemPaletteRegistry):
        return world.component_for_entity(entity, GemPalette)
    raise RuntimeError("GemPalette definitions not found")


def spawnable_colors(world: World) -> List[str]:
    return get_palette(world).spawnable_colors()


def get_or_create_level_state(world: World) -> LevelState:
    """Return the shared LevelState component, creating it if absent."""
    existing = list(world.get_component(LevelState))
    if existing:
        return existing[0][1]
    world.create_entity(LevelState())
    return list(world.get_component(LevelState))[0][1]
