from typing import Optional, Tuple
from esper import World
from crystal.events.bus import (EventBus, EVENT_TILE_CLICK, EVENT_TILE_SELECTED, EVENT_TILE_DESELECTED,
                                EVENT_TILE_SWAP_REQUEST, EVENT_MOUSE_PRESS, EVENT_BOARD_RESET,
                                EVENT_BOARD_RESHUFFLED)
from crystal.components.cascade_state import CascadePhase
from crystal.constants import MOUSE_BUTTON_RIGHT
from crystal.systems.match import is_adjacent
from crystal.utils.board_state import get_cascade_state, get_grid, get_or_create_level_state


class BoardSystem:
    """Turns cell clicks from the input layer into selections and swap requests."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.selected: Optional[Tuple[int, int]] = None
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)
        self.event_bus.subscribe(EVENT_BOARD_RESET, self.on_board_replaced)
        self.event_bus.subscribe(EVENT_BOARD_RESHUFFLED, self.on_board_replaced)

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        # Ignore clicks unless the board is waiting for the player
        if get_cascade_state(self.world).phase is not CascadePhase.IDLE:
            return
        if get_or_create_level_state(self.world).game_over:
            return
        if not get_grid(self.world).in_bounds(row, col):
            self.clear_selection(reason='out_of_bounds')
            return
        if self.selected is None:
            self._select(row, col)
        elif is_adjacent(self.selected, (row, col)):
            src = self.selected
            dst = (row, col)
            self.selected = None
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=src, dst=dst)
        else:
            # Change selection to new tile
            self._select(row, col)

    def on_mouse_press(self, sender, **kwargs):
        # Right-click always clears current selection
        if kwargs.get('button') != MOUSE_BUTTON_RIGHT:
            return
        self.clear_selection(reason='right_click')

    def on_board_replaced(self, sender, **kwargs):
        self.clear_selection(reason='board_replaced')

    def clear_selection(self, *, reason: str) -> None:
        prev = self.selected
        if prev is None:
            return
        self.selected = None
        self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])

    def _select(self, row: int, col: int) -> None:
        self.selected = (row, col)
        self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
