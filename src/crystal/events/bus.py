from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# INPUT & SELECTION
# ============================================================================
EVENT_MOUSE_PRESS = "mouse_press"                  # payload: x, y, button
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str, prev_row, prev_col


# ============================================================================
# SWAP & CASCADE
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c), reason=str
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], size=int, depth=int, matches=list[Match]
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...], colors=[(r,c,color),...]
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=list[GravityMove], cascades=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...], score_delta=int
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int, score=int


# ============================================================================
# BOARD LIFECYCLE
# ============================================================================
EVENT_NO_MOVES = "no_moves"                        # payload: reason=str
EVENT_RESHUFFLE_REQUEST = "reshuffle_request"      # payload: reason=str
EVENT_BOARD_RESHUFFLED = "board_reshuffled"        # payload: new_tiles=[(r,c),...], attempts=int
EVENT_BOARD_RESET = "board_reset"                  # payload: rows=int, cols=int


# ============================================================================
# SCORE & LEVEL
# ============================================================================
EVENT_SCORE_UPDATE = "score_update"                # payload: score=int, level=int, delta=int
EVENT_LEVEL_COMPLETE = "level_complete"            # payload: level=int, score=int, target_score=int
EVENT_GAME_OVER = "game_over"                      # payload: score=int, level=int, reason=str
