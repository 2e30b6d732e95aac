from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Tuple

from esper import World

from crystal.components.cascade_state import CascadePhase, CascadeState
from crystal.components.combo_state import ComboState
from crystal.components.grid import Grid, Position
from crystal.components.match import Match
from crystal.components.swap_outcome import CascadeStep, SwapAccepted, SwapOutcome, SwapRejected
from crystal.constants import MAX_CASCADE_STEPS
from crystal.errors import InconsistentGrid, InvalidRequest
from crystal.events.bus import (
    EventBus,
    EVENT_BOARD_RESET,
    EVENT_BOARD_RESHUFFLED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_NO_MOVES,
    EVENT_REFILL_COMPLETED,
    EVENT_RESHUFFLE_REQUEST,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
)
from crystal.systems.board_ops import apply_gravity, fill_grid, refill, respawn_full_board
from crystal.systems.match import (
    find_matches,
    find_valid_swaps,
    has_valid_move,
    matched_positions,
    try_swap,
    validate_swap_request,
)
from crystal.utils.board_state import (
    get_board,
    get_cascade_state,
    get_combo_state,
    get_grid,
    spawnable_colors,
)

logger = logging.getLogger(__name__)


class CascadeEngine:
    """Sole writer of the board: validates swaps and resolves cascades to a fixed point.

    A swap runs Validating -> Resolving -> Settled synchronously inside
    ``request_swap``; every intermediate board is reported in the returned
    outcome (and on the event bus) so a renderer can replay it at its own pace.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        rng: random.Random | None = None,
        max_cascade_steps: int = MAX_CASCADE_STEPS,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self._rng = rng or getattr(world, "random", None) or random.Random()
        self.max_cascade_steps = max_cascade_steps
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)
        self.event_bus.subscribe(EVENT_RESHUFFLE_REQUEST, self.on_reshuffle_request)
        self._check_for_moves(reason="initial")

    # ------------------------------------------------------------------
    # Component access
    # ------------------------------------------------------------------

    @property
    def grid(self) -> Grid:
        return get_grid(self.world)

    @property
    def state(self) -> CascadeState:
        return get_cascade_state(self.world)

    @property
    def combo(self) -> ComboState:
        return get_combo_state(self.world)

    @property
    def phase(self) -> CascadePhase:
        return self.state.phase

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        try:
            self.request_swap(src, dst)
        except InvalidRequest as exc:
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=str(exc))

    def on_reshuffle_request(self, sender, **kwargs):
        self.reshuffle(reason=kwargs.get('reason', 'requested'))

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def request_swap(self, src: Position, dst: Position) -> SwapOutcome:
        """Try to swap two adjacent cells and, when accepted, resolve the full cascade.

        Raises InvalidRequest for malformed requests; the grid is untouched then.
        """
        state = self.state
        if state.phase is CascadePhase.NO_MOVES_PENDING:
            raise InvalidRequest("board has no valid moves; reshuffle or end the level first")
        if state.phase is not CascadePhase.IDLE:
            raise InvalidRequest(f"cannot swap while board is {state.phase.name.lower()}")
        grid = self.grid
        a, b = validate_swap_request(grid, src, dst)

        state.phase = CascadePhase.VALIDATING
        check = try_swap(grid, a, b)
        if not check.accepted:
            state.phase = CascadePhase.IDLE
            state.swaps_rejected += 1
            logger.debug("Rejected swap %s <-> %s: no match", a, b)
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=a, dst=b, reason="no_match")
            return SwapRejected(src=a, dst=b)

        state.swaps_accepted += 1
        logger.info("Accepted swap %s <-> %s (%d matches)", a, b, len(check.matches))
        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=a, dst=b)

        combo = self.combo
        combo.reset()
        state.phase = CascadePhase.RESOLVING
        try:
            steps = self._resolve(grid, check.matches, combo)
            state.phase = CascadePhase.SETTLED
            self._verify_settled(grid)
        except InconsistentGrid:
            # Only reshuffle() or reset_board() may touch the board after this.
            state.phase = CascadePhase.NO_MOVES_PENDING
            raise
        logger.debug("Cascade settled at depth %d for %d points", combo.chain_depth, combo.score_accumulated)
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=combo.chain_depth, score=combo.score_accumulated)
        moves_remaining = has_valid_move(grid)
        outcome = SwapAccepted(
            src=a,
            dst=b,
            cascade_steps=tuple(steps),
            final_chain_depth=combo.chain_depth,
            score=combo.score_accumulated,
            has_valid_move_remaining=moves_remaining,
        )
        self._enter_resting_phase(moves_remaining, reason="deadlock")
        return outcome

    def has_valid_move(self) -> bool:
        return has_valid_move(self.grid)

    def hint(self) -> Optional[Tuple[Position, Position]]:
        """Return one swap that would produce a match, or None."""
        swaps = find_valid_swaps(self.grid)
        return swaps[0] if swaps else None

    def reshuffle(self, *, reason: str = "requested") -> List[Position]:
        """Replace every token so the board is match-free and playable again."""
        state = self.state
        if state.phase in (CascadePhase.VALIDATING, CascadePhase.RESOLVING):
            raise InvalidRequest(f"cannot reshuffle while board is {state.phase.name.lower()}")
        grid = self.grid
        attempts = respawn_full_board(grid, spawnable_colors(self.world), self._rng)
        self.combo.reset()
        state.phase = CascadePhase.IDLE
        new_tiles = list(grid.positions())
        logger.info("Reshuffled board (%s) after %d attempt(s)", reason, attempts)
        self.event_bus.emit(EVENT_BOARD_RESHUFFLED, new_tiles=new_tiles, attempts=attempts, reason=reason)
        return new_tiles

    def reset_board(self, *, new_game: bool = False) -> Grid:
        """Refill the whole board for a level restart."""
        state = self.state
        if state.phase in (CascadePhase.VALIDATING, CascadePhase.RESOLVING):
            raise InvalidRequest(f"cannot reset while board is {state.phase.name.lower()}")
        grid = self.grid
        fill_grid(grid, spawnable_colors(self.world), self._rng)
        self.combo.reset()
        state.phase = CascadePhase.IDLE
        self.event_bus.emit(EVENT_BOARD_RESET, rows=grid.rows, cols=grid.cols, new_game=new_game)
        self._check_for_moves(reason="reset")
        return grid

    # ------------------------------------------------------------------
    # Cascade resolution
    # ------------------------------------------------------------------

    def _resolve(self, grid: Grid, matches: Sequence[Match], combo: ComboState) -> List[CascadeStep]:
        steps: List[CascadeStep] = []
        while matches:
            if combo.chain_depth >= self.max_cascade_steps:
                logger.error("Cascade exceeded %d steps", self.max_cascade_steps)
                raise InconsistentGrid(f"cascade did not settle within {self.max_cascade_steps} steps")
            steps.append(self._resolve_step(grid, matches, combo))
            matches = find_matches(grid)
        return steps

    def _resolve_step(self, grid: Grid, matches: Sequence[Match], combo: ComboState) -> CascadeStep:
        removed = matched_positions(matches)
        positions = sorted(removed)
        combo.chain_depth += 1
        depth = combo.chain_depth
        score_delta = len(removed) * get_board(self.world).base_value * depth
        combo.score_accumulated += score_delta
        self.event_bus.emit(
            EVENT_MATCH_FOUND, positions=positions, size=len(positions), depth=depth, matches=list(matches)
        )

        colors = [(row, col, grid.color_at(row, col)) for row, col in positions]
        for row, col in positions:
            grid.set(row, col, None)
        self.event_bus.emit(EVENT_MATCH_CLEARED, positions=positions, colors=colors)

        moves = apply_gravity(grid)
        self.event_bus.emit(
            EVENT_GRAVITY_APPLIED, moves=moves, cascades=len({move.source[1] for move in moves})
        )

        new_tiles = refill(grid, spawnable_colors(self.world), self._rng)
        if not grid.is_full():
            logger.error("Empty cells remain after refill: %s", grid.empty_positions())
            raise InconsistentGrid("refill left empty cells")
        self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=new_tiles)

        logger.debug(
            "Cascade step %d cleared %d cells for %d points", depth, len(positions), score_delta
        )
        self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=positions, score_delta=score_delta)
        return CascadeStep(
            chain_depth=depth,
            matches=tuple(matches),
            removed=frozenset(removed),
            score_delta=score_delta,
            gravity_moves=tuple(moves),
            new_tiles=tuple(new_tiles),
            grid_snapshot_after_step=grid.snapshot(),
        )

    def _verify_settled(self, grid: Grid) -> None:
        if not grid.is_full():
            logger.error("Settled board has empty cells: %s", grid.empty_positions())
            raise InconsistentGrid("settled board has empty cells")
        if find_matches(grid):
            logger.error("Settled board still contains matches")
            raise InconsistentGrid("settled board still contains matches")

    def _check_for_moves(self, *, reason: str) -> None:
        self._enter_resting_phase(has_valid_move(self.grid), reason=reason)

    def _enter_resting_phase(self, moves_remaining: bool, *, reason: str) -> None:
        state = self.state
        if moves_remaining:
            state.phase = CascadePhase.IDLE
            return
        state.phase = CascadePhase.NO_MOVES_PENDING
        logger.warning("No valid moves left on the board (%s)", reason)
        self.event_bus.emit(EVENT_NO_MOVES, reason=reason)
