"""Score keeping, level progression and what to do when the board runs out of moves."""
from __future__ import annotations

import logging
from enum import Enum, auto

from esper import World

from crystal.components.cascade_state import CascadePhase
from crystal.components.level_state import LevelState
from crystal.constants import INITIAL_TARGET_SCORE, TARGET_SCORE_GROWTH
from crystal.events.bus import (
    EventBus,
    EVENT_BOARD_RESET,
    EVENT_CASCADE_COMPLETE,
    EVENT_GAME_OVER,
    EVENT_LEVEL_COMPLETE,
    EVENT_NO_MOVES,
    EVENT_RESHUFFLE_REQUEST,
    EVENT_SCORE_UPDATE,
)
from crystal.utils.board_state import get_cascade_state, get_or_create_level_state

logger = logging.getLogger(__name__)


class DeadlockPolicy(Enum):
    RESHUFFLE = auto()
    END_GAME = auto()


class LevelSystem:
    """Accumulates cascade scores and advances levels once the target is reached."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        target_score: int | None = None,
        target_growth: float = TARGET_SCORE_GROWTH,
        deadlock_policy: DeadlockPolicy = DeadlockPolicy.RESHUFFLE,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self.initial_target = target_score if target_score is not None else INITIAL_TARGET_SCORE
        self.target_growth = target_growth
        self.deadlock_policy = deadlock_policy
        get_or_create_level_state(world).target_score = self.initial_target
        self.event_bus.subscribe(EVENT_CASCADE_COMPLETE, self.on_cascade_complete)
        self.event_bus.subscribe(EVENT_NO_MOVES, self.on_no_moves)
        self.event_bus.subscribe(EVENT_BOARD_RESET, self.on_board_reset)
        # The engine may have found a dead board before this system subscribed.
        if get_cascade_state(world).phase is CascadePhase.NO_MOVES_PENDING:
            self.on_no_moves(self, reason="initial")

    @property
    def state(self) -> LevelState:
        return get_or_create_level_state(self.world)

    def on_cascade_complete(self, sender, **kwargs):
        delta = int(kwargs.get('score', 0))
        if delta <= 0:
            return
        state = self.state
        state.score += delta
        self.event_bus.emit(EVENT_SCORE_UPDATE, score=state.score, level=state.level, delta=delta)
        if state.score >= state.target_score:
            self._advance_level(state)

    def on_no_moves(self, sender, **kwargs):
        state = self.state
        if state.game_over:
            return
        if self.deadlock_policy is DeadlockPolicy.RESHUFFLE:
            self.event_bus.emit(EVENT_RESHUFFLE_REQUEST, reason="no_moves")
            return
        state.game_over = True
        logger.info("Game over at level %d with %d points", state.level, state.score)
        self.event_bus.emit(EVENT_GAME_OVER, score=state.score, level=state.level, reason="no_moves")

    def on_board_reset(self, sender, **kwargs):
        if not kwargs.get('new_game'):
            return
        state = self.state
        state.score = 0
        state.level = 1
        state.target_score = self.initial_target
        state.game_over = False

    def _advance_level(self, state: LevelState) -> None:
        state.level += 1
        state.target_score = int(state.target_score * self.target_growth)
        logger.info("Level complete: now level %d, next target %d", state.level, state.target_score)
        self.event_bus.emit(
            EVENT_LEVEL_COMPLETE, level=state.level, score=state.score, target_score=state.target_score
        )
