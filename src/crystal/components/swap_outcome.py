"""Value types returned by ``CascadeEngine.request_swap``."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple, Union

from crystal.components.gravity_move import GravityMove
from crystal.components.grid import GridSnapshot, Position
from crystal.components.match import Match


@dataclass(frozen=True, slots=True)
class CascadeStep:
    """One remove -> gravity -> refill round of a cascade.

    ``removed`` holds each cleared cell once even when it belonged to two matches.
    ``grid_snapshot_after_step`` is the board after refill, before the next scan.
    """
    chain_depth: int
    matches: Tuple[Match, ...]
    removed: FrozenSet[Position]
    score_delta: int
    gravity_moves: Tuple[GravityMove, ...]
    new_tiles: Tuple[Position, ...]
    grid_snapshot_after_step: GridSnapshot


@dataclass(frozen=True, slots=True)
class SwapRejected:
    """The swap produced no match; the grid was restored."""
    src: Position
    dst: Position
    accepted: bool = False


@dataclass(frozen=True, slots=True)
class SwapAccepted:
    src: Position
    dst: Position
    cascade_steps: Tuple[CascadeStep, ...]
    final_chain_depth: int
    score: int
    has_valid_move_remaining: bool
    accepted: bool = True

    @property
    def final_grid(self) -> Optional[GridSnapshot]:
        if not self.cascade_steps:
            return None
        return self.cascade_steps[-1].grid_snapshot_after_step


SwapOutcome = Union[SwapRejected, SwapAccepted]
