from dataclasses import dataclass

from crystal.constants import INITIAL_TARGET_SCORE


@dataclass(slots=True)
class LevelState:
    """Running score and level progression across cascades."""
    score: int = 0
    level: int = 1
    target_score: int = INITIAL_TARGET_SCORE
    game_over: bool = False
