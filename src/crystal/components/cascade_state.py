from dataclasses import dataclass
from enum import Enum, auto


class CascadePhase(Enum):
    """Lifecycle of the board between player actions."""
    IDLE = auto()
    VALIDATING = auto()
    RESOLVING = auto()
    SETTLED = auto()
    NO_MOVES_PENDING = auto()


@dataclass(slots=True)
class CascadeState:
    """Tracks where the cascade engine is in its state machine."""

    phase: CascadePhase = CascadePhase.IDLE
    swaps_accepted: int = 0
    swaps_rejected: int = 0
