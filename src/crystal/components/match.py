from dataclasses import dataclass
from typing import Tuple

from crystal.components.grid import ColorId, Position

HORIZONTAL = 'horizontal'
VERTICAL = 'vertical'


@dataclass(frozen=True, slots=True)
class Match:
    """A maximal run of three or more same-colored cells along one axis.

    Positions are ordered left-to-right or top-to-bottom.
    """
    color: ColorId
    axis: str
    positions: Tuple[Position, ...]

    def __len__(self) -> int:
        return len(self.positions)
