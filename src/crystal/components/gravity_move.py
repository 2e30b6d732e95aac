from dataclasses import dataclass

from crystal.components.grid import Position


@dataclass(frozen=True, slots=True)
class GravityMove:
    """One token dropping from ``source`` to ``target`` within its column."""
    source: Position
    target: Position
    token_id: int
