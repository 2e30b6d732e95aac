from dataclasses import dataclass, field
from typing import Dict, List, Tuple

@dataclass(slots=True)
class GemPalette:
    """Canonical gem color definitions stored on a single entity.

    This component lives alongside GemPaletteRegistry (tag). ``spawnable`` lists the
    color ids the board may create; the rest are known but never spawned.
    """
    colors: Dict[str, Tuple[int, int, int]]
    spawnable: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        unknown = [name for name in self.spawnable if name not in self.colors]
        if unknown:
            raise ValueError(f"unknown gem colors: {unknown}")
        self.spawnable = list(dict.fromkeys(self.spawnable or self.colors))

    def rgb_for(self, color_id: str) -> Tuple[int, int, int]:
        return self.colors[color_id]

    def spawnable_colors(self) -> List[str]:
        return list(self.spawnable)


@dataclass(slots=True)
class GemPaletteRegistry:
    """Empty tag component marking the entity that stores the GemPalette."""
    pass
