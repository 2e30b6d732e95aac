from dataclasses import dataclass

@dataclass(slots=True)
class Board:
    """Tag component marking the single entity that owns the Grid."""
    rows: int
    cols: int
    base_value: int
