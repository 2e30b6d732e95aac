from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

Position = Tuple[int, int]
ColorId = str


@dataclass(frozen=True, slots=True)
class Cell:
    """A single gem token.

    ``id`` only exists so a renderer can follow one token across moves; it never
    takes part in matching.
    """
    color: ColorId
    id: int


# Row-major snapshot: one tuple per row, None for an empty cell.
GridSnapshot = Tuple[Tuple[Optional[Cell], ...], ...]


@dataclass(slots=True)
class Grid:
    """Fixed-size board of cells, row 0 at the top. Empty cells are None."""

    rows: int
    cols: int
    cells: List[List[Optional[Cell]]] = field(default_factory=list)
    next_token_id: int = 1

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[None] * self.cols for _ in range(self.rows)]
        elif len(self.cells) != self.rows or any(len(row) != self.cols for row in self.cells):
            raise ValueError(f"cells do not form a {self.rows}x{self.cols} grid")

    @classmethod
    def from_colors(cls, rows: Sequence[Sequence[Optional[ColorId]]]) -> "Grid":
        """Build a grid from nested color ids, assigning ids in row-major order."""
        height = len(rows)
        width = len(rows[0]) if rows else 0
        grid = cls(rows=height, cols=width)
        for r, row_colors in enumerate(rows):
            if len(row_colors) != width:
                raise ValueError("all rows must have the same length")
            for c, color in enumerate(row_colors):
                if color is not None:
                    grid.cells[r][c] = grid.spawn(color)
        return grid

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def get(self, row: int, col: int) -> Optional[Cell]:
        return self.cells[row][col]

    def set(self, row: int, col: int, cell: Optional[Cell]) -> None:
        self.cells[row][col] = cell

    def color_at(self, row: int, col: int) -> Optional[ColorId]:
        cell = self.cells[row][col]
        return cell.color if cell is not None else None

    def spawn(self, color: ColorId) -> Cell:
        """Create a new token with the next identifier."""
        cell = Cell(color=color, id=self.next_token_id)
        self.next_token_id += 1
        return cell

    def swap(self, a: Position, b: Position) -> None:
        (ar, ac), (br, bc) = a, b
        self.cells[ar][ac], self.cells[br][bc] = self.cells[br][bc], self.cells[ar][ac]

    def positions(self) -> Iterator[Position]:
        for r in range(self.rows):
            for c in range(self.cols):
                yield (r, c)

    def empty_positions(self) -> List[Position]:
        return [(r, c) for r, c in self.positions() if self.cells[r][c] is None]

    def is_full(self) -> bool:
        return all(cell is not None for row in self.cells for cell in row)

    def snapshot(self) -> GridSnapshot:
        return tuple(tuple(row) for row in self.cells)

    def restore(self, snapshot: GridSnapshot) -> None:
        self.cells = [list(row) for row in snapshot]

    def color_rows(self) -> List[List[Optional[ColorId]]]:
        return [[cell.color if cell is not None else None for cell in row] for row in self.cells]
