from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set, Tuple

from crystal.components.grid import Grid, Position
from crystal.components.match import HORIZONTAL, VERTICAL, Match
from crystal.constants import MIN_MATCH_LENGTH
from crystal.errors import InvalidRequest


@dataclass(frozen=True, slots=True)
class SwapCheck:
    accepted: bool
    matches: Tuple[Match, ...] = ()


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def find_matches(grid: Grid) -> List[Match]:
    """Detect every maximal horizontal or vertical run of length >= 3.

    Runs crossing at a shared cell (L, T and plus shapes) come back as separate
    Match objects; callers dedupe positions with ``matched_positions``.
    """
    matches: List[Match] = []
    for r in range(grid.rows):
        matches.extend(_scan_line(grid, [(r, c) for c in range(grid.cols)], HORIZONTAL))
    for c in range(grid.cols):
        matches.extend(_scan_line(grid, [(r, c) for r in range(grid.rows)], VERTICAL))
    return matches


def _scan_line(grid: Grid, line: Sequence[Position], axis: str) -> List[Match]:
    found: List[Match] = []
    run: List[Position] = []
    run_color = None
    for pos in line:
        color = grid.color_at(*pos)
        if color is not None and color == run_color:
            run.append(pos)
            continue
        if len(run) >= MIN_MATCH_LENGTH:
            found.append(Match(color=run_color, axis=axis, positions=tuple(run)))
        # Empty cells never start a run.
        run = [pos] if color is not None else []
        run_color = color
    if len(run) >= MIN_MATCH_LENGTH:
        found.append(Match(color=run_color, axis=axis, positions=tuple(run)))
    return found


def matched_positions(matches: Iterable[Match]) -> Set[Position]:
    """Union of all positions covered by matches, each cell once."""
    return {pos for match in matches for pos in match.positions}


def _as_position(value) -> Position:
    try:
        row, col = value
    except (TypeError, ValueError):
        raise InvalidRequest(f"not a (row, col) position: {value!r}") from None
    if not isinstance(row, int) or not isinstance(col, int):
        raise InvalidRequest(f"not a (row, col) position: {value!r}")
    return (row, col)


def validate_swap_request(grid: Grid, src, dst) -> Tuple[Position, Position]:
    """Normalize a swap request or raise InvalidRequest without touching the grid."""
    a = _as_position(src)
    b = _as_position(dst)
    for pos in (a, b):
        if not grid.in_bounds(*pos):
            raise InvalidRequest(f"position {pos} is outside the {grid.rows}x{grid.cols} grid")
    if not is_adjacent(a, b):
        raise InvalidRequest(f"positions {a} and {b} are not adjacent")
    if grid.get(*a) is None or grid.get(*b) is None:
        raise InvalidRequest(f"cannot swap an empty cell ({a}, {b})")
    return a, b


def try_swap(grid: Grid, src, dst) -> SwapCheck:
    """Swap two adjacent cells in place and keep the swap only if it matches.

    A rejected swap leaves the grid exactly as it was.
    """
    a, b = validate_swap_request(grid, src, dst)
    grid.swap(a, b)
    matches = find_matches(grid)
    if matches:
        return SwapCheck(accepted=True, matches=tuple(matches))
    grid.swap(a, b)
    return SwapCheck(accepted=False)


def _adjacent_pairs(grid: Grid):
    # Horizontal neighbours across the whole grid first, then vertical ones.
    for r in range(grid.rows):
        for c in range(grid.cols - 1):
            yield (r, c), (r, c + 1)
    for r in range(grid.rows - 1):
        for c in range(grid.cols):
            yield (r, c), (r + 1, c)


def _swap_matches(grid: Grid, a: Position, b: Position) -> bool:
    if grid.get(*a) is None or grid.get(*b) is None:
        return False
    grid.swap(a, b)
    try:
        return bool(find_matches(grid))
    finally:
        grid.swap(a, b)


def has_valid_move(grid: Grid) -> bool:
    """Return True if any single adjacent swap would produce a match."""
    return any(_swap_matches(grid, a, b) for a, b in _adjacent_pairs(grid))


def find_valid_swaps(grid: Grid) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps that would produce a match."""
    return [(a, b) for a, b in _adjacent_pairs(grid) if _swap_matches(grid, a, b)]
