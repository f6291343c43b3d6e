"""Neighbor and adjacency math shared by every board consumer."""
from __future__ import annotations

from typing import List, Tuple

Position = Tuple[int, int]

ORTHOGONAL_OFFSETS: Tuple[Position, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
SURROUNDING_OFFSETS: Tuple[Position, ...] = tuple(
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)
)


def is_adjacent(a: Position, b: Position) -> bool:
    """True when a and b are exactly one step apart horizontally or vertically."""
    ar, ac = a
    br, bc = b
    return abs(ar - br) + abs(ac - bc) == 1


def in_bounds(pos: Position, rows: int, cols: int) -> bool:
    row, col = pos
    return 0 <= row < rows and 0 <= col < cols


def neighbors(pos: Position, rows: int, cols: int, *, diagonal: bool = False) -> List[Position]:
    """In-bounds neighbors of pos; 4-neighborhood by default, 8 with diagonal=True."""
    row, col = pos
    offsets = SURROUNDING_OFFSETS if diagonal else ORTHOGONAL_OFFSETS
    result: List[Position] = []
    for dr, dc in offsets:
        candidate = (row + dr, col + dc)
        if in_bounds(candidate, rows, cols):
            result.append(candidate)
    return result


def below(pos: Position) -> Position | None:
    """Cell directly under pos (row 0 is the bottom), or None on the bottom row."""
    row, col = pos
    if row <= 0:
        return None
    return row - 1, col


def spawn_origin(pos: Position, rows: int) -> Position:
    """Virtual position above the visible board from which a new token falls into pos."""
    row, col = pos
    return row + rows, col
