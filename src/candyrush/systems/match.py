"""Run detection: horizontal and vertical runs of three or more equal colors."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from esper import World

from candyrush.constants import MIN_RUN_LENGTH
from candyrush.systems.board_ops import color_grid

Position = Tuple[int, int]

HORIZONTAL = "horizontal"
VERTICAL = "vertical"


@dataclass(frozen=True, slots=True)
class Match:
    """One maximal run; positions are ordered left to right or bottom to top."""
    orientation: str
    color: str
    positions: Tuple[Position, ...]

    def __len__(self) -> int:
        return len(self.positions)


@dataclass(frozen=True, slots=True)
class MatchSet:
    """Every run found in one scan.

    Overlapping runs (L/T/cross shapes) stay separate Match objects; ``positions``
    is their union and is what a cascade pass removes.
    """
    matches: Tuple[Match, ...] = ()

    @property
    def has_matches(self) -> bool:
        return bool(self.matches)

    @property
    def positions(self) -> List[Position]:
        return sorted({pos for match in self.matches for pos in match.positions})

    def positions_for(self, orientation: str) -> List[Position]:
        return sorted({pos for match in self.matches if match.orientation == orientation for pos in match.positions})

    def __len__(self) -> int:
        return len(self.matches)


def _scan_line(
    cells: Sequence[Optional[str]],
    to_position,
    orientation: str,
    min_length: int,
    out: List[Match],
) -> None:
    run_start = 0
    run_color = cells[0] if cells else None
    for index in range(1, len(cells) + 1):
        current = cells[index] if index < len(cells) else None
        if current is not None and current == run_color:
            continue
        run_length = index - run_start
        if run_color is not None and run_length >= min_length:
            out.append(
                Match(
                    orientation=orientation,
                    color=run_color,
                    positions=tuple(to_position(i) for i in range(run_start, index)),
                )
            )
        run_start = index
        run_color = current


def scan_runs(grid: Sequence[Sequence[Optional[str]]], min_length: int = MIN_RUN_LENGTH) -> MatchSet:
    """Find runs in a color grid indexed [row][col]. Empty cells (None) break runs."""
    matches: List[Match] = []
    rows = len(grid)
    cols = len(grid[0]) if rows else 0
    for row in range(rows):
        _scan_line(grid[row], lambda c, r=row: (r, c), HORIZONTAL, min_length, matches)
    for col in range(cols):
        column = [grid[row][col] for row in range(rows)]
        _scan_line(column, lambda r, c=col: (r, c), VERTICAL, min_length, matches)
    return MatchSet(matches=tuple(matches))


def find_matches(world: World) -> MatchSet:
    """Scan the world's board. Pure: calling it twice on an unchanged board gives equal results."""
    return scan_runs(color_grid(world))
