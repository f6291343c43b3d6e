from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from candyrush.errors import BoardBoundsError

Position = Tuple[int, int]


@dataclass(slots=True)
class Board:
    """Fixed-size matrix of token entity ids.

    Row 0 is the bottom row. A cell holds ``None`` only while a cascade pass is
    between removal and refill. The esper world owns the token entities; this
    component is the 2D index over them.
    """
    rows: int
    cols: int
    cell_spacing: float = 0.0
    cells: List[List[Optional[int]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Board dimensions must be positive, got {self.rows}x{self.cols}")
        if not self.cells:
            self.cells = [[None] * self.cols for _ in range(self.rows)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise BoardBoundsError(f"Position {(row, col)} outside {self.rows}x{self.cols} board")

    def get(self, row: int, col: int) -> Optional[int]:
        self.check_bounds(row, col)
        return self.cells[row][col]

    def set(self, row: int, col: int, entity: Optional[int]) -> None:
        self.check_bounds(row, col)
        self.cells[row][col] = entity

    def positions(self) -> Iterator[Position]:
        for row in range(self.rows):
            for col in range(self.cols):
                yield row, col

    def empty_positions(self) -> List[Position]:
        return [(r, c) for r, c in self.positions() if self.cells[r][c] is None]

    def is_full(self) -> bool:
        return all(entity is not None for line in self.cells for entity in line)
