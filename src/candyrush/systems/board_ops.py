from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from esper import World

from candyrush.components.board import Board
from candyrush.components.board_position import BoardPosition
from candyrush.components.target_position import TargetPosition
from candyrush.components.token import Token
from candyrush.components.token_colors import TokenColors
from candyrush.errors import BoardBuildError
from candyrush.ui.layout import grid_to_world

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
ColorGrid = List[List[Optional[str]]]


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board not found")


def get_palette(world: World) -> TokenColors:
    for _, palette in world.get_component(TokenColors):
        return palette
    raise RuntimeError("TokenColors definitions not found")


def board_dimensions(world: World) -> Tuple[int, int]:
    board = get_board(world)
    return board.rows, board.cols


def get_token(world: World, row: int, col: int) -> int | None:
    return get_board(world).get(row, col)


def color_at(world: World, row: int, col: int) -> str | None:
    entity = get_token(world, row, col)
    if entity is None:
        return None
    return world.component_for_entity(entity, Token).color


def color_grid(world: World) -> ColorGrid:
    """Snapshot of token colors indexed [row][col]; None marks empty cells."""
    board = get_board(world)
    grid: ColorGrid = []
    for row in range(board.rows):
        line: List[Optional[str]] = []
        for col in range(board.cols):
            entity = board.cells[row][col]
            line.append(None if entity is None else world.component_for_entity(entity, Token).color)
        grid.append(line)
    return grid


def place_token(world: World, entity: int, row: int, col: int) -> None:
    """Store entity at (row, col) and sync its BoardPosition/TargetPosition.

    Does not clear the cell the token came from.
    """
    board = get_board(world)
    board.set(row, col, entity)
    position = world.component_for_entity(entity, BoardPosition)
    position.row = row
    position.col = col
    target = world.component_for_entity(entity, TargetPosition)
    target.x, target.y = grid_to_world(row, col, board.cell_spacing)


def spawn_token(world: World, color: str, row: int, col: int) -> int:
    board = get_board(world)
    board.check_bounds(row, col)
    palette = get_palette(world)
    x, y = grid_to_world(row, col, board.cell_spacing)
    entity = world.create_entity(
        Token(color=palette.resolve(color)),
        BoardPosition(row=row, col=col),
        TargetPosition(x=x, y=y),
    )
    board.set(row, col, entity)
    return entity


def swap_tokens(world: World, a: Position, b: Position) -> None:
    """Exchange the occupants of a and b, including their stored coordinates."""
    board = get_board(world)
    ent_a = board.get(*a)
    ent_b = board.get(*b)
    if ent_a is None or ent_b is None:
        raise RuntimeError(f"Cannot swap empty cell: {a} -> {ent_a}, {b} -> {ent_b}")
    place_token(world, ent_a, *b)
    place_token(world, ent_b, *a)


def remove_tokens(world: World, positions: Iterable[Position]) -> Dict[str, int]:
    """Delete the tokens at positions (deduplicated) and return removed counts per color."""
    board = get_board(world)
    counts: Dict[str, int] = {}
    for row, col in sorted(set(positions)):
        entity = board.get(row, col)
        if entity is None:
            continue
        color = world.component_for_entity(entity, Token).color
        counts[color] = counts.get(color, 0) + 1
        board.set(row, col, None)
        world.delete_entity(entity, immediate=True)
    return counts


def clear_board(world: World) -> None:
    board = get_board(world)
    remove_tokens(world, [pos for pos in board.positions() if board.cells[pos[0]][pos[1]] is not None])


def fill_empty_uniform(world: World, rng: random.Random) -> List[Position]:
    """Fill every empty cell (bottom row first) with a uniformly random spawnable color."""
    board = get_board(world)
    choices = get_palette(world).spawnable_colors()
    filled: List[Position] = []
    for row, col in board.empty_positions():
        spawn_token(world, rng.choice(choices), row, col)
        filled.append((row, col))
    return filled


def load_layout(world: World, layout: Sequence[Sequence[str]]) -> None:
    """Replace every token with the colors in layout, indexed [row][col] with row 0 at the bottom."""
    board = get_board(world)
    if len(layout) != board.rows or any(len(line) != board.cols for line in layout):
        raise ValueError(f"Layout does not match {board.rows}x{board.cols} board")
    clear_board(world)
    for row, line in enumerate(layout):
        for col, color in enumerate(line):
            spawn_token(world, color, row, col)


def build_match_free_board(world: World, rng: random.Random, *, max_attempts: int) -> int:
    """Fill the board and re-roll matched cells until no run remains.

    Returns the number of re-roll rounds used. Raises BoardBuildError when the
    board still contains a match after max_attempts rounds, which means the
    palette is too small for the board.
    """
    from candyrush.systems.match import find_matches

    clear_board(world)
    fill_empty_uniform(world, rng)
    for attempt in range(max_attempts + 1):
        matches = find_matches(world)
        if not matches.has_matches:
            logger.debug("Board built after %d re-roll round(s)", attempt)
            return attempt
        if attempt == max_attempts:
            break
        remove_tokens(world, matches.positions)
        fill_empty_uniform(world, rng)
    board = get_board(world)
    raise BoardBuildError(
        f"Unable to build a {board.rows}x{board.cols} board without matches "
        f"using {len(get_palette(world).spawnable)} color(s) in {max_attempts} attempts"
    )


def find_valid_swaps(world: World) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps that would create at least one run."""
    from candyrush.systems.match import scan_runs

    grid = color_grid(world)
    rows, cols = board_dimensions(world)
    swaps: List[Tuple[Position, Position]] = []
    for row in range(rows):
        for col in range(cols):
            for other in ((row, col + 1), (row + 1, col)):
                orow, ocol = other
                if orow >= rows or ocol >= cols:
                    continue
                if grid[row][col] is None or grid[orow][ocol] is None:
                    continue
                if grid[row][col] == grid[orow][ocol]:
                    continue
                grid[row][col], grid[orow][ocol] = grid[orow][ocol], grid[row][col]
                if scan_runs(grid).has_matches:
                    swaps.append(((row, col), other))
                grid[row][col], grid[orow][ocol] = grid[orow][ocol], grid[row][col]
    return swaps
