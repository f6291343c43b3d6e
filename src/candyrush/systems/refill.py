"""Refill policies: decide color and arrival of the tokens that replace a pass's removals.

Every policy receives the RefillContext for one pass, mutates the board through
board_ops, and returns a RefillResult describing spawned cells and token moves
so the caller can publish them. All randomness flows through the injected rng.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Type

from esper import World

from candyrush.constants import DIFFERENT_COLOR_SPAWN_CHANCE, SAME_COLOR_SPAWN_CHANCE
from candyrush.systems.board_ops import (
    color_at,
    get_board,
    get_palette,
    place_token,
    spawn_token,
)
from candyrush.systems.match import VERTICAL, HORIZONTAL, MatchSet
from candyrush.utils.grid import below, neighbors, spawn_origin

Position = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class RefillContext:
    """Cells vacated by one pass, split by the orientation of the run that emptied them.

    Both sequences are ordered bottom row first. A cell shared by a vertical and
    a horizontal run appears in both.
    """
    vertical: Tuple[Position, ...] = ()
    horizontal: Tuple[Position, ...] = ()

    @classmethod
    def from_matches(cls, matches: MatchSet) -> "RefillContext":
        return cls(
            vertical=tuple(matches.positions_for(VERTICAL)),
            horizontal=tuple(matches.positions_for(HORIZONTAL)),
        )

    def all_positions(self) -> List[Position]:
        return sorted(set(self.vertical) | set(self.horizontal))


@dataclass(slots=True)
class TokenMove:
    entity: int
    source: Position
    target: Position
    reason: str


@dataclass(slots=True)
class RefillResult:
    new_tiles: List[Position] = field(default_factory=list)
    moves: List[TokenMove] = field(default_factory=list)


class RefillPolicy:
    """Base class; subclasses implement _fill."""

    name = ""

    def refill(self, world: World, context: RefillContext, rng: random.Random) -> RefillResult:
        result = RefillResult()
        self._fill(world, context, rng, result)
        # Cells outside the context (none in normal play) still get a token.
        palette = get_palette(world)
        for row, col in get_board(world).empty_positions():
            self._spawn(world, result, rng.choice(palette.spawnable_colors()), row, col)
        return result

    def _fill(self, world: World, context: RefillContext, rng: random.Random, result: RefillResult) -> None:
        raise NotImplementedError

    @staticmethod
    def _spawn(world: World, result: RefillResult, color: str, row: int, col: int) -> int:
        rows = get_board(world).rows
        entity = spawn_token(world, color, row, col)
        result.new_tiles.append((row, col))
        result.moves.append(
            TokenMove(entity=entity, source=spawn_origin((row, col), rows), target=(row, col), reason="refill")
        )
        return entity

    @staticmethod
    def _uniform(world: World, rng: random.Random) -> str:
        return rng.choice(get_palette(world).spawnable_colors())

    @staticmethod
    def _copy_or_other(world: World, rng: random.Random, color: str, chance: float) -> str:
        """Return color with probability chance, else a uniformly chosen different color."""
        if rng.random() < chance:
            return color
        others = get_palette(world).others(color)
        if not others:
            return color
        return rng.choice(others)


class WeightedNeighborRefill(RefillPolicy):
    """New tokens lean toward the color below them.

    Vertical-run cells whose lower neighbor belonged to the same vertical run copy
    it with ``same_color_chance``; every other cell with an occupied lower
    neighbor copies it with ``different_color_chance``. Bottom-row cells and cells
    with nothing below are uniform. Cells are processed bottom row first so the
    lower neighbor is already resolved.
    """

    name = "weighted_neighbor"

    def __init__(self, same_color_chance: float, different_color_chance: float):
        self.same_color_chance = same_color_chance
        self.different_color_chance = different_color_chance

    def _fill(self, world: World, context: RefillContext, rng: random.Random, result: RefillResult) -> None:
        board = get_board(world)
        vertical_cells = set(context.vertical)
        for row, col in context.vertical:
            if board.get(row, col) is not None:
                continue
            color = self._pick(world, rng, (row, col), vertical_cells, in_vertical_run=True)
            self._spawn(world, result, color, row, col)
        for row, col in context.horizontal:
            if board.get(row, col) is not None:
                continue
            color = self._pick(world, rng, (row, col), vertical_cells, in_vertical_run=False)
            self._spawn(world, result, color, row, col)

    def _pick(self, world, rng, pos: Position, vertical_cells, *, in_vertical_run: bool) -> str:
        lower = below(pos)
        if lower is None:
            return self._uniform(world, rng)
        lower_color = color_at(world, *lower)
        if lower_color is None:
            return self._uniform(world, rng)
        if in_vertical_run and lower in vertical_cells:
            return self._copy_or_other(world, rng, lower_color, self.same_color_chance)
        return self._copy_or_other(world, rng, lower_color, self.different_color_chance)


class NeighborhoodMajorityRefill(RefillPolicy):
    """New token color drawn in proportion to the colors of its occupied 8-neighborhood."""

    name = "neighborhood_majority"

    def __init__(self, fallback_color: str):
        self.fallback_color = fallback_color

    def _fill(self, world: World, context: RefillContext, rng: random.Random, result: RefillResult) -> None:
        board = get_board(world)
        for row, col in list(context.vertical) + list(context.horizontal):
            if board.get(row, col) is not None:
                continue
            self._spawn(world, result, self._pick(world, rng, (row, col)), row, col)

    def _pick(self, world: World, rng: random.Random, pos: Position) -> str:
        board = get_board(world)
        tally: Dict[str, int] = {}
        for nrow, ncol in neighbors(pos, board.rows, board.cols, diagonal=True):
            color = color_at(world, nrow, ncol)
            if color is not None:
                tally[color] = tally.get(color, 0) + 1
        if not tally:
            return get_palette(world).resolve(self.fallback_color)
        roll = rng.randrange(sum(tally.values()))
        for color, count in tally.items():
            if roll < count:
                break
            roll -= count
        return color


class GravityRefill(RefillPolicy):
    """Existing tokens fall to close gaps (order preserved); the tops of columns refill uniformly."""

    name = "gravity"

    def _fill(self, world: World, context: RefillContext, rng: random.Random, result: RefillResult) -> None:
        board = get_board(world)
        for col in range(board.cols):
            write_row = 0
            for row in range(board.rows):
                entity = board.get(row, col)
                if entity is None:
                    continue
                if row != write_row:
                    board.set(row, col, None)
                    place_token(world, entity, write_row, col)
                    result.moves.append(
                        TokenMove(entity=entity, source=(row, col), target=(write_row, col), reason="gravity")
                    )
                write_row += 1
        for row, col in board.empty_positions():
            self._spawn(world, result, self._uniform(world, rng), row, col)


REFILL_POLICIES: Dict[str, Type[RefillPolicy]] = {
    WeightedNeighborRefill.name: WeightedNeighborRefill,
    NeighborhoodMajorityRefill.name: NeighborhoodMajorityRefill,
    GravityRefill.name: GravityRefill,
}


def create_refill_policy(
    name: str,
    *,
    same_color_chance: float = SAME_COLOR_SPAWN_CHANCE,
    different_color_chance: float = DIFFERENT_COLOR_SPAWN_CHANCE,
    fallback_color: str = "red",
) -> RefillPolicy:
    if name == WeightedNeighborRefill.name:
        return WeightedNeighborRefill(same_color_chance, different_color_chance)
    if name == NeighborhoodMajorityRefill.name:
        return NeighborhoodMajorityRefill(fallback_color)
    if name == GravityRefill.name:
        return GravityRefill()
    raise ValueError(f"Unknown refill policy {name!r}")
