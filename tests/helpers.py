from __future__ import annotations

import random
from dataclasses import asdict
from typing import Iterable, Sequence

from esper import World

from candyrush.components.board_position import BoardPosition
from candyrush.components.target_position import TargetPosition
from candyrush.components.token import Token
from candyrush.config.levels import LevelConfig
from candyrush.session import MatchSession
from candyrush.systems.board_ops import get_board, load_layout
from candyrush.systems.refill import RefillPolicy, RefillContext, RefillResult
from candyrush.systems.state_utils import get_score_state

LETTERS = {
    'R': 'red',
    'B': 'blue',
    'P': 'purple',
    'G': 'green',
    'Y': 'yellow',
}


def expand(rows: Sequence[str]) -> list[list[str]]:
    """Turn ["RRB", "GBR"] into color names. The first string is row 0 (the bottom row)."""
    return [[LETTERS[ch] for ch in line] for line in rows]


def make_session(
    rows: Sequence[str],
    *,
    policy: str = "gravity",
    refill_policy: RefillPolicy | None = None,
    refill_rng: random.Random | None = None,
    goals: dict | None = None,
    moves: int = 20,
    time_limit: float = 0.0,
    swap_delay: float = 0.0,
    pass_delay: float = 0.0,
    seed: int = 7,
) -> MatchSession:
    """Session whose board is replaced by the given layout; refill randomness can be scripted."""
    level = LevelConfig(
        level_id="test",
        rows=len(rows),
        cols=len(rows[0]),
        goals=goals or {},
        moves=moves,
        time_limit=time_limit,
        refill_policy=policy,
        swap_delay=swap_delay,
        pass_delay=pass_delay,
    )
    session = MatchSession(level, rng=random.Random(seed), refill_policy=refill_policy)
    load_layout(session.world, expand(rows))
    if refill_rng is not None:
        session.match_resolution_system.rng = refill_rng
    return session


def grid_letters(world: World) -> list[str]:
    board = get_board(world)
    reverse = {name: letter for letter, name in LETTERS.items()}
    lines = []
    for row in range(board.rows):
        line = ""
        for col in range(board.cols):
            entity = board.get(row, col)
            line += "." if entity is None else reverse[world.component_for_entity(entity, Token).color]
        lines.append(line)
    return lines


def snapshot(world: World):
    """Everything a rejected swap must leave untouched."""
    board = get_board(world)
    cells = []
    for row, col in board.positions():
        entity = board.get(row, col)
        pos = world.component_for_entity(entity, BoardPosition)
        target = world.component_for_entity(entity, TargetPosition)
        color = world.component_for_entity(entity, Token).color
        cells.append((row, col, entity, color, pos.row, pos.col, target.x, target.y))
    return cells, asdict(get_score_state(world))


def assert_board_consistent(world: World) -> None:
    board = get_board(world)
    assert board.is_full(), f"empty cells left: {board.empty_positions()}"
    seen = set()
    for row, col in board.positions():
        entity = board.get(row, col)
        pos = world.component_for_entity(entity, BoardPosition)
        assert (pos.row, pos.col) == (row, col)
        seen.add(entity)
    tokens = {ent for ent, _ in world.get_component(Token)}
    assert tokens == seen, "token entities outside the board"


def capture(bus, *names):
    """Subscribe to events and collect their payloads in order as (name, payload)."""
    received = []
    for name in names:
        bus.subscribe(name, lambda sender, _name=name, **payload: received.append((_name, payload)))
    return received


class ScriptedRandom(random.Random):
    """random.Random whose random()/choice()/randrange() replay scripted values first."""

    def __init__(self, *, randoms: Iterable[float] = (), choices: Iterable[str] = (),
                 randranges: Iterable[int] = (), seed: int = 0):
        super().__init__(seed)
        self.randoms = list(randoms)
        self.choices = list(choices)
        self.randranges = list(randranges)
        self.offered: list[list] = []
        self.ranged: list[tuple] = []

    def getrandbits(self, k):
        return super().getrandbits(k)

    def random(self):
        if self.randoms:
            return self.randoms.pop(0)
        return super().random()

    def choice(self, seq):
        self.offered.append(list(seq))
        if self.choices:
            value = self.choices.pop(0)
            assert value in seq, f"scripted {value!r} not among {list(seq)}"
            return value
        return super().choice(seq)

    def randrange(self, *args, **kwargs):
        self.ranged.append(args)
        if self.randranges:
            return self.randranges.pop(0)
        return super().randrange(*args, **kwargs)


class ScriptedRefill(RefillPolicy):
    """Fills each pass's vacated cells (bottom row first) with the next scripted colors."""

    name = "scripted"

    def __init__(self, passes: Sequence[str]):
        self.passes = [list(expand([line])[0]) for line in passes]
        self.contexts: list[RefillContext] = []

    def _fill(self, world, context: RefillContext, rng, result: RefillResult) -> None:
        self.contexts.append(context)
        colors = self.passes.pop(0) if self.passes else []
        for row, col in context.all_positions():
            color = colors.pop(0) if colors else 'purple'
            self._spawn(world, result, color, row, col)
