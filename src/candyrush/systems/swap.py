from typing import Tuple

from esper import World

from candyrush.events.bus import (
    EventBus,
    EVENT_TILE_MOVED,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_VALID,
)
from candyrush.systems.board_ops import get_board, swap_tokens
from candyrush.systems.match import find_matches
from candyrush.systems.score_system import ScoreSystem
from candyrush.utils.grid import is_adjacent

Position = Tuple[int, int]


class SwapSystem:
    """Validates a swap by performing it and scanning the board.

    A swap that creates no run is swapped straight back, so a rejected request
    leaves tokens, their coordinates and the score untouched.
    """

    def __init__(self, world: World, event_bus: EventBus, score_system: ScoreSystem):
        self.world = world
        self.event_bus = event_bus
        self.score_system = score_system

    def try_swap(self, src: Position, dst: Position) -> bool:
        if src == dst:
            raise ValueError(f"Cannot swap {src} with itself")
        board = get_board(self.world)
        board.check_bounds(*src)
        board.check_bounds(*dst)
        if not is_adjacent(src, dst):
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason="not_adjacent")
            return False
        ent_src = board.get(*src)
        ent_dst = board.get(*dst)
        swap_tokens(self.world, src, dst)
        if not find_matches(self.world).has_matches:
            swap_tokens(self.world, src, dst)
            self._emit_moves(ent_src, ent_dst, src, dst, reason="swap")
            self._emit_moves(ent_src, ent_dst, dst, src, reason="swap_revert")
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason="no_match")
            return False
        self.score_system.reset_multiplier()
        self._emit_moves(ent_src, ent_dst, src, dst, reason="swap")
        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst)
        return True

    def _emit_moves(self, ent_a, ent_b, a: Position, b: Position, *, reason: str) -> None:
        self.event_bus.emit(EVENT_TILE_MOVED, entity=ent_a, from_pos=a, to_pos=b, reason=reason)
        self.event_bus.emit(EVENT_TILE_MOVED, entity=ent_b, from_pos=b, to_pos=a, reason=reason)
