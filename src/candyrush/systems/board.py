import random
from typing import Optional, Tuple

from esper import World

from candyrush.constants import MAX_BUILD_ATTEMPTS
from candyrush.events.bus import (
    EventBus,
    EVENT_BOARD_BUILT,
    EVENT_MOUSE_PRESS,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_REQUEST,
)
from candyrush.systems.board_ops import build_match_free_board, get_board
from candyrush.systems.state_utils import accepting_input

# arcade.MOUSE_BUTTON_RIGHT
RIGHT_BUTTON = 4


class BoardSystem:
    """Builds the level board and turns tile clicks into swap requests.

    Selection: the first click selects a tile, clicking it again deselects it,
    and a click on any other tile emits EVENT_TILE_SWAP_REQUEST for the pair
    (adjacency is checked by the swap validator, not here). Right-click clears
    the selection.
    """
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        rng: random.Random | None = None,
        max_build_attempts: int = MAX_BUILD_ATTEMPTS,
        build: bool = True,
    ):
        self.world = world
        self.event_bus = event_bus
        self.rng = rng or getattr(world, "random", None) or random.Random()
        self.max_build_attempts = max_build_attempts
        self.selected: Optional[Tuple[int, int]] = None
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)
        if build:
            self.build()

    def build(self) -> int:
        """(Re)build a match-free board; raises BoardBuildError when the palette is too small."""
        self.clear_selection(reason='rebuild')
        attempts = build_match_free_board(self.world, self.rng, max_attempts=self.max_build_attempts)
        board = get_board(self.world)
        self.event_bus.emit(EVENT_BOARD_BUILT, rows=board.rows, cols=board.cols, attempts=attempts)
        return attempts

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        if not accepting_input(self.world):
            return
        get_board(self.world).check_bounds(row, col)
        pos = (row, col)
        if self.selected == pos:
            self.clear_selection(reason='reselect')
        elif self.selected is None:
            self.selected = pos
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
        else:
            src = self.selected
            self.clear_selection(reason='swap')
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=src, dst=pos)

    def on_mouse_press(self, sender, **kwargs):
        if kwargs.get('button') != RIGHT_BUTTON:
            return
        self.clear_selection(reason='right_click')

    def clear_selection(self, *, reason: str) -> None:
        prev = self.selected
        if prev is None:
            return
        self.selected = None
        self.event_bus.emit(EVENT_TILE_DESELECTED, reason=reason, prev_row=prev[0], prev_col=prev[1])
