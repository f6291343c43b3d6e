from typing import Dict, Tuple

from esper import World

from candyrush.components.board_position import BoardPosition
from candyrush.components.game_state import GameMode
from candyrush.components.target_position import TargetPosition
from candyrush.components.token import Token
from candyrush.events.bus import (
    EventBus,
    EVENT_TICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_MOVED,
    EVENT_TILE_SELECTED,
)
from candyrush.systems.board_ops import get_board, get_palette
from candyrush.systems.state_utils import get_game_state, get_score_state
from candyrush.ui.layout import compute_board_geometry, grid_to_world

PADDING = 4
# Board units per second.
TWEEN_SPEED = 10.0


class RenderSystem:
    """Draws the board and HUD with arcade; tweens tokens toward their TargetPosition.

    arcade is imported inside process() so the engine and its tests stay headless.
    """
    def __init__(self, world: World, event_bus: EventBus, window):
        self.world = world
        self.event_bus = event_bus
        self.window = window
        self.selected = None
        self.draw_positions: Dict[int, Tuple[float, float]] = {}
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_TILE_MOVED, self.on_tile_moved)
        self.event_bus.subscribe(EVENT_TILE_SELECTED, self.on_tile_selected)
        self.event_bus.subscribe(EVENT_TILE_DESELECTED, self.on_tile_deselected)

    def on_tile_selected(self, sender, **kwargs):
        self.selected = (kwargs.get('row'), kwargs.get('col'))

    def on_tile_deselected(self, sender, **kwargs):
        self.selected = None

    def on_tile_moved(self, sender, **kwargs):
        entity = kwargs.get('entity')
        from_pos = kwargs.get('from_pos')
        if entity is None or from_pos is None or entity in self.draw_positions:
            return
        # New token: start the tween from where it spawned (above the board).
        self.draw_positions[entity] = grid_to_world(*from_pos, get_board(self.world).cell_spacing)

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get('dt', 1 / 60)
        step = TWEEN_SPEED * float(dt)
        alive = set()
        for ent, target in self.world.get_component(TargetPosition):
            alive.add(ent)
            x, y = self.draw_positions.get(ent, (target.x, target.y))
            self.draw_positions[ent] = (_approach(x, target.x, step), _approach(y, target.y, step))
        for ent in [ent for ent in self.draw_positions if ent not in alive]:
            del self.draw_positions[ent]

    def process(self):
        import arcade
        board = get_board(self.world)
        palette = get_palette(self.world)
        tile_size, start_x, start_y = compute_board_geometry(
            self.window.width, self.window.height, board.rows, board.cols
        )
        step = 1.0 + board.cell_spacing
        for row, col in board.positions():
            left = start_x + col * tile_size
            bottom = start_y + row * tile_size
            arcade.draw_lrbt_rectangle_outline(left, left + tile_size, bottom, bottom + tile_size, (60, 60, 60), 1)
        for ent, (token, pos, target) in self.world.get_components(Token, BoardPosition, TargetPosition):
            x, y = self.draw_positions.get(ent, (target.x, target.y))
            if y / step >= board.rows:
                continue
            left = start_x + (x / step) * tile_size + PADDING
            bottom = start_y + (y / step) * tile_size + PADDING
            size = tile_size - 2 * PADDING
            arcade.draw_lrbt_rectangle_filled(left, left + size, bottom, bottom + size, palette.rgb_for(token.color))
            if self.selected == (pos.row, pos.col):
                arcade.draw_lrbt_rectangle_outline(left, left + size, bottom, bottom + size, arcade.color.WHITE, 3)
        self._draw_hud(arcade, start_y + board.rows * tile_size + 12)

    def _draw_hud(self, arcade, top: float):
        score = get_score_state(self.world)
        state = get_game_state(self.world)
        line = f"Score {score.score}   x{score.multiplier}   Moves {score.moves_left}"
        if getattr(self.world, "timed", False):
            line += f"   Time {int(score.time_left)}"
        arcade.draw_text(line, 20, top + 36, arcade.color.WHITE, 16)
        goals = "   ".join(
            f"{color} {score.match_counts.get(color, 0)}/{goal}" for color, goal in score.goals.items()
        )
        arcade.draw_text(goals, 20, top + 10, arcade.color.LIGHT_GRAY, 12)
        banner = {
            GameMode.PAUSED: "Paused",
            GameMode.WON: "You win!",
            GameMode.GAME_OVER: "Game over",
        }.get(state.mode if state else GameMode.PLAYING)
        if banner:
            arcade.draw_text(
                banner, self.window.width / 2, self.window.height / 2,
                arcade.color.WHITE, 32, anchor_x="center",
            )


def _approach(current: float, target: float, step: float) -> float:
    if abs(target - current) <= step:
        return target
    return current + step if target > current else current - step
