"""Entry point for the CandyRush match-three game.

Sets up the engine session and an arcade window that renders it and feeds it input.
Usage: python src/main.py [LEVEL_ID]
"""
import logging
import sys

import arcade

from candyrush.events.bus import EVENT_GAME_PAUSE, EVENT_GAME_RESUME, EVENT_MOUSE_PRESS
from candyrush.components.game_state import GameMode
from candyrush.session import MatchSession
from candyrush.systems.input import InputSystem
from candyrush.systems.render import RenderSystem


class CandyRushWindow(arcade.Window):
    def __init__(self, level_id: str):
        super().__init__(800, 700, "CandyRush")
        self.set_update_rate(1 / 60)
        self.background_color = arcade.color.BLACK
        self.session = MatchSession.for_level(level_id)
        self.event_bus = self.session.event_bus
        self.render_system = RenderSystem(self.session.world, self.event_bus, self)
        self.input_system = InputSystem(self.event_bus, self, self.session.world)

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        self.session.tick(delta_time)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        self.event_bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=button)

    def on_key_press(self, symbol: int, modifiers: int):
        if symbol in (arcade.key.ESCAPE, arcade.key.P):
            if self.session.mode == GameMode.PAUSED:
                self.event_bus.emit(EVENT_GAME_RESUME)
            else:
                self.event_bus.emit(EVENT_GAME_PAUSE)
        elif symbol == arcade.key.R:
            self.session.restart()


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    level_id = sys.argv[1] if len(sys.argv) > 1 else "Level1"
    CandyRushWindow(level_id)
    arcade.run()


if __name__ == "__main__":
    main()
