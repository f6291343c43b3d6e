from esper import World

from candyrush.events.bus import EventBus, EVENT_MOUSE_PRESS, EVENT_TILE_CLICK
from candyrush.systems.board_ops import board_dimensions
from candyrush.ui.layout import pixel_to_cell

# arcade.MOUSE_BUTTON_LEFT
LEFT_BUTTON = 1


class InputSystem:
    """Maps left-button presses on the drawn board to EVENT_TILE_CLICK."""
    def __init__(self, event_bus: EventBus, window, world: World):
        self.event_bus = event_bus
        self.window = window
        self.world = world
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)

    def on_mouse_press(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        if x is None or y is None or kwargs.get('button') != LEFT_BUTTON:
            return
        rows, cols = board_dimensions(self.world)
        cell = pixel_to_cell(x, y, self.window.width, self.window.height, rows, cols)
        if cell is None:
            return
        self.event_bus.emit(EVENT_TILE_CLICK, row=cell[0], col=cell[1])
