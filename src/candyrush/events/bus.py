from blinker import Signal
from typing import Dict

class EventBus:
    """Named blinker signals connecting the engine systems and the front end.

    Handlers receive the bus as sender plus the payload as keyword arguments.
    """
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references: systems are often constructed without being stored.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_MOUSE_PRESS = "mouse_press"                  # payload: x, y, button
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_BOARD_BUILT = "board_built"                  # payload: rows=int, cols=int, attempts=int
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str, prev_row, prev_col
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c)
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c), reason=str
EVENT_TILE_SWAP_REJECTED = "tile_swap_rejected"    # payload: src=(r,c), dst=(r,c), reason=str
EVENT_TILE_MOVED = "tile_moved"                    # payload: entity=int, from_pos=(r,c), to_pos=(r,c), reason=str
EVENT_TILES_REMOVED = "tiles_removed"              # payload: positions=[(r,c),...], colors=dict[str,int], depth=int
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tiles=[(r,c),...], policy=str
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth=int, positions=[(r,c),...]
EVENT_CASCADE_SETTLED = "cascade_settled"          # payload: depth=int


# ============================================================================
# ANIMATION
# ============================================================================
EVENT_ANIMATION_COMPLETE = "animation_complete"    # payload: kind=str


# ============================================================================
# SCORE & GOALS
# ============================================================================
EVENT_SCORE_CHANGED = "score_changed"              # payload: score=int, delta=int
EVENT_MULTIPLIER_CHANGED = "multiplier_changed"    # payload: multiplier=int
EVENT_MATCH_COUNT_CHANGED = "match_count_changed"  # payload: color=str, count=int, goal=int, delta=int
EVENT_MOVES_CHANGED = "moves_changed"              # payload: moves_left=int
EVENT_TIME_CHANGED = "time_changed"                # payload: time_left=float


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_PAUSE = "game_pause"                    # payload: None
EVENT_GAME_RESUME = "game_resume"                  # payload: None
EVENT_GAME_MODE_CHANGED = "game_mode_changed"      # payload: previous_mode=GameMode|None, new_mode=GameMode
EVENT_GAME_OVER = "game_over"                      # payload: reason=str, score=int
EVENT_GAME_WON = "game_won"                        # payload: score=int, stars=int
