from esper import World

from candyrush.components.cascade_state import CascadeState
from candyrush.components.game_state import GameMode, GameState
from candyrush.components.score_state import ScoreState


def get_or_create_cascade_state(world: World) -> CascadeState:
    """Return the shared CascadeState component, creating it if absent."""
    existing = list(world.get_component(CascadeState))
    if existing:
        return existing[0][1]
    state = CascadeState()
    world.create_entity(state)
    return state


def get_score_state(world: World) -> ScoreState:
    for _, state in world.get_component(ScoreState):
        return state
    raise RuntimeError("ScoreState not found; was the world created with create_world()?")


def get_game_state(world: World) -> GameState | None:
    for _, state in world.get_component(GameState):
        return state
    return None


def accepting_input(world: World) -> bool:
    """True while the level is being played (not paused, not finished, time remaining)."""
    state = get_game_state(world)
    if state is not None and state.mode != GameMode.PLAYING:
        return False
    timed = getattr(world, "timed", False)
    if timed and get_score_state(world).time_left <= 0:
        return False
    return True
