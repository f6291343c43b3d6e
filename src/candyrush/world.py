import logging
import random
from typing import Dict

from esper import World

from candyrush.components.board import Board
from candyrush.components.cascade_state import CascadeState
from candyrush.components.game_state import GameMode, GameState
from candyrush.components.score_state import ScoreState
from candyrush.components.token_colors import TokenColors
from candyrush.config.levels import LevelConfig

logger = logging.getLogger(__name__)

# Canonical palette, in spawn order; a level's color_count takes the first N.
PALETTE = {
    'red':    (220, 40, 40),
    'blue':   (40, 80, 220),
    'purple': (128, 0, 128),
    'green':  (40, 190, 70),
    'yellow': (235, 215, 40),
}


def resolve_goals(palette: TokenColors, goals) -> Dict[str, int]:
    """Map configured goal colors onto the palette; unknown names fall back to the default color."""
    resolved: Dict[str, int] = {}
    for name, goal in goals.items():
        color = palette.resolve(name)
        resolved[color] = max(resolved.get(color, 0), int(goal))
    return resolved


def create_world(level: LevelConfig, *, rng: random.Random | None = None) -> World:
    """Create the singleton entities for a level; the board is left empty for BoardSystem to build."""
    world = World()
    setattr(world, "random", rng or random.Random())

    names = list(PALETTE.keys())
    if level.color_count > len(names):
        logger.warning(
            "Level %r asks for %d colors; palette has %d",
            level.level_id, level.color_count, len(names),
        )
    palette = TokenColors(
        colors=dict(PALETTE),
        spawnable=names[:level.color_count],
        default=level.fallback_color,
    )
    world.create_entity(palette)
    world.create_entity(Board(rows=level.rows, cols=level.cols))
    world.create_entity(GameState(mode=GameMode.PLAYING, level_id=level.level_id))
    world.create_entity(
        ScoreState(
            moves_left=level.moves,
            time_left=level.time_limit,
            goals=resolve_goals(palette, level.goals),
        )
    )
    world.create_entity(CascadeState())
    return world
