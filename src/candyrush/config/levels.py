"""Level definitions: board size, palette size, goals, budgets and refill policy.

Levels are keyed by identifier. The built-in table mirrors the shipped game
(Level1 weighted-neighbor refill, Level2 neighborhood-majority refill, every
other level gravity refill); additional levels can be loaded from JSON.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

from candyrush.constants import (
    DEFAULT_GOAL,
    DEFAULT_MOVES,
    DEFAULT_TIME_LIMIT,
    DIFFERENT_COLOR_SPAWN_CHANCE,
    GRID_COLS,
    GRID_ROWS,
    MAX_BUILD_ATTEMPTS,
    PASS_DELAY,
    SAME_COLOR_SPAWN_CHANCE,
    SWAP_DELAY,
)
from candyrush.systems.refill import REFILL_POLICIES

logger = logging.getLogger(__name__)

DEFAULT_REFILL_POLICY = "gravity"


@dataclass(frozen=True, slots=True)
class LevelConfig:
    level_id: str
    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    color_count: int = 5
    goals: Mapping[str, int] = field(default_factory=dict)
    moves: int = DEFAULT_MOVES
    time_limit: float = DEFAULT_TIME_LIMIT
    refill_policy: str = DEFAULT_REFILL_POLICY
    same_color_chance: float = SAME_COLOR_SPAWN_CHANCE
    different_color_chance: float = DIFFERENT_COLOR_SPAWN_CHANCE
    fallback_color: str = "red"
    swap_delay: float = SWAP_DELAY
    pass_delay: float = PASS_DELAY
    max_build_attempts: int = MAX_BUILD_ATTEMPTS

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Level {self.level_id!r}: board must be at least 1x1")
        if self.color_count <= 0:
            raise ValueError(f"Level {self.level_id!r}: color_count must be positive")
        if self.refill_policy not in REFILL_POLICIES:
            raise ValueError(
                f"Level {self.level_id!r}: unknown refill policy {self.refill_policy!r}"
            )
        for name in ("same_color_chance", "different_color_chance"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Level {self.level_id!r}: {name} must be within [0, 1], got {value}")
        if self.moves < 0 or self.time_limit < 0:
            raise ValueError(f"Level {self.level_id!r}: moves and time_limit cannot be negative")
        if self.swap_delay < 0 or self.pass_delay < 0:
            raise ValueError(f"Level {self.level_id!r}: pacing delays cannot be negative")
        if self.max_build_attempts <= 0:
            raise ValueError(f"Level {self.level_id!r}: max_build_attempts must be positive")
        if any(goal < 0 for goal in self.goals.values()):
            raise ValueError(f"Level {self.level_id!r}: goals cannot be negative")

    def headless(self) -> "LevelConfig":
        """Copy of this level with pacing collapsed to zero."""
        return replace(self, swap_delay=0.0, pass_delay=0.0)


def _uniform_goals(value: int) -> Dict[str, int]:
    return {color: value for color in ("red", "blue", "purple", "green", "yellow")}


LEVELS: Dict[str, LevelConfig] = {
    "Level1": LevelConfig(
        level_id="Level1",
        goals=_uniform_goals(DEFAULT_GOAL),
        refill_policy="weighted_neighbor",
    ),
    "Level2": LevelConfig(
        level_id="Level2",
        goals=_uniform_goals(DEFAULT_GOAL),
        refill_policy="neighborhood_majority",
        moves=25,
    ),
    "Level3": LevelConfig(
        level_id="Level3",
        goals=_uniform_goals(15),
        refill_policy="gravity",
        moves=30,
        time_limit=180.0,
    ),
}


def get_level(level_id: str) -> LevelConfig:
    """Return the configured level; unknown identifiers play with gravity refill."""
    level = LEVELS.get(level_id)
    if level is not None:
        return level
    logger.info("Level %r not registered; using default configuration", level_id)
    return LevelConfig(level_id=level_id, goals=_uniform_goals(DEFAULT_GOAL))


def level_from_dict(data: Mapping[str, Any]) -> LevelConfig:
    known = {f.name for f in fields(LevelConfig)}
    unknown = set(data) - known
    if unknown:
        logger.warning("Ignoring unknown level keys: %s", ", ".join(sorted(unknown)))
    kwargs = {key: value for key, value in data.items() if key in known}
    if "level_id" not in kwargs:
        raise ValueError("Level definition requires 'level_id'")
    if "goals" in kwargs:
        kwargs["goals"] = {str(color): int(goal) for color, goal in dict(kwargs["goals"]).items()}
    return LevelConfig(**kwargs)


def load_levels(path: Path | str, *, register: bool = True) -> list[LevelConfig]:
    """Load level definitions from a JSON file.

    The file holds either a list of level objects or ``{"levels": [...]}``.
    """
    with Path(path).open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    entries: Iterable[Mapping[str, Any]]
    if isinstance(payload, Mapping):
        entries = payload.get("levels", [])
    else:
        entries = payload
    levels = [level_from_dict(entry) for entry in entries]
    if register:
        for level in levels:
            LEVELS[level.level_id] = level
    return levels
