"""Wires the engine for one level and exposes the calls collaborators make."""
from __future__ import annotations

import random
from typing import Tuple

from esper import World

from candyrush.components.game_state import GameMode
from candyrush.config.levels import LevelConfig, get_level
from candyrush.events.bus import EventBus, EVENT_GAME_PAUSE, EVENT_GAME_RESUME, EVENT_TICK
from candyrush.systems.board import BoardSystem
from candyrush.systems.board_ops import get_palette
from candyrush.systems.game_flow_system import GameFlowSystem
from candyrush.systems.match_resolution import MatchResolutionSystem
from candyrush.systems.refill import RefillPolicy, create_refill_policy
from candyrush.systems.score_system import ScoreSystem
from candyrush.systems.state_utils import get_score_state
from candyrush.systems.swap import SwapSystem
from candyrush.world import create_world, resolve_goals

Position = Tuple[int, int]


class MatchSession:
    """One level attempt: world, systems and the public engine API.

    Collaborators either call the methods here or publish the equivalent events
    on ``event_bus`` (EVENT_TILE_SWAP_REQUEST, EVENT_TICK, EVENT_GAME_PAUSE, ...).
    """

    def __init__(
        self,
        level: LevelConfig,
        *,
        event_bus: EventBus | None = None,
        rng: random.Random | None = None,
        refill_policy: RefillPolicy | None = None,
    ):
        self.level = level
        self.event_bus = event_bus or EventBus()
        self.rng = rng or random.Random()
        self.world: World = create_world(level, rng=self.rng)
        self.score_system = ScoreSystem(self.world, self.event_bus)
        self.game_flow_system = GameFlowSystem(
            self.world, self.event_bus, self.score_system, timed=level.time_limit > 0
        )
        self.swap_system = SwapSystem(self.world, self.event_bus, self.score_system)
        self.refill_policy = refill_policy or create_refill_policy(
            level.refill_policy,
            same_color_chance=level.same_color_chance,
            different_color_chance=level.different_color_chance,
            fallback_color=level.fallback_color,
        )
        self.match_resolution_system = MatchResolutionSystem(
            self.world,
            self.event_bus,
            self.swap_system,
            self.score_system,
            self.refill_policy,
            rng=self.rng,
            swap_delay=level.swap_delay,
            pass_delay=level.pass_delay,
        )
        self.board_system = BoardSystem(
            self.world,
            self.event_bus,
            rng=self.rng,
            max_build_attempts=level.max_build_attempts,
        )

    @classmethod
    def for_level(cls, level_id: str, **kwargs) -> "MatchSession":
        return cls(get_level(level_id), **kwargs)

    @property
    def score(self):
        return get_score_state(self.world)

    @property
    def mode(self) -> GameMode:
        return self.game_flow_system.mode

    def submit_swap(self, src: Position, dst: Position) -> bool:
        return self.match_resolution_system.submit_swap(tuple(src), tuple(dst))

    def tick(self, dt: float) -> None:
        self.event_bus.emit(EVENT_TICK, dt=dt)

    def pause(self) -> None:
        self.event_bus.emit(EVENT_GAME_PAUSE)

    def resume(self) -> None:
        self.event_bus.emit(EVENT_GAME_RESUME)

    def restart(self) -> None:
        """Reset score, mode and cascade state, then rebuild the board."""
        self.match_resolution_system.reset()
        self.score_system.reset(
            moves=self.level.moves,
            time_left=self.level.time_limit,
            goals=resolve_goals(get_palette(self.world), self.level.goals),
        )
        self.game_flow_system.reset()
        self.board_system.build()
