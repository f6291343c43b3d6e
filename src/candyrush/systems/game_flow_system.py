"""Level-attempt coordinator: countdown, pause/resume and the terminal outcome."""
from __future__ import annotations

import logging

from esper import World

from candyrush.components.game_state import GameMode, GameState
from candyrush.events.bus import (
    EventBus,
    EVENT_CASCADE_SETTLED,
    EVENT_GAME_MODE_CHANGED,
    EVENT_GAME_OVER,
    EVENT_GAME_PAUSE,
    EVENT_GAME_RESUME,
    EVENT_GAME_WON,
    EVENT_TICK,
    EVENT_TIME_CHANGED,
)
from candyrush.systems.score_system import ScoreSystem, star_rating
from candyrush.systems.state_utils import get_game_state, get_score_state

logger = logging.getLogger(__name__)


class GameFlowSystem:
    """Owns GameState transitions for one level attempt.

    - EVENT_TICK counts time_left down while PLAYING (timed levels only).
    - EVENT_GAME_PAUSE / EVENT_GAME_RESUME toggle PLAYING <-> PAUSED; the board is untouched.
    - EVENT_CASCADE_SETTLED after a resolved swap checks the goals, then the move budget.
    Exactly one of EVENT_GAME_WON / EVENT_GAME_OVER is published per attempt.
    """

    def __init__(self, world: World, event_bus: EventBus, score_system: ScoreSystem, *, timed: bool = True):
        self.world = world
        self.event_bus = event_bus
        self.score_system = score_system
        self.timed = timed
        setattr(self.world, "timed", timed)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_GAME_PAUSE, self.on_pause)
        self.event_bus.subscribe(EVENT_GAME_RESUME, self.on_resume)
        self.event_bus.subscribe(EVENT_CASCADE_SETTLED, self.on_cascade_settled)

    def _state(self) -> GameState:
        state = get_game_state(self.world)
        if state is None:
            state = GameState()
            self.world.create_entity(state)
        return state

    @property
    def mode(self) -> GameMode:
        return self._state().mode

    def _set_mode(self, mode: GameMode) -> None:
        state = self._state()
        previous = state.mode
        if previous == mode:
            return
        state.mode = mode
        self.event_bus.emit(EVENT_GAME_MODE_CHANGED, previous_mode=previous, new_mode=mode)

    def on_tick(self, sender, **kwargs):
        if not self.timed or self.mode != GameMode.PLAYING:
            return
        dt = kwargs.get('dt', 1 / 60)
        score = get_score_state(self.world)
        if score.time_left <= 0:
            return
        score.time_left = max(0.0, score.time_left - float(dt))
        self.event_bus.emit(EVENT_TIME_CHANGED, time_left=score.time_left)
        if score.time_left <= 0:
            self.finish(won=False, reason="time")

    def on_pause(self, sender, **kwargs):
        if self.mode == GameMode.PLAYING:
            self._set_mode(GameMode.PAUSED)

    def on_resume(self, sender, **kwargs):
        if self.mode == GameMode.PAUSED:
            self._set_mode(GameMode.PLAYING)

    def on_cascade_settled(self, sender, **kwargs):
        if not kwargs.get('depth'):
            return
        if self._state().finished:
            return
        if self.score_system.check_win():
            self.finish(won=True)
        elif get_score_state(self.world).moves_left <= 0:
            self.finish(won=False, reason="moves")

    def finish(self, *, won: bool, reason: str = "goals") -> bool:
        """Record the terminal outcome once; later calls are ignored and return False."""
        if self._state().finished:
            return False
        score = get_score_state(self.world).score
        if won:
            self._set_mode(GameMode.WON)
            stars = star_rating(score)
            logger.info("Level won with score %d (%d star(s))", score, stars)
            self.event_bus.emit(EVENT_GAME_WON, score=score, stars=stars)
        else:
            self._set_mode(GameMode.GAME_OVER)
            logger.info("Game over (%s) with score %d", reason, score)
            self.event_bus.emit(EVENT_GAME_OVER, reason=reason, score=score)
        return True

    def reset(self) -> None:
        self._set_mode(GameMode.PLAYING)
