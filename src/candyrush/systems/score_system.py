from __future__ import annotations

from typing import Mapping

from esper import World

from candyrush.components.score_state import ScoreState
from candyrush.constants import POINTS_PER_TILE, STAR_THRESHOLDS, TILES_PER_MATCH
from candyrush.events.bus import (
    EventBus,
    EVENT_MATCH_COUNT_CHANGED,
    EVENT_MOVES_CHANGED,
    EVENT_MULTIPLIER_CHANGED,
    EVENT_SCORE_CHANGED,
)
from candyrush.systems.state_utils import get_score_state


def star_rating(score: int) -> int:
    """Stars awarded on the win screen."""
    for threshold, stars in STAR_THRESHOLDS:
        if score >= threshold:
            return stars
    return 1


class ScoreSystem:
    """Score, combo multiplier, per-color goals and move budget.

    Logic:
      - add_score is called once per cascade pass with the deduplicated count of
        removed tokens, at the multiplier in effect before the pass increments it.
      - record_color_matches converts removed tokens to match units (3 tokens = 1).
      - use_move is called once per resolved swap, however many passes it took.
    Every mutation publishes its HUD event after the state has been updated.
    """

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus

    @property
    def state(self) -> ScoreState:
        return get_score_state(self.world)

    def add_score(self, matched_count: int) -> int:
        if matched_count <= 0:
            return 0
        state = self.state
        delta = matched_count * POINTS_PER_TILE * state.multiplier
        state.score += delta
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=state.score, delta=delta)
        return delta

    def record_color_matches(self, color: str, removed_count: int) -> int:
        units = removed_count // TILES_PER_MATCH
        if units <= 0:
            return 0
        state = self.state
        state.match_counts[color] = state.match_counts.get(color, 0) + units
        self.event_bus.emit(
            EVENT_MATCH_COUNT_CHANGED,
            color=color,
            count=state.match_counts[color],
            goal=state.goals.get(color, 0),
            delta=units,
        )
        return units

    def increase_multiplier(self) -> None:
        state = self.state
        state.multiplier += 1
        self.event_bus.emit(EVENT_MULTIPLIER_CHANGED, multiplier=state.multiplier)

    def reset_multiplier(self) -> None:
        state = self.state
        if state.multiplier == 1:
            return
        state.multiplier = 1
        self.event_bus.emit(EVENT_MULTIPLIER_CHANGED, multiplier=1)

    def use_move(self) -> bool:
        """Spend one move; returns True when the budget is exhausted."""
        state = self.state
        if state.moves_left > 0:
            state.moves_left -= 1
            self.event_bus.emit(EVENT_MOVES_CHANGED, moves_left=state.moves_left)
        return state.moves_left == 0

    def check_win(self) -> bool:
        """True once every goal color has reached its threshold. A level without goals is never won."""
        state = self.state
        if not state.goals:
            return False
        return all(state.match_counts.get(color, 0) >= goal for color, goal in state.goals.items())

    def reset(self, *, moves: int, time_left: float, goals: Mapping[str, int]) -> None:
        state = self.state
        state.score = 0
        state.multiplier = 1
        state.moves_left = moves
        state.time_left = time_left
        state.goals = dict(goals)
        state.match_counts = {color: 0 for color in state.goals}
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=0, delta=0)
        self.event_bus.emit(EVENT_MULTIPLIER_CHANGED, multiplier=1)
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_left=moves)
