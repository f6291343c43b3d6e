from __future__ import annotations

import logging
import random
from typing import Tuple

from esper import World

from candyrush.components.cascade_state import CascadePhase, CascadeState
from candyrush.components.game_state import GameMode
from candyrush.constants import PASS_DELAY, SWAP_DELAY
from candyrush.events.bus import (
    EventBus,
    EVENT_ANIMATION_COMPLETE,
    EVENT_CASCADE_SETTLED,
    EVENT_CASCADE_STEP,
    EVENT_REFILL_COMPLETED,
    EVENT_TICK,
    EVENT_TILE_MOVED,
    EVENT_TILE_SWAP_REJECTED,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILES_REMOVED,
)
from candyrush.systems.board_ops import remove_tokens
from candyrush.systems.match import MatchSet, find_matches
from candyrush.systems.refill import RefillContext, RefillPolicy
from candyrush.systems.score_system import ScoreSystem
from candyrush.systems.state_utils import accepting_input, get_game_state, get_or_create_cascade_state
from candyrush.systems.swap import SwapSystem

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class MatchResolutionSystem:
    """Drives a swap request through validation and the remove -> refill -> rescan cascade.

    Phases (CascadeState.phase):
      IDLE                   -> accepts one swap request; anything else is rejected as busy.
      AWAITING_SWAP_OUTCOME  -> swap already validated; waits swap_delay for the swap animation.
                                An invalid swap returns to IDLE here without resolving.
      RESOLVING              -> one pass per step, pass_delay apart, until a rescan finds no runs.
    Waits count down on EVENT_TICK (frozen while paused) and end early on
    EVENT_ANIMATION_COMPLETE. With both delays at zero the whole sequence runs
    inside submit_swap.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        swap_system: SwapSystem,
        score_system: ScoreSystem,
        refill_policy: RefillPolicy,
        *,
        rng: random.Random | None = None,
        swap_delay: float = SWAP_DELAY,
        pass_delay: float = PASS_DELAY,
    ):
        self.world = world
        self.event_bus = event_bus
        self.swap_system = swap_system
        self.score_system = score_system
        self.refill_policy = refill_policy
        self.rng = rng or getattr(world, "random", None) or random.Random()
        self.swap_delay = swap_delay
        self.pass_delay = pass_delay
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_ANIMATION_COMPLETE, self.on_animation_complete)
        get_or_create_cascade_state(self.world)

    @property
    def state(self) -> CascadeState:
        return get_or_create_cascade_state(self.world)

    @property
    def idle(self) -> bool:
        return self.state.phase == CascadePhase.IDLE

    def submit_swap(self, src: Position, dst: Position) -> bool:
        """Validate and start resolving a swap. Returns whether the swap was committed."""
        state = self.state
        if state.phase != CascadePhase.IDLE:
            self.event_bus.emit(EVENT_TILE_SWAP_REJECTED, src=src, dst=dst, reason="busy")
            return False
        if not accepting_input(self.world):
            self.event_bus.emit(EVENT_TILE_SWAP_REJECTED, src=src, dst=dst, reason="inactive")
            return False
        accepted = self.swap_system.try_swap(src, dst)
        state.phase = CascadePhase.AWAITING_SWAP_OUTCOME
        state.swap_src = src
        state.swap_dst = dst
        state.swap_accepted = accepted
        state.depth = 0
        state.wait_remaining = self.swap_delay
        self._advance()
        return accepted

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        self.submit_swap(tuple(src), tuple(dst))

    def on_tick(self, sender, **kwargs):
        state = self.state
        if state.phase == CascadePhase.IDLE or self._paused():
            return
        dt = kwargs.get('dt', 1 / 60)
        state.wait_remaining = max(0.0, state.wait_remaining - float(dt))
        self._advance()

    def on_animation_complete(self, sender, **kwargs):
        state = self.state
        if state.phase == CascadePhase.IDLE or self._paused():
            return
        state.wait_remaining = 0.0
        self._advance()

    def reset(self) -> None:
        state = self.state
        state.phase = CascadePhase.IDLE
        state.depth = 0
        state.wait_remaining = 0.0
        state.swap_src = None
        state.swap_dst = None
        state.swap_accepted = False
        state.last_removed = []

    def _paused(self) -> bool:
        game_state = get_game_state(self.world)
        return game_state is not None and game_state.mode == GameMode.PAUSED

    def _advance(self) -> None:
        state = self.state
        while state.wait_remaining <= 0.0:
            if state.phase == CascadePhase.AWAITING_SWAP_OUTCOME:
                if not state.swap_accepted:
                    self._settle()
                    return
                state.phase = CascadePhase.RESOLVING
            elif state.phase == CascadePhase.RESOLVING:
                matches = find_matches(self.world)
                if not matches.has_matches:
                    self._complete_cascade()
                    return
                self._run_pass(matches)
                state.wait_remaining = self.pass_delay
            else:
                return

    def _run_pass(self, matches: MatchSet) -> None:
        state = self.state
        state.depth += 1
        positions = matches.positions
        context = RefillContext.from_matches(matches)
        self.event_bus.emit(EVENT_CASCADE_STEP, depth=state.depth, positions=positions)
        removed = remove_tokens(self.world, positions)
        state.last_removed = positions
        self.event_bus.emit(EVENT_TILES_REMOVED, positions=positions, colors=dict(removed), depth=state.depth)
        result = self.refill_policy.refill(self.world, context, self.rng)
        for move in result.moves:
            self.event_bus.emit(
                EVENT_TILE_MOVED,
                entity=move.entity,
                from_pos=move.source,
                to_pos=move.target,
                reason=move.reason,
            )
        self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=result.new_tiles, policy=self.refill_policy.name)
        self.score_system.add_score(len(positions))
        for color, count in removed.items():
            self.score_system.record_color_matches(color, count)
        self.score_system.increase_multiplier()
        logger.debug(
            "Cascade pass %d removed %d token(s) %s; %d refilled by %s",
            state.depth, len(positions), removed, len(result.new_tiles), self.refill_policy.name,
        )

    def _complete_cascade(self) -> None:
        self.score_system.use_move()
        self.score_system.reset_multiplier()
        self._settle()

    def _settle(self) -> None:
        state = self.state
        depth = state.depth
        self.reset()
        self.event_bus.emit(EVENT_CASCADE_SETTLED, depth=depth)
