import random

import pytest

from candyrush.components.cascade_state import CascadePhase
from candyrush.config.levels import LevelConfig
from candyrush.events.bus import (
    EVENT_ANIMATION_COMPLETE,
    EVENT_CASCADE_SETTLED,
    EVENT_CASCADE_STEP,
    EVENT_REFILL_COMPLETED,
    EVENT_SCORE_CHANGED,
    EVENT_TILE_SWAP_REJECTED,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILES_REMOVED,
)
from candyrush.session import MatchSession
from candyrush.systems.board_ops import find_valid_swaps
from candyrush.systems.match import find_matches
from tests.helpers import (
    ScriptedRandom,
    ScriptedRefill,
    assert_board_consistent,
    capture,
    grid_letters,
    make_session,
)

ONE_MOVE = ["RRB", "GBR", "BGY"]
# Gravity top-up for ONE_MOVE that leaves GBB / BGY / YRP.
ONE_MOVE_FILL = ['yellow', 'red', 'purple']


def test_single_pass_row_of_four():
    session = make_session(
        ["RRRBR"], refill_rng=ScriptedRandom(choices=['green', 'yellow', 'green', 'yellow'])
    )
    events = capture(session.event_bus, EVENT_TILES_REMOVED, EVENT_SCORE_CHANGED, EVENT_CASCADE_SETTLED)

    assert session.submit_swap((0, 3), (0, 4)) is True

    assert grid_letters(session.world) == ["GYGYB"]
    assert session.score.score == 400
    assert session.score.match_counts['red'] == 1
    assert session.score.moves_left == 19
    assert session.score.multiplier == 1
    assert events == [
        (EVENT_TILES_REMOVED, {'positions': [(0, 0), (0, 1), (0, 2), (0, 3)], 'colors': {'red': 4}, 'depth': 1}),
        (EVENT_SCORE_CHANGED, {'score': 400, 'delta': 400}),
        (EVENT_CASCADE_SETTLED, {'depth': 1}),
    ]


def test_three_pass_cascade_scores_with_growing_multiplier():
    refill = ScriptedRefill(["PBB", "YYY", "RBR"])
    session = make_session(["RRBRGY"], refill_policy=refill)
    steps = capture(session.event_bus, EVENT_CASCADE_STEP)
    deltas = []
    session.event_bus.subscribe(EVENT_SCORE_CHANGED, lambda s, **k: deltas.append(k['delta']))
    settled = {}
    session.event_bus.subscribe(EVENT_CASCADE_SETTLED, lambda s, **k: settled.update(k))

    assert session.submit_swap((0, 2), (0, 3)) is True

    assert [payload['depth'] for _, payload in steps] == [1, 2, 3]
    assert deltas == [300, 600, 900]
    assert session.score.score == 1800
    assert session.score.moves_left == 19
    assert session.score.multiplier == 1
    assert settled == {'depth': 3}
    assert grid_letters(session.world) == ["PRBRGY"]
    assert {c: session.score.match_counts.get(c) for c in ('red', 'blue', 'yellow')} == {
        'red': 1, 'blue': 1, 'yellow': 1,
    }


def test_refill_context_tracks_run_orientation():
    refill = ScriptedRefill(["PGY"])
    session = make_session(["RRB", "GBR", "BGY"], refill_policy=refill)
    assert session.submit_swap((0, 2), (1, 2)) is True
    context = refill.contexts[0]
    assert context.horizontal == ((0, 0), (0, 1), (0, 2))
    assert context.vertical == ()


def test_refill_completed_names_policy():
    session = make_session(ONE_MOVE, refill_rng=ScriptedRandom(choices=ONE_MOVE_FILL))
    refills = []
    session.event_bus.subscribe(EVENT_REFILL_COMPLETED, lambda s, **k: refills.append(k))
    session.submit_swap((0, 2), (1, 2))
    assert refills == [{'new_tiles': [(2, 0), (2, 1), (2, 2)], 'policy': 'gravity'}]
    assert grid_letters(session.world) == ["GBB", "BGY", "YRP"]


def test_swap_request_event_drives_resolution():
    session = make_session(ONE_MOVE, refill_rng=ScriptedRandom(choices=ONE_MOVE_FILL))
    session.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=(0, 2), dst=(1, 2))
    assert session.score.score == 300
    assert session.match_resolution_system.idle


@pytest.mark.parametrize("policy", ["weighted_neighbor", "neighborhood_majority", "gravity"])
def test_cascades_terminate_on_stable_boards(policy):
    exercised = 0
    for seed in range(10):
        level = LevelConfig(level_id="t", rows=6, cols=6, refill_policy=policy,
                            swap_delay=0.0, pass_delay=0.0, time_limit=0.0)
        session = MatchSession(level, rng=random.Random(seed))
        for _ in range(3):
            swaps = find_valid_swaps(session.world)
            if not swaps:
                break
            moves_before = session.score.moves_left
            assert session.submit_swap(*swaps[0]) is True
            exercised += 1
            assert session.match_resolution_system.idle
            assert not find_matches(session.world).has_matches
            assert_board_consistent(session.world)
            assert session.score.moves_left == moves_before - 1
            assert session.score.multiplier == 1
    assert exercised > 0


def test_paced_resolution_rejects_swaps_while_busy():
    session = make_session(ONE_MOVE, refill_rng=ScriptedRandom(choices=ONE_MOVE_FILL),
                           swap_delay=0.2, pass_delay=1.0)
    rejected = capture(session.event_bus, EVENT_TILE_SWAP_REJECTED)
    settled = capture(session.event_bus, EVENT_CASCADE_SETTLED)
    state = session.match_resolution_system.state

    assert session.submit_swap((0, 2), (1, 2)) is True
    assert state.phase == CascadePhase.AWAITING_SWAP_OUTCOME
    assert session.score.score == 0

    assert session.submit_swap((2, 0), (2, 1)) is False
    assert rejected == [(EVENT_TILE_SWAP_REJECTED, {'src': (2, 0), 'dst': (2, 1), 'reason': 'busy'})]

    session.tick(0.15)
    assert state.phase == CascadePhase.AWAITING_SWAP_OUTCOME
    session.tick(0.15)
    assert state.phase == CascadePhase.RESOLVING
    assert session.score.score == 300
    assert settled == []

    session.tick(0.5)
    assert state.phase == CascadePhase.RESOLVING
    session.event_bus.emit(EVENT_ANIMATION_COMPLETE)
    assert state.phase == CascadePhase.IDLE
    assert settled == [(EVENT_CASCADE_SETTLED, {'depth': 1})]
    assert session.score.moves_left == 19


def test_pause_freezes_pacing():
    session = make_session(ONE_MOVE, refill_rng=ScriptedRandom(choices=ONE_MOVE_FILL),
                           swap_delay=0.2, pass_delay=1.0)
    state = session.match_resolution_system.state
    session.submit_swap((0, 2), (1, 2))
    session.pause()
    session.tick(5.0)
    session.event_bus.emit(EVENT_ANIMATION_COMPLETE)
    assert state.phase == CascadePhase.AWAITING_SWAP_OUTCOME
    assert state.wait_remaining == pytest.approx(0.2)

    session.resume()
    session.tick(0.2)
    assert state.phase == CascadePhase.RESOLVING
    session.tick(1.0)
    assert state.phase == CascadePhase.IDLE


def test_paced_and_immediate_resolution_agree():
    fills = ["PBB", "YYY", "RBR"]
    immediate = make_session(["RRBRGY"], refill_policy=ScriptedRefill(fills))
    paced = make_session(["RRBRGY"], refill_policy=ScriptedRefill(fills), swap_delay=0.2, pass_delay=0.5)

    immediate.submit_swap((0, 2), (0, 3))
    paced.submit_swap((0, 2), (0, 3))
    for _ in range(40):
        if paced.match_resolution_system.idle:
            break
        paced.tick(0.1)

    assert paced.match_resolution_system.idle
    assert grid_letters(paced.world) == grid_letters(immediate.world)
    assert paced.score.score == immediate.score.score == 1800


def test_invalid_swap_settles_without_depth():
    session = make_session(["RBG", "GRB", "BGR"], swap_delay=0.2)
    settled = capture(session.event_bus, EVENT_CASCADE_SETTLED)
    assert session.submit_swap((0, 0), (0, 1)) is False
    assert not session.match_resolution_system.idle
    session.tick(0.25)
    assert session.match_resolution_system.idle
    assert settled == [(EVENT_CASCADE_SETTLED, {'depth': 0})]
