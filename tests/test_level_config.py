import json

import pytest

from candyrush.config import levels as levels_module
from candyrush.config.levels import LEVELS, LevelConfig, get_level, level_from_dict, load_levels
from candyrush.world import create_world
from candyrush.systems.board_ops import get_palette
from candyrush.systems.state_utils import get_score_state


def test_builtin_levels_select_refill_policies():
    assert LEVELS["Level1"].refill_policy == "weighted_neighbor"
    assert LEVELS["Level2"].refill_policy == "neighborhood_majority"
    assert LEVELS["Level3"].refill_policy == "gravity"


def test_unknown_level_uses_gravity_defaults():
    level = get_level("Level99")
    assert level.level_id == "Level99"
    assert level.refill_policy == "gravity"


@pytest.mark.parametrize("kwargs", [
    {"rows": 0},
    {"color_count": 0},
    {"refill_policy": "teleport"},
    {"same_color_chance": 1.5},
    {"different_color_chance": -0.1},
    {"moves": -1},
    {"pass_delay": -1.0},
    {"goals": {"red": -2}},
])
def test_invalid_levels_rejected(kwargs):
    with pytest.raises(ValueError):
        LevelConfig(level_id="bad", **kwargs)


def test_headless_copy_drops_pacing():
    level = LEVELS["Level1"].headless()
    assert level.swap_delay == 0.0 and level.pass_delay == 0.0
    assert level.refill_policy == "weighted_neighbor"


def test_level_from_dict_warns_on_unknown_keys(caplog):
    with caplog.at_level("WARNING"):
        level = level_from_dict({"level_id": "x", "rows": 4, "sparkles": True})
    assert level.rows == 4
    assert "sparkles" in caplog.text


def test_level_from_dict_requires_id():
    with pytest.raises(ValueError):
        level_from_dict({"rows": 4})


def test_load_levels_registers_file_entries(tmp_path, monkeypatch):
    monkeypatch.setattr(levels_module, "LEVELS", dict(LEVELS))
    path = tmp_path / "levels.json"
    path.write_text(json.dumps({"levels": [
        {"level_id": "Bonus", "rows": 5, "cols": 6, "goals": {"blue": 3}, "refill_policy": "neighborhood_majority"},
    ]}))
    loaded = load_levels(path)
    assert [level.level_id for level in loaded] == ["Bonus"]
    assert get_level("Bonus").goals == {"blue": 3}
    assert get_level("Bonus").refill_policy == "neighborhood_majority"


def test_load_levels_accepts_plain_list(tmp_path):
    path = tmp_path / "levels.json"
    path.write_text(json.dumps([{"level_id": "A"}, {"level_id": "B", "moves": 3}]))
    loaded = load_levels(path, register=False)
    assert [level.moves for level in loaded] == [20, 3]
    assert "A" not in LEVELS


def test_unknown_goal_color_falls_back_to_default(caplog):
    with caplog.at_level("WARNING"):
        world = create_world(LevelConfig(level_id="g", goals={"orange": 4}))
    assert get_score_state(world).goals == {"red": 4}
    assert "orange" in caplog.text


def test_goal_outside_level_colors_falls_back_with_warning(caplog):
    with caplog.at_level("WARNING"):
        world = create_world(LevelConfig(level_id="g3", color_count=3, goals={"yellow": 1, "red": 2}))
    assert get_palette(world).spawnable_colors() == ["red", "blue", "purple"]
    assert get_score_state(world).goals == {"red": 2}
    assert "yellow" in caplog.text


def test_fallback_color_outside_level_colors_is_replaced(caplog):
    with caplog.at_level("WARNING"):
        world = create_world(LevelConfig(level_id="f3", color_count=3, fallback_color="yellow"))
    assert get_palette(world).default == "red"
    assert "yellow" in caplog.text
