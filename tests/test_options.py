import dataclasses

import pytest

from river_trace import TracingOptions
from river_trace.options import STEP_SIZE_RANGE, COLOR_TOLERANCE_RANGE


def test_defaults():
    opts = TracingOptions()
    assert opts.step_size == 15
    assert opts.color_tolerance == 55.0
    assert opts.max_jump == 95.0
    assert opts.max_turn_angle_deg == 140.0
    assert opts.smoothness == 1
    assert opts.river is True
    assert opts.intermittent is False


def test_join_distance_follows_step_size():
    assert TracingOptions(step_size=20).join_distance == 30.0


def test_options_are_frozen():
    opts = TracingOptions()
    with pytest.raises(dataclasses.FrozenInstanceError):
        opts.step_size = 30


def test_clamped_limits_every_numeric_field():
    low = TracingOptions.clamped(step_size=1, color_tolerance=0, max_jump=1,
                                 max_turn_angle_deg=0, smoothness=-3)
    assert low.step_size == STEP_SIZE_RANGE[0]
    assert low.color_tolerance == COLOR_TOLERANCE_RANGE[0]
    assert low.max_jump == 15.0
    assert low.max_turn_angle_deg == 30.0
    assert low.smoothness == 0

    high = TracingOptions.clamped(step_size=500, color_tolerance=999, max_jump=999,
                                  max_turn_angle_deg=360, smoothness=50)
    assert high.step_size == 60
    assert high.color_tolerance == 130.0
    assert high.max_jump == 200.0
    assert high.max_turn_angle_deg == 170.0
    assert high.smoothness == 10


def test_clamped_keeps_integer_fields_integer():
    opts = TracingOptions.clamped(step_size=22.6, smoothness=2.2)
    assert opts.step_size == 23
    assert isinstance(opts.step_size, int)
    assert opts.smoothness == 2


def test_clamped_skips_none_values():
    assert TracingOptions.clamped(step_size=None, max_jump=None) == TracingOptions()


def test_clamped_rejects_unknown_names():
    with pytest.raises(TypeError):
        TracingOptions.clamped(stepsize=20)


def test_from_mapping_ignores_unknown_keys():
    opts = TracingOptions.from_mapping({"step_size": 25, "color_tolerance": 300, "theme": "dark",
                                        "intermittent": True})
    assert opts.step_size == 25
    assert opts.color_tolerance == 130.0
    assert opts.intermittent is True


def test_as_dict_round_trip():
    opts = TracingOptions(step_size=30, river=False)
    assert TracingOptions(**opts.as_dict()) == opts


def test_clamped_rounds_half_away_from_zero():
    assert TracingOptions.clamped(step_size=12.5).step_size == 13
    assert TracingOptions.clamped(smoothness=2.5).smoothness == 3


@pytest.mark.parametrize("text, expected", [("false", False), ("No", False), ("0", False),
                                            ("true", True), (" YES ", True), ("1", True)])
def test_from_mapping_parses_flag_strings(text, expected):
    opts = TracingOptions.from_mapping({"river": text, "intermittent": text})
    assert opts.river is expected
    assert opts.intermittent is expected


def test_clamped_rejects_unknown_flag_string():
    with pytest.raises(ValueError):
        TracingOptions.clamped(river="maybe")
