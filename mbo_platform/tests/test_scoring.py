import math

import pytest

from mbo_platform.services.scoring import (
    ScoringError,
    achieved_value,
    calculate_economic_value,
    calculate_mbo_target,
    numeric_multiplier,
    qualitative_multiplier,
    round_half_up,
    score_report,
)


def test_linear_interpolation_between_threshold_and_target():
    assert numeric_multiplier(100000, 75000, 50000) == 0.5
    assert achieved_value(2000, numeric_multiplier(100000, 75000, 50000)) == 1000


def test_threshold_scores_zero_and_target_scores_one():
    assert numeric_multiplier(100, 40, 40) == 0
    assert numeric_multiplier(100, 100, 40) == 1


def test_multiplier_is_monotonic_inside_the_band():
    values = [numeric_multiplier(200, actual, 100) for actual in range(100, 201, 10)]
    assert values == sorted(values)
    assert values[0] == 0 and values[-1] == 1


def test_over_target_clamps_to_one_and_under_threshold_is_zero():
    assert numeric_multiplier(100, 250, 50) == 1
    assert numeric_multiplier(100, 49.9, 50) == 0


def test_missing_threshold_defaults_to_zero():
    assert numeric_multiplier(100, 100) == 1
    assert numeric_multiplier(100, 50) == 0.5


def test_inverted_threshold_only_rewards_reaching_target():
    # threshold >= target: no interpolation band
    assert numeric_multiplier(100, 100, 100) == 1
    assert numeric_multiplier(100, 99, 120) == 0


def test_qualitative_mapping():
    assert qualitative_multiplier("reached") == 1
    assert qualitative_multiplier("partial") == 0.5
    assert qualitative_multiplier("not_reached") == 0
    assert qualitative_multiplier(None) == 0
    assert achieved_value(2000, qualitative_multiplier("partial")) == 1000


def test_economic_value_from_ral_and_percentage():
    target = calculate_mbo_target(50000, 10)
    assert target == 5000
    assert calculate_economic_value(target, 20) == 1000
    assert calculate_mbo_target(None, 10) == 0
    assert calculate_mbo_target(50000, None) == 0


def test_achieved_value_is_not_rounded():
    assert achieved_value(333.33, 1 / 3) == pytest.approx(111.11)
    assert achieved_value(1000, 0.3333) == pytest.approx(333.3)


def test_round_half_up_is_not_bankers_rounding():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(69.4) == 69


def test_score_numeric_report_derives_qualitative_result():
    result = score_report("numeric", target_value=100, threshold_value=0, actual_value=100)
    assert (result.multiplier, result.progress, result.qualitative_result) == (1, 100, "reached")

    result = score_report("numeric", target_value=100000, threshold_value=50000, actual_value=75000)
    assert (result.multiplier, result.progress, result.qualitative_result) == (0.5, 50, "partial")

    result = score_report("numeric", target_value=100, threshold_value=50, actual_value=10)
    assert result.qualitative_result == "not_reached"


def test_score_numeric_rejects_missing_or_invalid_actual_value():
    for value in (None, "abc", True, math.nan, math.inf):
        with pytest.raises(ScoringError) as exc:
            score_report("numeric", target_value=100, actual_value=value)
        assert exc.value.field == "actual_value"


def test_score_numeric_accepts_numeric_strings():
    assert score_report("numeric", target_value=100, actual_value="25").multiplier == 0.25


def test_score_numeric_without_target_is_rejected():
    with pytest.raises(ScoringError) as exc:
        score_report("numeric", target_value=None, actual_value=10)
    assert exc.value.field == "target_value"


def test_score_qualitative_requires_a_known_result():
    with pytest.raises(ScoringError) as exc:
        score_report("qualitative", qualitative_result=None)
    assert exc.value.field == "qualitative_result"

    with pytest.raises(ScoringError):
        score_report("qualitative", qualitative_result="excellent")

    result = score_report("qualitative", qualitative_result="partial")
    assert (result.multiplier, result.progress, result.actual_value) == (0.5, 50, None)


def test_unknown_objective_type_is_rejected():
    with pytest.raises(ScoringError):
        score_report("boolean", actual_value=1)
