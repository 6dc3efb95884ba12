from types import SimpleNamespace

from mbo_platform.services.aggregation import (
    effective_progress,
    overall_progress,
    payout_summary,
    total_weight,
    weighted_progress,
)


def _objective(objective_type="numeric", reported=False, multiplier=None, qualitative_result=None):
    return SimpleNamespace(
        objective_type=objective_type,
        is_reported=reported,
        multiplier=multiplier,
        qualitative_result=qualitative_result,
    )


def _assignment(weight, progress=0, objective=None, is_active=True, id=1):
    return SimpleNamespace(
        id=id,
        weight=weight,
        progress=progress,
        objective=objective or _objective(),
        is_active=is_active,
    )


def test_weighted_average_of_progress():
    assert weighted_progress([(100, 20), (50, 30)]) == 70


def test_zero_total_weight_gives_zero():
    assert weighted_progress([]) == 0
    assert weighted_progress([(80, 0)]) == 0


def test_reported_objectives_override_raw_progress():
    qualitative = _assignment(50, progress=0, objective=_objective("qualitative", True, 0.5, "partial"))
    numeric = _assignment(50, progress=10, objective=_objective("numeric", True, 0.8))
    unreported = _assignment(50, progress=30)

    assert effective_progress(qualitative) == 50
    assert effective_progress(numeric) == 80
    assert effective_progress(unreported) == 30
    assert overall_progress([qualitative, numeric]) == 65


def test_total_weight_ignores_inactive_assignments():
    assignments = [_assignment(20), _assignment(30), _assignment(40, is_active=False)]
    assert total_weight(assignments) == 50


def test_payout_uses_multiplier_when_reported_and_progress_otherwise():
    reported = _assignment(20, objective=_objective("numeric", True, 1.0), id=1)
    pending = _assignment(30, progress=50, id=2)

    summary = payout_summary([reported, pending], mbo_target=5000)

    assert summary["target_payout"] == 2500
    assert summary["projected_payout"] == 1000 + 750
    first, second = summary["values"]
    assert first.achieved_value == 1000
    assert second.achieved_value is None
    assert second.projected_value == 750
