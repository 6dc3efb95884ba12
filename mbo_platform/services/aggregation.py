from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from mbo_platform.models.objective import ObjectiveAssignment, ObjectiveType
from mbo_platform.services.scoring import (
    achieved_value,
    calculate_economic_value,
    qualitative_progress,
    round_half_up,
)


@dataclass
class AssignmentValue:
    assignment_id: int
    weight: int
    progress: float
    economic_value: float
    achieved_value: Optional[float]
    projected_value: float


def effective_progress(assignment: ObjectiveAssignment) -> float:
    """Progreso 0-100 de una asignación según el estado del reporte."""
    objective = assignment.objective
    if objective is not None and objective.is_reported:
        if objective.objective_type == ObjectiveType.QUALITATIVE.value:
            return float(qualitative_progress(objective.qualitative_result))
        if objective.multiplier is not None:
            return objective.multiplier * 100
    return float(assignment.progress or 0)


def weighted_progress(entries: Iterable[Tuple[float, float]]) -> int:
    """Media ponderada de pares (progreso, peso); 0 si el peso total es 0."""
    total_weight = 0.0
    weighted = 0.0
    for progress, weight in entries:
        weight = float(weight or 0)
        total_weight += weight
        weighted += float(progress or 0) * weight
    if total_weight == 0:
        return 0
    return round_half_up(weighted / total_weight)


def overall_progress(assignments: Iterable[ObjectiveAssignment]) -> int:
    return weighted_progress((effective_progress(a), a.weight or 0) for a in assignments)


def total_weight(assignments: Iterable[ObjectiveAssignment]) -> int:
    return sum(a.weight or 0 for a in assignments if a.is_active)


def assignment_value(assignment: ObjectiveAssignment, mbo_target: float) -> AssignmentValue:
    economic = calculate_economic_value(mbo_target, assignment.weight)
    objective = assignment.objective
    achieved = None
    if objective is not None and objective.is_reported and objective.multiplier is not None:
        achieved = achieved_value(economic, objective.multiplier)
        projected = achieved
    else:
        projected = achieved_value(economic, (assignment.progress or 0) / 100)
    return AssignmentValue(
        assignment_id=assignment.id,
        weight=assignment.weight or 0,
        progress=effective_progress(assignment),
        economic_value=economic,
        achieved_value=achieved,
        projected_value=projected,
    )


def payout_summary(assignments: List[ObjectiveAssignment], mbo_target: float) -> dict:
    values = [assignment_value(a, mbo_target) for a in assignments]
    return {
        "mbo_target": mbo_target,
        "target_payout": sum(v.economic_value for v in values),
        "projected_payout": sum(v.projected_value for v in values),
        "values": values,
    }
