"""
Motor de puntuación MBO.

Convierte el resultado reportado de un objetivo (valor numérico o resultado
cualitativo) en un multiplicador de cumplimiento entre 0 y 1 y, a partir del
valor económico de la asignación, en el importe alcanzado.

    mbo_target      = ral * mbo_percentage / 100
    economic_value  = mbo_target * weight / 100
    achieved_value  = economic_value * multiplier

Los importes no se redondean aquí; el redondeo es responsabilidad de la
presentación.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union

from mbo_platform.models.objective import ObjectiveType, QualitativeResult

Number = Union[int, float]

QUALITATIVE_MULTIPLIERS = {
    QualitativeResult.REACHED.value: 1.0,
    QualitativeResult.PARTIAL.value: 0.5,
    QualitativeResult.NOT_REACHED.value: 0.0,
}


class ScoringError(ValueError):
    """Reporte no puntuable; indica el campo que lo invalida."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


@dataclass(frozen=True)
class ScoreResult:
    multiplier: float
    progress: int
    qualitative_result: Optional[str]
    actual_value: Optional[float] = None


def round_half_up(value: Number) -> int:
    """Redondeo comercial (0.5 hacia arriba), no el bancario de round()."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_number(value: Any, field: str) -> float:
    if isinstance(value, bool) or value is None:
        raise ScoringError(field, f"El campo {field} debe ser numérico")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ScoringError(field, f"El campo {field} debe ser numérico")
    if math.isnan(number) or math.isinf(number):
        raise ScoringError(field, f"El campo {field} debe ser un número finito")
    return number


def calculate_mbo_target(ral: Optional[Number], mbo_percentage: Optional[Number]) -> float:
    return float(ral or 0) * (float(mbo_percentage or 0) / 100)


def calculate_economic_value(mbo_target: Number, weight: Optional[Number]) -> float:
    return float(mbo_target) * (float(weight or 0) / 100)


def numeric_multiplier(target: Number, actual: Number, threshold: Optional[Number] = None) -> float:
    """Interpolación lineal entre umbral (0%) y objetivo (100%)."""
    target = float(target)
    actual = float(actual)
    threshold = float(threshold or 0)

    if target > threshold and actual >= threshold:
        ratio = (actual - threshold) / (target - threshold)
        return min(1.0, max(0.0, ratio))
    if actual >= target:
        return 1.0
    return 0.0


def qualitative_multiplier(result: Optional[str]) -> float:
    if isinstance(result, QualitativeResult):
        result = result.value
    return QUALITATIVE_MULTIPLIERS.get(result, 0.0)


def qualitative_progress(result: Optional[str]) -> int:
    return round_half_up(qualitative_multiplier(result) * 100)


def derive_qualitative_result(multiplier: float) -> str:
    if multiplier >= 1:
        return QualitativeResult.REACHED.value
    if multiplier <= 0:
        return QualitativeResult.NOT_REACHED.value
    return QualitativeResult.PARTIAL.value


def achieved_value(economic_value: Number, multiplier: Number) -> float:
    return float(economic_value) * float(multiplier)


def score_report(
    objective_type: str,
    *,
    target_value: Optional[Number] = None,
    threshold_value: Optional[Number] = None,
    actual_value: Any = None,
    qualitative_result: Optional[str] = None,
) -> ScoreResult:
    """Valida y puntúa un reporte. No modifica nada."""
    if isinstance(objective_type, ObjectiveType):
        objective_type = objective_type.value

    if objective_type == ObjectiveType.NUMERIC.value:
        actual = parse_number(actual_value, "actual_value")
        if target_value is None:
            raise ScoringError("target_value", "El objetivo numérico no tiene valor objetivo definido")
        target = parse_number(target_value, "target_value")
        threshold = parse_number(threshold_value, "threshold_value") if threshold_value is not None else None
        multiplier = numeric_multiplier(target, actual, threshold)
        return ScoreResult(
            multiplier=multiplier,
            progress=round_half_up(multiplier * 100),
            qualitative_result=derive_qualitative_result(multiplier),
            actual_value=actual,
        )

    if objective_type == ObjectiveType.QUALITATIVE.value:
        if isinstance(qualitative_result, QualitativeResult):
            qualitative_result = qualitative_result.value
        if qualitative_result is None:
            raise ScoringError("qualitative_result", "El objetivo cualitativo requiere qualitative_result")
        if qualitative_result not in QUALITATIVE_MULTIPLIERS:
            raise ScoringError("qualitative_result", f"Resultado cualitativo no válido: {qualitative_result}")
        multiplier = qualitative_multiplier(qualitative_result)
        return ScoreResult(
            multiplier=multiplier,
            progress=round_half_up(multiplier * 100),
            qualitative_result=qualitative_result,
        )

    raise ScoringError("objective_type", f"Tipo de objetivo desconocido: {objective_type}")
