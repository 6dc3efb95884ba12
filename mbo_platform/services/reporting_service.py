import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from mbo_platform.core.exceptions import (
    InsufficientPermissionsException,
    NotFoundException,
    ValidationException,
)
from mbo_platform.core.permissions import Permission, ResourcePermissionChecker
from mbo_platform.crud.objective import dictionary as dictionary_crud
from mbo_platform.crud.objective import objective as objective_crud
from mbo_platform.models.objective import Objective, ObjectiveDictionary
from mbo_platform.schemas.objective import ReportIn
from mbo_platform.services.scoring import ScoreResult, ScoringError, score_report

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportingService:
    """Aplica reportes de resultado a instancias y entradas del diccionario.

    La puntuación se calcula antes de tocar la sesión: un reporte inválido no
    deja ningún cambio. Un nuevo reporte sobrescribe el anterior por completo.
    """

    @staticmethod
    def score(dictionary: ObjectiveDictionary, report: ReportIn) -> ScoreResult:
        try:
            return score_report(
                dictionary.objective_type,
                target_value=dictionary.target_value,
                threshold_value=dictionary.threshold_value,
                actual_value=report.actual_value,
                qualitative_result=report.qualitative_result,
            )
        except ScoringError as exc:
            raise ValidationException(exc.message, field=exc.field)

    @staticmethod
    def _apply_to_objective(
        objective: Objective,
        result: ScoreResult,
        reported_at: datetime,
        user_id: Optional[int],
    ) -> None:
        objective.actual_value = result.actual_value
        objective.qualitative_result = result.qualitative_result
        objective.multiplier = result.multiplier
        objective.reported_at = reported_at
        objective.updated_by = user_id
        for assignment in objective.assignments:
            assignment.progress = result.progress
            assignment.updated_by = user_id

    @classmethod
    def report_objective(
        cls,
        db: Session,
        *,
        objective_id: int,
        report: ReportIn,
        current_user: dict,
    ) -> Objective:
        objective = objective_crud.get(db, id=objective_id)
        if not objective:
            raise NotFoundException("Objetivo", objective_id)

        owner_ids = [assignment.user_id for assignment in objective.assignments]
        if not ResourcePermissionChecker.check_resource_access(
            current_user, Permission.OBJECTIVES_REPORT, owner_ids
        ):
            raise InsufficientPermissionsException("Solo puedes reportar objetivos asignados a ti")

        result = cls.score(objective.dictionary, report)
        cls._apply_to_objective(objective, result, _utcnow(), current_user["id"])
        db.commit()
        db.refresh(objective)

        logger.info(
            "Objetivo %s reportado por usuario %s: multiplicador=%s progreso=%s",
            objective.id,
            current_user["id"],
            result.multiplier,
            result.progress,
        )
        return objective

    @classmethod
    def report_dictionary(
        cls,
        db: Session,
        *,
        dictionary_id: int,
        report: ReportIn,
        current_user: dict,
    ) -> tuple[ObjectiveDictionary, int]:
        """Reporta una entrada del diccionario y lo propaga a todas sus instancias.

        Devuelve la entrada y el número de instancias actualizadas.
        """
        item = dictionary_crud.get(db, id=dictionary_id)
        if not item:
            raise NotFoundException("Objetivo del diccionario", dictionary_id)

        result = cls.score(item, report)
        reported_at = _utcnow()
        user_id = current_user["id"]

        item.actual_value = result.actual_value
        item.qualitative_result = result.qualitative_result
        item.reported_at = reported_at
        item.updated_by = user_id
        for objective in item.objectives:
            cls._apply_to_objective(objective, result, reported_at, user_id)

        db.commit()
        db.refresh(item)

        logger.info(
            "Diccionario %s reportado por usuario %s; %s instancias actualizadas",
            item.id,
            user_id,
            len(item.objectives),
        )
        return item, len(item.objectives)
