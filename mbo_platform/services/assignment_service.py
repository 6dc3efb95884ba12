import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mbo_platform.core.config import settings
from mbo_platform.core.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from mbo_platform.core.permissions import (
    Permission,
    PermissionManager,
    ResourcePermissionChecker,
)
from mbo_platform.crud.assignment import assignment as assignment_crud
from mbo_platform.crud.objective import dictionary as dictionary_crud
from mbo_platform.crud.objective import objective as objective_crud
from mbo_platform.crud.user import user as user_crud
from mbo_platform.models.objective import Objective, ObjectiveAssignment, ObjectiveDictionary
from mbo_platform.models.user import User
from mbo_platform.schemas.assignment import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    BulkAssignmentIn,
)
from mbo_platform.services.aggregation import assignment_value

logger = logging.getLogger(__name__)


class WeightBudgetExceeded(ValidationException):
    def __init__(self, requested: int, available: int):
        detail = f"Peso total excedido: solicitado {requested}%, disponible {available}%"
        super().__init__(
            detail,
            errors=[{"field": "weight", "message": detail, "available_weight": available}],
        )
        self.available = available


class AssignmentService:
    """Reglas de negocio de asignaciones: presupuesto de peso, altas masivas y permisos."""

    @staticmethod
    def available_weight(db: Session, user_id: int, exclude_id: Optional[int] = None) -> int:
        used = assignment_crud.total_weight(db, user_id, exclude_id=exclude_id)
        return max(settings.MAX_TOTAL_WEIGHT - used, 0)

    @classmethod
    def check_weight_budget(
        cls,
        db: Session,
        user_id: int,
        weight: int,
        exclude_id: Optional[int] = None,
    ) -> None:
        if settings.ALLOW_WEIGHT_OVERFLOW:
            return
        available = cls.available_weight(db, user_id, exclude_id=exclude_id)
        if weight > available:
            logger.warning(
                "Asignación rechazada para usuario %s: peso %s%% con %s%% disponible",
                user_id,
                weight,
                available,
            )
            raise WeightBudgetExceeded(weight, available)

    @staticmethod
    def _new_instance(
        dictionary: ObjectiveDictionary,
        deadline,
        user_id: Optional[int],
    ) -> Objective:
        return Objective(
            dictionary_id=dictionary.id,
            cluster_id=dictionary.indicator_cluster_id,
            deadline=deadline,
            created_by=user_id,
            updated_by=user_id,
        )

    @classmethod
    def assign(cls, db: Session, *, data: AssignmentCreate, current_user: dict) -> ObjectiveAssignment:
        target_user = user_crud.get(db, id=data.user_id)
        if not target_user:
            raise NotFoundException("Usuario", data.user_id)
        if not target_user.is_active:
            raise ValidationException("No se pueden asignar objetivos a un usuario inactivo", field="user_id")
        dictionary = dictionary_crud.get(db, id=data.objective_id)
        if not dictionary:
            raise NotFoundException("Objetivo del diccionario", data.objective_id)

        cls.check_weight_budget(db, target_user.id, data.weight)

        objective = cls._new_instance(dictionary, data.deadline, current_user["id"])
        db.add(objective)
        db.flush()
        assignment = ObjectiveAssignment(
            user_id=target_user.id,
            objective_id=objective.id,
            weight=data.weight,
            status=data.status,
            progress=data.progress,
            created_by=current_user["id"],
            updated_by=current_user["id"],
        )
        db.add(assignment)
        db.commit()
        db.refresh(assignment)

        logger.info(
            "Objetivo %s asignado a usuario %s con peso %s%%",
            dictionary.id,
            target_user.id,
            data.weight,
        )
        return assignment

    @classmethod
    def bulk_assign(cls, db: Session, *, data: BulkAssignmentIn, current_user: dict) -> Dict[str, Any]:
        """Asigna un objetivo del diccionario a todos los empleados activos de un departamento.

        Cada empleado se confirma por separado: un fallo individual se anota en
        ``failed`` y no interrumpe el lote. La instancia se confirma junto con la
        primera asignación correcta, de modo que no quedan instancias huérfanas.
        """
        dictionary = dictionary_crud.get(db, id=data.objective_id)
        if not dictionary:
            raise NotFoundException("Objetivo del diccionario", data.objective_id)

        employees = user_crud.get_active_employees(db, data.department)
        if not employees:
            raise ValidationException(
                f"No hay empleados activos en el departamento {data.department}",
                field="department",
            )

        objective: Optional[Objective] = None
        objective_committed = False
        succeeded: List[ObjectiveAssignment] = []
        failed: List[Dict[str, Any]] = []

        for employee in employees:
            try:
                cls.check_weight_budget(db, employee.id, data.weight)
            except WeightBudgetExceeded as exc:
                failed.append(cls._failure(employee, exc.detail))
                continue

            if objective is None:
                objective = cls._new_instance(dictionary, data.deadline, current_user["id"])
                db.add(objective)
                db.flush()

            assignment = ObjectiveAssignment(
                user_id=employee.id,
                objective_id=objective.id,
                weight=data.weight,
                created_by=current_user["id"],
                updated_by=current_user["id"],
            )
            try:
                db.add(assignment)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                if not objective_committed:
                    objective = None
                logger.warning("Asignación masiva fallida para usuario %s: %s", employee.id, exc)
                failed.append(cls._failure(employee, "No se pudo crear la asignación"))
                continue
            objective_committed = True
            db.refresh(assignment)
            succeeded.append(assignment)

        logger.info(
            "Asignación masiva del objetivo %s al departamento %s: %s asignados, %s fallidos",
            dictionary.id,
            data.department,
            len(succeeded),
            len(failed),
        )
        return {
            "objective_id": objective.id if objective else None,
            "succeeded": succeeded,
            "failed": failed,
            "total_users": len(employees),
            "assigned_count": len(succeeded),
        }

    @staticmethod
    def _failure(employee: User, reason: str) -> Dict[str, Any]:
        return {"user_id": employee.id, "user_name": employee.full_name, "reason": reason}

    @classmethod
    def update_assignment(
        cls,
        db: Session,
        *,
        assignment_id: int,
        data: AssignmentUpdate,
        current_user: dict,
    ) -> ObjectiveAssignment:
        assignment = assignment_crud.get(db, id=assignment_id)
        if not assignment:
            raise NotFoundException("Asignación", assignment_id)

        ResourcePermissionChecker.require_resource_access(
            current_user,
            Permission.ASSIGNMENTS_UPDATE,
            [assignment.user_id],
            detail="Solo puedes modificar tus propias asignaciones",
        )
        changes = {field: value for field, value in data.model_dump(exclude_unset=True).items() if value is not None}
        PermissionManager.check_updatable_fields(current_user["role"], changes.keys())

        new_user_id = changes.get("user_id", assignment.user_id)
        new_objective_id = changes.get("objective_id", assignment.objective_id)
        if "user_id" in changes and not user_crud.get(db, id=new_user_id):
            raise NotFoundException("Usuario", new_user_id)
        if "objective_id" in changes and not objective_crud.get(db, id=new_objective_id):
            raise NotFoundException("Objetivo", new_objective_id)
        if "user_id" in changes or "objective_id" in changes:
            duplicate = assignment_crud.get_by_user_and_objective(db, new_user_id, new_objective_id)
            if duplicate and duplicate.id != assignment.id:
                raise ConflictException("El usuario ya tiene asignado este objetivo")

        if "weight" in changes or "user_id" in changes:
            cls.check_weight_budget(
                db,
                new_user_id,
                changes.get("weight", assignment.weight),
                exclude_id=assignment.id,
            )

        return assignment_crud.update(db, db_obj=assignment, obj_in=changes, user_id=current_user["id"])

    @staticmethod
    def delete_assignment(db: Session, *, assignment_id: int) -> None:
        assignment = assignment_crud.get(db, id=assignment_id)
        if not assignment:
            raise NotFoundException("Asignación", assignment_id)
        assignment_crud.remove(db, id=assignment_id)
        logger.info("Asignación %s eliminada", assignment_id)

    @staticmethod
    def clear_all(db: Session, *, current_user: dict) -> int:
        deleted = assignment_crud.remove_all(db)
        logger.warning("Usuario %s eliminó todas las asignaciones (%s)", current_user["id"], deleted)
        return deleted

    @staticmethod
    def serialize(assignment: ObjectiveAssignment, mbo_target: Optional[float] = None) -> Dict[str, Any]:
        """Asignación con su objetivo y, si se indica el target MBO, sus importes."""
        data = AssignmentResponse.model_validate(assignment).model_dump()
        if mbo_target is not None:
            value = assignment_value(assignment, mbo_target)
            data["economic_value"] = value.economic_value
            data["achieved_value"] = value.achieved_value
        return data

    @classmethod
    def user_objectives(cls, db: Session, user: User) -> List[Dict[str, Any]]:
        mbo_target = user.mbo_target
        return [cls.serialize(a, mbo_target) for a in assignment_crud.get_by_user(db, user.id)]
