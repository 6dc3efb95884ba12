from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from mbo_platform.crud.base import CRUDBase
from mbo_platform.models.objective import Objective, ObjectiveAssignment, ObjectiveDictionary
from mbo_platform.schemas.assignment import AssignmentCreate, AssignmentUpdate


class CRUDAssignment(CRUDBase[ObjectiveAssignment, AssignmentCreate, AssignmentUpdate]):
    def _with_objective(self, db: Session):
        return db.query(ObjectiveAssignment).options(
            joinedload(ObjectiveAssignment.objective)
            .joinedload(Objective.dictionary)
            .joinedload(ObjectiveDictionary.calculation_type),
            joinedload(ObjectiveAssignment.objective).joinedload(Objective.cluster),
        )

    def get_by_user(self, db: Session, user_id: int) -> List[ObjectiveAssignment]:
        return (
            self._with_objective(db)
            .filter(ObjectiveAssignment.user_id == user_id)
            .order_by(ObjectiveAssignment.id)
            .all()
        )

    def get_by_user_and_objective(
        self, db: Session, user_id: int, objective_id: int
    ) -> Optional[ObjectiveAssignment]:
        return (
            db.query(ObjectiveAssignment)
            .filter(
                ObjectiveAssignment.user_id == user_id,
                ObjectiveAssignment.objective_id == objective_id,
            )
            .first()
        )

    def get_all(self, db: Session) -> List[ObjectiveAssignment]:
        return self._with_objective(db).order_by(ObjectiveAssignment.id).all()

    def total_weight(self, db: Session, user_id: int, exclude_id: Optional[int] = None) -> int:
        """Suma de pesos de las asignaciones activas de un usuario."""
        query = db.query(func.coalesce(func.sum(ObjectiveAssignment.weight), 0)).filter(
            ObjectiveAssignment.user_id == user_id,
            ObjectiveAssignment.is_active.is_(True),
        )
        if exclude_id is not None:
            query = query.filter(ObjectiveAssignment.id != exclude_id)
        return int(query.scalar() or 0)

    def remove_all(self, db: Session) -> int:
        deleted = db.query(ObjectiveAssignment).delete(synchronize_session=False)
        db.commit()
        return deleted


assignment = CRUDAssignment(ObjectiveAssignment)
