from typing import List

from sqlalchemy.orm import Session, joinedload

from mbo_platform.crud.base import CRUDBase
from mbo_platform.models.objective import Objective, ObjectiveAssignment, ObjectiveDictionary
from mbo_platform.schemas.objective import (
    DictionaryCreate,
    DictionaryFilter,
    DictionaryUpdate,
    ObjectiveCreate,
    ObjectiveUpdate,
)


class CRUDDictionary(CRUDBase[ObjectiveDictionary, DictionaryCreate, DictionaryUpdate]):
    def get_multi_with_filters(
        self,
        db: Session,
        *,
        filter_obj: DictionaryFilter,
        skip: int = 0,
        limit: int = 100,
    ) -> tuple[List[ObjectiveDictionary], int]:
        query = db.query(ObjectiveDictionary)
        if filter_obj.search:
            query = query.filter(ObjectiveDictionary.title.ilike(f"%{filter_obj.search}%"))
        if filter_obj.indicator_cluster_id:
            query = query.filter(ObjectiveDictionary.indicator_cluster_id == filter_obj.indicator_cluster_id)
        if filter_obj.objective_type:
            query = query.filter(ObjectiveDictionary.objective_type == filter_obj.objective_type)

        total = query.count()
        items = (
            query.options(
                joinedload(ObjectiveDictionary.indicator_cluster),
                joinedload(ObjectiveDictionary.calculation_type),
            )
            .order_by(ObjectiveDictionary.id)
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total

    def count_active_assignments(self, db: Session, dictionary_id: int) -> int:
        return (
            db.query(ObjectiveAssignment)
            .join(Objective, ObjectiveAssignment.objective_id == Objective.id)
            .filter(
                Objective.dictionary_id == dictionary_id,
                ObjectiveAssignment.is_active.is_(True),
            )
            .count()
        )


class CRUDObjective(CRUDBase[Objective, ObjectiveCreate, ObjectiveUpdate]):
    def get_multi_for_user(self, db: Session, user_id: int, *, skip: int = 0, limit: int = 100):
        query = (
            db.query(Objective)
            .join(ObjectiveAssignment, ObjectiveAssignment.objective_id == Objective.id)
            .filter(ObjectiveAssignment.user_id == user_id)
        )
        total = query.count()
        return query.order_by(Objective.id).offset(skip).limit(limit).all(), total

    def get_multi_paginated(self, db: Session, *, skip: int = 0, limit: int = 100):
        query = db.query(Objective)
        total = query.count()
        return query.order_by(Objective.id).offset(skip).limit(limit).all(), total

    def get_all_with_assignments(self, db: Session) -> List[Objective]:
        return (
            db.query(Objective)
            .options(
                joinedload(Objective.dictionary),
                joinedload(Objective.cluster),
                joinedload(Objective.assignments).joinedload(ObjectiveAssignment.user),
            )
            .order_by(Objective.id)
            .all()
        )


dictionary = CRUDDictionary(ObjectiveDictionary)
objective = CRUDObjective(Objective)
