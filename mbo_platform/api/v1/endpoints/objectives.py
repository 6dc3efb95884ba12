from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.exceptions import NotFoundException, ValidationException
from mbo_platform.core.permissions import Permission, ResourcePermissionChecker, ResourceScope
from mbo_platform.crud.catalog import indicator_cluster as cluster_crud
from mbo_platform.crud.objective import dictionary as dictionary_crud
from mbo_platform.crud.objective import objective as objective_crud
from mbo_platform.schemas.objective import (
    AssignedUser,
    ObjectiveCreate,
    ObjectiveResponse,
    ObjectiveUpdate,
    ObjectiveWithAssignments,
    ReportIn,
)
from mbo_platform.services.reporting_service import ReportingService
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()


def _check_cluster(db: Session, cluster_id):
    if cluster_id is not None and not cluster_crud.get(db, id=cluster_id):
        raise ValidationException(f"Cluster {cluster_id} inexistente", field="cluster_id")


@router.get("/objectives")
async def read_objectives(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.OBJECTIVES_VIEW)),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
):
    if current_user["resource_scope"] == ResourceScope.GLOBAL:
        objectives, total = objective_crud.get_multi_paginated(db, skip=skip, limit=limit)
    else:
        objectives, total = objective_crud.get_multi_for_user(db, current_user["id"], skip=skip, limit=limit)
    return ApiResponseTemplate.paginated(
        data=[ObjectiveResponse.model_validate(o).model_dump() for o in objectives],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/objectives-with-assignments")
async def read_objectives_with_assignments(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.OBJECTIVES_VIEW_ASSIGNED_USERS)),
):
    data = []
    for objective in objective_crud.get_all_with_assignments(db):
        entry = ObjectiveWithAssignments.model_validate(objective)
        entry.assigned_users = [
            AssignedUser(
                assignment_id=a.id,
                user_id=a.user_id,
                full_name=a.user.full_name if a.user else "",
                department=a.user.department if a.user else None,
                weight=a.weight,
                status=a.status,
                progress=a.progress,
            )
            for a in objective.assignments
        ]
        data.append(entry.model_dump())
    return ApiResponseTemplate.success(data=data, message="Objetivos obtenidos exitosamente")


@router.get("/objectives/{objective_id}")
async def read_objective(
    objective_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.OBJECTIVES_VIEW)),
):
    objective = objective_crud.get(db, id=objective_id)
    if not objective:
        raise NotFoundException("Objetivo", objective_id)
    ResourcePermissionChecker.require_resource_access(
        current_user,
        Permission.OBJECTIVES_VIEW,
        [a.user_id for a in objective.assignments],
        detail="Solo puedes ver objetivos asignados a ti",
    )
    return ApiResponseTemplate.success(
        data=ObjectiveResponse.model_validate(objective).model_dump(),
        message="Objetivo obtenido exitosamente",
    )


@router.post("/objectives", status_code=status.HTTP_201_CREATED)
async def create_objective(
    objective_in: ObjectiveCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.OBJECTIVES_MANAGE)),
):
    item = dictionary_crud.get(db, id=objective_in.dictionary_id)
    if not item:
        raise NotFoundException("Objetivo del diccionario", objective_in.dictionary_id)
    _check_cluster(db, objective_in.cluster_id)
    objective = objective_crud.create(
        db,
        obj_in={
            "dictionary_id": item.id,
            "cluster_id": objective_in.cluster_id or item.indicator_cluster_id,
            "deadline": objective_in.deadline,
        },
        user_id=current_user["id"],
    )
    return ApiResponseTemplate.success(
        data=ObjectiveResponse.model_validate(objective).model_dump(),
        message="Objetivo creado exitosamente",
        status_code=status.HTTP_201_CREATED,
    )


@router.patch("/objectives/{objective_id}")
async def update_objective(
    objective_id: int,
    objective_in: ObjectiveUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.OBJECTIVES_MANAGE)),
):
    objective = objective_crud.get(db, id=objective_id)
    if not objective:
        raise NotFoundException("Objetivo", objective_id)
    changes = objective_in.model_dump(exclude_unset=True)
    if "cluster_id" in changes:
        if changes["cluster_id"] is None:
            raise ValidationException("El campo cluster_id no puede ser nulo", field="cluster_id")
        _check_cluster(db, changes["cluster_id"])
    objective = objective_crud.update(db, db_obj=objective, obj_in=changes, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=ObjectiveResponse.model_validate(objective).model_dump(),
        message="Objetivo actualizado exitosamente",
    )


@router.delete("/objectives/{objective_id}")
async def delete_objective(
    objective_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.OBJECTIVES_MANAGE)),
):
    objective = objective_crud.get(db, id=objective_id)
    if not objective:
        raise NotFoundException("Objetivo", objective_id)
    objective_crud.remove(db, id=objective_id)
    return ApiResponseTemplate.success(message="Objetivo eliminado exitosamente")


@router.patch("/objectives/{objective_id}/report")
async def report_objective(
    objective_id: int,
    report_in: ReportIn,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.OBJECTIVES_REPORT)),
):
    objective = ReportingService.report_objective(
        db, objective_id=objective_id, report=report_in, current_user=current_user
    )
    return ApiResponseTemplate.success(
        data=ObjectiveResponse.model_validate(objective).model_dump(),
        message="Reporte registrado exitosamente",
    )
