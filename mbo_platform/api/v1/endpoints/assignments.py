from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.exceptions import NotFoundException
from mbo_platform.core.permissions import Permission
from mbo_platform.crud.user import user as user_crud
from mbo_platform.schemas.assignment import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    BatchFailure,
    BatchResult,
    BulkAssignmentIn,
)
from mbo_platform.services.assignment_service import AssignmentService
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()


@router.get("/my-objectives")
async def read_my_objectives(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ASSIGNMENTS_VIEW)),
):
    user = user_crud.get(db, id=current_user["id"])
    return ApiResponseTemplate.success(
        data=AssignmentService.user_objectives(db, user),
        message="Objetivos obtenidos exitosamente",
    )


@router.post("/assignments", status_code=status.HTTP_201_CREATED)
async def create_assignment(
    assignment_in: AssignmentCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ASSIGNMENTS_CREATE)),
):
    assignment = AssignmentService.assign(db, data=assignment_in, current_user=current_user)
    return ApiResponseTemplate.success(
        data=AssignmentService.serialize(assignment, assignment.user.mbo_target),
        message="Objetivo asignado exitosamente",
        status_code=status.HTTP_201_CREATED,
        metadata={"available_weight": AssignmentService.available_weight(db, assignment.user_id)},
    )


@router.post("/assignments/bulk")
async def bulk_assign(
    bulk_in: BulkAssignmentIn,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ASSIGNMENTS_BULK)),
):
    result = AssignmentService.bulk_assign(db, data=bulk_in, current_user=current_user)
    batch = BatchResult(
        objective_id=result["objective_id"],
        succeeded=[AssignmentResponse.model_validate(a) for a in result["succeeded"]],
        failed=[BatchFailure(**failure) for failure in result["failed"]],
        total_users=result["total_users"],
        assigned_count=result["assigned_count"],
    )
    return ApiResponseTemplate.success(
        data=batch.model_dump(),
        message=f"Objetivo asignado a {result['assigned_count']} de {result['total_users']} empleados",
    )


@router.delete("/assignments/clear-all")
async def clear_all_assignments(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ASSIGNMENTS_CLEAR_ALL)),
):
    deleted = AssignmentService.clear_all(db, current_user=current_user)
    return ApiResponseTemplate.success(
        data={"deleted_count": deleted},
        message=f"Se eliminaron {deleted} asignaciones",
    )


@router.get("/assignments/{user_id}")
async def read_user_assignments(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ASSIGNMENTS_VIEW_ALL)),
):
    user = user_crud.get(db, id=user_id)
    if not user:
        raise NotFoundException("Usuario", user_id)
    return ApiResponseTemplate.success(
        data=AssignmentService.user_objectives(db, user),
        message="Asignaciones obtenidas exitosamente",
        metadata={"available_weight": AssignmentService.available_weight(db, user.id)},
    )


@router.patch("/assignments/{assignment_id}")
async def update_assignment(
    assignment_id: int,
    assignment_in: AssignmentUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ASSIGNMENTS_UPDATE)),
):
    assignment = AssignmentService.update_assignment(
        db, assignment_id=assignment_id, data=assignment_in, current_user=current_user
    )
    return ApiResponseTemplate.success(
        data=AssignmentService.serialize(assignment, assignment.user.mbo_target),
        message="Asignación actualizada exitosamente",
    )


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ASSIGNMENTS_DELETE)),
):
    AssignmentService.delete_assignment(db, assignment_id=assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
