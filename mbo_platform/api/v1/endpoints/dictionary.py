from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.exceptions import NotFoundException
from mbo_platform.core.permissions import Permission
from mbo_platform.crud.objective import dictionary as dictionary_crud
from mbo_platform.models.objective import ObjectiveType
from mbo_platform.schemas.objective import (
    DictionaryCreate,
    DictionaryFilter,
    DictionaryResponse,
    DictionaryUpdate,
    ReportIn,
)
from mbo_platform.services.dictionary_service import DictionaryService
from mbo_platform.services.reporting_service import ReportingService
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()


@router.get("/objectives-dictionary")
async def read_dictionary(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DICTIONARY_VIEW)),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    search: Optional[str] = Query(None),
    indicator_cluster_id: Optional[int] = Query(None),
    objective_type: Optional[ObjectiveType] = Query(None),
):
    filter_obj = DictionaryFilter(
        search=search,
        indicator_cluster_id=indicator_cluster_id,
        objective_type=objective_type,
    )
    items, total = dictionary_crud.get_multi_with_filters(db, filter_obj=filter_obj, skip=skip, limit=limit)
    return ApiResponseTemplate.paginated(
        data=[DictionaryResponse.model_validate(item).model_dump() for item in items],
        total=total,
        skip=skip,
        limit=limit,
        metadata={"filters": filter_obj.model_dump(exclude_none=True)},
    )


@router.get("/objectives-dictionary/{item_id}")
async def read_dictionary_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DICTIONARY_VIEW)),
):
    item = dictionary_crud.get(db, id=item_id)
    if not item:
        raise NotFoundException("Objetivo del diccionario", item_id)
    return ApiResponseTemplate.success(
        data=DictionaryResponse.model_validate(item).model_dump(),
        message="Objetivo del diccionario obtenido exitosamente",
    )


@router.post("/objectives-dictionary", status_code=status.HTTP_201_CREATED)
async def create_dictionary_item(
    item_in: DictionaryCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DICTIONARY_MANAGE)),
):
    item = DictionaryService.create_item(db, data=item_in, admin_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=DictionaryResponse.model_validate(item).model_dump(),
        message="Objetivo del diccionario creado exitosamente",
        status_code=status.HTTP_201_CREATED,
    )


@router.patch("/objectives-dictionary/{item_id}")
async def update_dictionary_item(
    item_id: int,
    item_in: DictionaryUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DICTIONARY_MANAGE)),
):
    item = DictionaryService.update_item(db, item_id=item_id, data=item_in, admin_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=DictionaryResponse.model_validate(item).model_dump(),
        message="Objetivo del diccionario actualizado exitosamente",
    )


@router.delete("/objectives-dictionary/{item_id}")
async def delete_dictionary_item(
    item_id: int,
    force: bool = Query(False, description="Elimina también instancias y asignaciones activas"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DICTIONARY_MANAGE)),
):
    removed_assignments = DictionaryService.delete_item(db, item_id=item_id, force=force)
    return ApiResponseTemplate.success(
        data={"id": item_id, "removed_assignments": removed_assignments},
        message="Objetivo del diccionario eliminado exitosamente",
    )


@router.patch("/dictionary/{item_id}/report")
async def report_dictionary_item(
    item_id: int,
    report_in: ReportIn,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DICTIONARY_REPORT)),
):
    item, updated = ReportingService.report_dictionary(
        db, dictionary_id=item_id, report=report_in, current_user=current_user
    )
    return ApiResponseTemplate.success(
        data=DictionaryResponse.model_validate(item).model_dump(),
        message="Reporte registrado exitosamente",
        metadata={"updated_objectives": updated},
    )
