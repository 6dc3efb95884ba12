from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.exceptions import ConflictException, NotFoundException, ValidationException
from mbo_platform.core.permissions import Permission
from mbo_platform.crud.catalog import business_function as business_function_crud
from mbo_platform.crud.catalog import calculation_type as calculation_type_crud
from mbo_platform.crud.catalog import indicator_cluster as cluster_crud
from mbo_platform.models.objective import Objective
from mbo_platform.schemas.catalog import (
    BusinessFunctionCreate,
    BusinessFunctionResponse,
    BusinessFunctionUpdate,
    CalculationTypeCreate,
    CalculationTypeResponse,
    CalculationTypeUpdate,
    IndicatorClusterCreate,
    IndicatorClusterResponse,
    IndicatorClusterUpdate,
)
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()


def _non_null_changes(obj_in, required=("name",)) -> dict:
    changes = obj_in.model_dump(exclude_unset=True)
    for field in required:
        if field in changes and changes[field] is None:
            raise ValidationException(f"El campo {field} no puede ser nulo", field=field)
    return changes


@router.get("/indicator-clusters")
async def read_indicator_clusters(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_VIEW)),
):
    clusters = cluster_crud.get_all(db)
    return ApiResponseTemplate.success(
        data=[IndicatorClusterResponse.model_validate(c).model_dump() for c in clusters],
        message="Clusters obtenidos exitosamente",
    )


@router.post("/indicator-clusters", status_code=status.HTTP_201_CREATED)
async def create_indicator_cluster(
    cluster_in: IndicatorClusterCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    cluster = cluster_crud.create(db, obj_in=cluster_in, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=IndicatorClusterResponse.model_validate(cluster).model_dump(),
        message="Cluster creado exitosamente",
        status_code=status.HTTP_201_CREATED,
    )


@router.patch("/indicator-clusters/{cluster_id}")
async def update_indicator_cluster(
    cluster_id: int,
    cluster_in: IndicatorClusterUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    cluster = cluster_crud.get(db, id=cluster_id)
    if not cluster:
        raise NotFoundException("Cluster", cluster_id)
    changes = _non_null_changes(cluster_in)
    cluster = cluster_crud.update(db, db_obj=cluster, obj_in=changes, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=IndicatorClusterResponse.model_validate(cluster).model_dump(),
        message="Cluster actualizado exitosamente",
    )


@router.delete("/indicator-clusters/{cluster_id}")
async def delete_indicator_cluster(
    cluster_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    cluster = cluster_crud.get(db, id=cluster_id)
    if not cluster:
        raise NotFoundException("Cluster", cluster_id)
    in_use = db.query(Objective).filter(Objective.cluster_id == cluster_id).count()
    if cluster.dictionary_items or in_use:
        raise ConflictException("El cluster está en uso por objetivos existentes")
    cluster_crud.remove(db, id=cluster_id)
    return ApiResponseTemplate.success(message="Cluster eliminado exitosamente")


@router.get("/calculation-types")
async def read_calculation_types(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_VIEW)),
):
    types = calculation_type_crud.get_all(db)
    return ApiResponseTemplate.success(
        data=[CalculationTypeResponse.model_validate(t).model_dump() for t in types],
        message="Tipos de cálculo obtenidos exitosamente",
    )


@router.post("/calculation-types", status_code=status.HTTP_201_CREATED)
async def create_calculation_type(
    type_in: CalculationTypeCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    calculation_type = calculation_type_crud.create(db, obj_in=type_in, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=CalculationTypeResponse.model_validate(calculation_type).model_dump(),
        message="Tipo de cálculo creado exitosamente",
        status_code=status.HTTP_201_CREATED,
    )


@router.patch("/calculation-types/{type_id}")
async def update_calculation_type(
    type_id: int,
    type_in: CalculationTypeUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    calculation_type = calculation_type_crud.get(db, id=type_id)
    if not calculation_type:
        raise NotFoundException("Tipo de cálculo", type_id)
    calculation_type = calculation_type_crud.update(
        db, db_obj=calculation_type, obj_in=_non_null_changes(type_in), user_id=current_user["id"]
    )
    return ApiResponseTemplate.success(
        data=CalculationTypeResponse.model_validate(calculation_type).model_dump(),
        message="Tipo de cálculo actualizado exitosamente",
    )


@router.delete("/calculation-types/{type_id}")
async def delete_calculation_type(
    type_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    calculation_type = calculation_type_crud.get(db, id=type_id)
    if not calculation_type:
        raise NotFoundException("Tipo de cálculo", type_id)
    if calculation_type.dictionary_items:
        raise ConflictException("El tipo de cálculo está en uso por objetivos del diccionario")
    calculation_type_crud.remove(db, id=type_id)
    return ApiResponseTemplate.success(message="Tipo de cálculo eliminado exitosamente")


def _validate_levels(db: Session, changes: dict, function_id=None) -> None:
    for field in ("first_level_id", "second_level_id"):
        level_id = changes.get(field)
        if level_id is None:
            continue
        if function_id is not None and level_id == function_id:
            raise ValidationException("Una función no puede depender de sí misma", field=field)
        if not business_function_crud.get(db, id=level_id):
            raise ValidationException(f"La función de negocio {level_id} no existe", field=field)


@router.get("/business-functions")
async def read_business_functions(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_VIEW)),
):
    functions = business_function_crud.get_all(db)
    return ApiResponseTemplate.success(
        data=[BusinessFunctionResponse.model_validate(f).model_dump() for f in functions],
        message="Funciones de negocio obtenidas exitosamente",
    )


@router.get("/business-functions/{function_id}")
async def read_business_function(
    function_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_VIEW)),
):
    function = business_function_crud.get(db, id=function_id)
    if not function:
        raise NotFoundException("Función de negocio", function_id)
    return ApiResponseTemplate.success(
        data=BusinessFunctionResponse.model_validate(function).model_dump(),
        message="Función de negocio obtenida exitosamente",
    )


@router.post("/business-functions", status_code=status.HTTP_201_CREATED)
async def create_business_function(
    function_in: BusinessFunctionCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    _validate_levels(db, function_in.model_dump())
    function = business_function_crud.create(db, obj_in=function_in, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=BusinessFunctionResponse.model_validate(function).model_dump(),
        message="Función de negocio creada exitosamente",
        status_code=status.HTTP_201_CREATED,
    )


@router.patch("/business-functions/{function_id}")
async def update_business_function(
    function_id: int,
    function_in: BusinessFunctionUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    function = business_function_crud.get(db, id=function_id)
    if not function:
        raise NotFoundException("Función de negocio", function_id)
    changes = _non_null_changes(function_in)
    _validate_levels(db, changes, function_id)
    function = business_function_crud.update(db, db_obj=function, obj_in=changes, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=BusinessFunctionResponse.model_validate(function).model_dump(),
        message="Función de negocio actualizada exitosamente",
    )


@router.delete("/business-functions/{function_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_business_function(
    function_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.CATALOG_MANAGE)),
):
    function = business_function_crud.get(db, id=function_id)
    if not function:
        raise NotFoundException("Función de negocio", function_id)
    # Las funciones dependientes pierden la referencia al nivel eliminado
    for child in business_function_crud.get_children(db, function_id):
        if child.first_level_id == function_id:
            child.first_level_id = None
        if child.second_level_id == function_id:
            child.second_level_id = None
    business_function_crud.remove(db, id=function_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
