from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.exceptions import NotFoundException
from mbo_platform.core.permissions import Permission
from mbo_platform.crud.user import user as user_crud
from mbo_platform.services.analytics_service import AnalyticsService
from mbo_platform.services.export_service import ExportService
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/my-stats")
async def read_my_stats(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.STATS_VIEW)),
):
    user = user_crud.get(db, id=current_user["id"])
    return ApiResponseTemplate.success(
        data=AnalyticsService.user_stats(db, user),
        message="Estadísticas obtenidas exitosamente",
    )


@router.get("/stats/{user_id}")
async def read_user_stats(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ANALYTICS_VIEW)),
):
    user = user_crud.get(db, id=user_id)
    if not user:
        raise NotFoundException("Usuario", user_id)
    return ApiResponseTemplate.success(
        data=AnalyticsService.user_stats(db, user),
        message="Estadísticas obtenidas exitosamente",
    )


@router.get("/admin/analytics/overview")
async def analytics_overview(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ANALYTICS_VIEW)),
):
    return ApiResponseTemplate.success(data=AnalyticsService.overview(db), message="Resumen general")


@router.get("/admin/analytics/by-department")
async def analytics_by_department(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ANALYTICS_VIEW)),
):
    return ApiResponseTemplate.success(data=AnalyticsService.by_department(db), message="Avance por departamento")


@router.get("/admin/analytics/by-cluster")
async def analytics_by_cluster(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ANALYTICS_VIEW)),
):
    return ApiResponseTemplate.success(data=AnalyticsService.by_cluster(db), message="Asignaciones por cluster")


@router.get("/admin/analytics/eligibles")
async def analytics_eligibles(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ANALYTICS_VIEW)),
):
    return ApiResponseTemplate.success(data=AnalyticsService.eligibles(db), message="Empleados elegibles")


@router.get("/admin/analytics/financial")
async def analytics_financial(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ANALYTICS_VIEW)),
):
    return ApiResponseTemplate.success(data=AnalyticsService.financial(db), message="Proyección económica")


@router.get("/admin/analytics/financial/export")
async def export_financial(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ANALYTICS_EXPORT)),
):
    content = ExportService.export_financial_to_excel(AnalyticsService.financial(db))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="mbo_financial.xlsx"'},
    )
