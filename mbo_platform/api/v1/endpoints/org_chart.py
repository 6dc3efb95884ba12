from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.permissions import Permission
from mbo_platform.services.org_chart_service import OrgChartService
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()


@router.get("/org-chart")
async def read_org_chart(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.ORG_CHART_VIEW)),
):
    return ApiResponseTemplate.success(
        data=OrgChartService.org_chart(db, current_user),
        message="Organigrama obtenido exitosamente",
    )
