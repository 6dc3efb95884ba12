from fastapi import APIRouter

from mbo_platform.core.config import settings
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()


@router.get("/health")
async def health():
    return ApiResponseTemplate.success(
        data={"status": "ok", "version": settings.VERSION},
        message="Servicio operativo",
    )
