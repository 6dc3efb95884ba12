from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.exceptions import NotFoundException
from mbo_platform.core.permissions import Permission, PermissionManager
from mbo_platform.crud.user import user as user_crud
from mbo_platform.schemas.user import ProfileUpdate, UserResponse
from mbo_platform.services.document_service import DocumentService
from mbo_platform.services.user_service import UserService
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()


@router.get("/auth/user")
async def read_current_user(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.PROFILE_VIEW)),
):
    user = user_crud.get(db, id=current_user["id"])
    if not user:
        raise NotFoundException("Usuario", current_user["id"])
    permissions = PermissionManager.get_role_permissions(user.role)
    return ApiResponseTemplate.success(
        data=UserResponse.model_validate(user).model_dump(),
        message="Perfil obtenido exitosamente",
        metadata={"permissions": sorted(p.value for p in permissions)},
    )


@router.post("/auth/profile")
async def update_profile(
    profile_in: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.PROFILE_UPDATE)),
):
    user = UserService.update_profile(db, user_id=current_user["id"], data=profile_in)
    return ApiResponseTemplate.success(
        data=UserResponse.model_validate(user).model_dump(),
        message="Perfil actualizado exitosamente",
    )


@router.post("/accept-mbo-regulation")
async def accept_mbo_regulation(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.PROFILE_ACCEPT_REGULATION)),
):
    user = DocumentService.accept_mbo_regulation(db, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data={"mbo_regulation_accepted_at": user.mbo_regulation_accepted_at},
        message="Reglamento MBO aceptado",
    )
