from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.exceptions import NotFoundException
from mbo_platform.core.permissions import Permission
from mbo_platform.crud.user import user as user_crud
from mbo_platform.models.user import UserRole
from mbo_platform.schemas.user import UserCreate, UserFilter, UserResponse, UserUpdate
from mbo_platform.services.user_service import UserService
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter(prefix="/users")


@router.get("")
async def read_users(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.USERS_MANAGE)),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    role: Optional[UserRole] = Query(None),
    department: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
):
    filter_obj = UserFilter(role=role, department=department, is_active=is_active, search=search)
    users, total = user_crud.get_multi_with_filters(db, filter_obj=filter_obj, skip=skip, limit=limit)
    return ApiResponseTemplate.paginated(
        data=[UserResponse.model_validate(user).model_dump() for user in users],
        total=total,
        skip=skip,
        limit=limit,
        metadata={"filters": filter_obj.model_dump(exclude_none=True)},
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.USERS_MANAGE)),
):
    user = UserService.create_user(db, data=user_in, admin_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=UserResponse.model_validate(user).model_dump(),
        message="Usuario creado exitosamente",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{user_id}")
async def read_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.USERS_MANAGE)),
):
    user = user_crud.get(db, id=user_id)
    if not user:
        raise NotFoundException("Usuario", user_id)
    return ApiResponseTemplate.success(
        data=UserResponse.model_validate(user).model_dump(),
        message="Usuario obtenido exitosamente",
    )


@router.patch("/{user_id}")
async def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.USERS_MANAGE)),
):
    user = UserService.update_user(db, user_id=user_id, data=user_in, admin_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=UserResponse.model_validate(user).model_dump(),
        message="Usuario actualizado exitosamente",
    )


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.USERS_MANAGE)),
):
    UserService.delete_user(db, user_id=user_id, admin_id=current_user["id"])
    return ApiResponseTemplate.success(message="Usuario eliminado exitosamente")
