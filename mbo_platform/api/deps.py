import logging
from typing import Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from mbo_platform.core.config import settings
from mbo_platform.core.exceptions import (
    CredentialsException,
    TokenExpiredException,
    TokenInvalidException,
    UserInactiveException,
)
from mbo_platform.core.permissions import Permission, PermissionManager
from mbo_platform.database import SessionLocal
from mbo_platform.models.user import User

logger = logging.getLogger(__name__)

http_bearer = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def decode_identity_token(token: str) -> dict:
    """Valida el token del proveedor de identidad y devuelve sus claims."""
    options = {"verify_aud": settings.TOKEN_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.TOKEN_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        raise TokenInvalidException()


async def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> dict:
    if not credentials or not credentials.credentials:
        raise CredentialsException("Token no proporcionado")

    payload = decode_identity_token(credentials.credentials)
    user_id = payload.get("sub")
    if user_id is None:
        raise CredentialsException("Token inválido: sub claim faltante")

    try:
        user = db.get(User, int(user_id))
    except (TypeError, ValueError):
        raise CredentialsException("Token inválido: sub claim no numérico")
    if user is None:
        raise CredentialsException("Usuario no encontrado")

    if not user.is_active:
        logger.warning("Acceso rechazado para usuario inactivo %s", user.id)
        raise UserInactiveException("Usuario inactivo. Contacta al administrador.")

    return {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "department": user.department,
        "full_name": user.full_name,
    }


class PermissionDependency:
    def __init__(self, permission: Permission):
        self.permission = permission

    async def __call__(self, current_user: dict = Depends(get_current_user)) -> dict:
        scope = PermissionManager.check_permission(current_user["role"], self.permission)
        current_user["resource_scope"] = scope
        return current_user


def require_permission(permission: Permission) -> PermissionDependency:
    return PermissionDependency(permission)
