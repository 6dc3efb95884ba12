from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Excepción base de la aplicación, con detalle opcional por campo."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, str]] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.errors = errors or []


class AuthException(AppException):
    """Excepción base para errores de autenticación."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status_code,
            detail=detail,
            headers=headers or {"WWW-Authenticate": "Bearer"},
        )


class CredentialsException(AuthException):
    """Credenciales inválidas."""

    def __init__(self, detail: str = "Credenciales inválidas"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )


class TokenExpiredException(AuthException):
    """Token expirado."""

    def __init__(self, detail: str = "Token expirado"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )


class TokenInvalidException(AuthException):
    """Token inválido."""

    def __init__(self, detail: str = "Token inválido"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )


class InsufficientPermissionsException(AppException):
    """Permisos insuficientes."""

    def __init__(self, detail: str = "Permisos insuficientes"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class UserInactiveException(AppException):
    """Usuario inactivo."""

    def __init__(self, detail: str = "Usuario inactivo"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class NotFoundException(AppException):
    """Recurso inexistente."""

    def __init__(self, resource: str, resource_id: Any = None):
        detail = f"{resource} no encontrado"
        if resource_id is not None:
            detail = f"{resource} {resource_id} no encontrado"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class ValidationException(AppException):
    """Datos inválidos, con errores por campo."""

    def __init__(self, detail: str, field: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        field_errors = list(errors or [])
        if field:
            field_errors.append({"field": field, "message": detail})
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            errors=field_errors,
        )


class ConflictException(AppException):
    """La operación choca con el estado actual del recurso."""

    def __init__(self, detail: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            errors=errors,
        )
