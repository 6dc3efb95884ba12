from enum import Enum
from typing import Dict, Iterable, Optional, Set

from mbo_platform.core.exceptions import InsufficientPermissionsException


class Permission(str, Enum):
    """Enumeración de permisos del sistema."""

    USERS_MANAGE = "users:manage"

    PROFILE_VIEW = "profile:view"
    PROFILE_UPDATE = "profile:update"
    PROFILE_ACCEPT_REGULATION = "profile:accept_regulation"

    CATALOG_VIEW = "catalog:view"
    CATALOG_MANAGE = "catalog:manage"

    DICTIONARY_VIEW = "dictionary:view"
    DICTIONARY_MANAGE = "dictionary:manage"
    DICTIONARY_REPORT = "dictionary:report"

    OBJECTIVES_VIEW = "objectives:view"
    OBJECTIVES_MANAGE = "objectives:manage"
    OBJECTIVES_REPORT = "objectives:report"
    OBJECTIVES_VIEW_ASSIGNED_USERS = "objectives:view_assigned_users"

    ASSIGNMENTS_VIEW = "assignments:view"
    ASSIGNMENTS_VIEW_ALL = "assignments:view_all"
    ASSIGNMENTS_CREATE = "assignments:create"
    ASSIGNMENTS_UPDATE = "assignments:update"
    ASSIGNMENTS_DELETE = "assignments:delete"
    ASSIGNMENTS_BULK = "assignments:bulk"
    ASSIGNMENTS_CLEAR_ALL = "assignments:clear_all"

    DOCUMENTS_VIEW = "documents:view"
    DOCUMENTS_MANAGE = "documents:manage"
    DOCUMENTS_ACCEPT = "documents:accept"

    STATS_VIEW = "stats:view"
    ANALYTICS_VIEW = "analytics:view"
    ANALYTICS_EXPORT = "analytics:export"

    ORG_CHART_VIEW = "org_chart:view"


class ResourceScope(str, Enum):
    GLOBAL = "global"
    OWN = "own"


class PermissionManager:
    """Tabla de política acción x rol -> alcance. Sin entrada = denegado."""

    ROLE_PERMISSIONS: Dict[str, Dict[Permission, ResourceScope]] = {
        "admin": {permission: ResourceScope.GLOBAL for permission in Permission},
        "employee": {
            Permission.PROFILE_VIEW: ResourceScope.OWN,
            Permission.PROFILE_UPDATE: ResourceScope.OWN,
            Permission.PROFILE_ACCEPT_REGULATION: ResourceScope.OWN,
            Permission.CATALOG_VIEW: ResourceScope.GLOBAL,
            Permission.DICTIONARY_VIEW: ResourceScope.GLOBAL,
            Permission.OBJECTIVES_VIEW: ResourceScope.OWN,
            Permission.OBJECTIVES_REPORT: ResourceScope.OWN,
            Permission.ASSIGNMENTS_VIEW: ResourceScope.OWN,
            Permission.ASSIGNMENTS_UPDATE: ResourceScope.OWN,
            Permission.DOCUMENTS_VIEW: ResourceScope.GLOBAL,
            Permission.DOCUMENTS_ACCEPT: ResourceScope.OWN,
            Permission.STATS_VIEW: ResourceScope.OWN,
            Permission.ORG_CHART_VIEW: ResourceScope.OWN,
        },
    }

    # Campos de una asignación que cada rol puede modificar
    ASSIGNMENT_UPDATABLE_FIELDS: Dict[str, Set[str]] = {
        "admin": {"status", "progress", "weight", "user_id", "objective_id"},
        "employee": {"status", "progress"},
    }

    @classmethod
    def get_role_permissions(cls, role_name: str) -> Set[Permission]:
        return set(cls.ROLE_PERMISSIONS.get(role_name, {}))

    @classmethod
    def get_scope(cls, role_name: str, permission: Permission) -> Optional[ResourceScope]:
        return cls.ROLE_PERMISSIONS.get(role_name, {}).get(permission)

    @classmethod
    def check_permission(cls, role_name: str, permission: Permission) -> ResourceScope:
        scope = cls.get_scope(role_name, permission)
        if scope is None:
            raise InsufficientPermissionsException(f"Se requiere permiso: {permission.value}")
        return scope

    @classmethod
    def check_updatable_fields(cls, role_name: str, fields: Iterable[str]) -> None:
        allowed = cls.ASSIGNMENT_UPDATABLE_FIELDS.get(role_name, set())
        forbidden = sorted(set(fields) - allowed)
        if forbidden:
            raise InsufficientPermissionsException(
                f"No puedes modificar los campos: {', '.join(forbidden)}"
            )


class ResourcePermissionChecker:
    @staticmethod
    def check_resource_access(
        user: dict,
        required_permission: Permission,
        resource_owner_ids: Iterable[Optional[int]] = (),
    ) -> bool:
        scope = PermissionManager.get_scope(user["role"], required_permission)
        if scope is None:
            return False
        if scope == ResourceScope.GLOBAL:
            return True
        return user["id"] in set(resource_owner_ids)

    @staticmethod
    def require_resource_access(
        user: dict,
        required_permission: Permission,
        resource_owner_ids: Iterable[Optional[int]] = (),
        detail: str = "Solo puedes acceder a tus propios recursos",
    ) -> None:
        if not ResourcePermissionChecker.check_resource_access(
            user, required_permission, resource_owner_ids
        ):
            raise InsufficientPermissionsException(detail)
