from typing import Any, Dict, List, Optional


class ApiResponseTemplate:
    """Utilitarios para dar forma a las respuestas API."""

    @staticmethod
    def success(
        data: Any = None,
        message: str = "Operación exitosa",
        status_code: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": True, "data": data, "message": message}
        meta = dict(metadata or {})
        if status_code:
            meta.setdefault("status_code", status_code)
        if meta:
            payload["metadata"] = meta
        return payload

    @staticmethod
    def paginated(
        data: Any,
        total: int,
        skip: int,
        limit: int,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": True,
            "data": data,
            "total": total,
            "skip": skip,
            "limit": limit,
        }
        if metadata:
            payload["metadata"] = metadata
        return payload

    @staticmethod
    def error(
        detail: str,
        status_code: int,
        errors: Optional[List[Dict[str, Any]]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": False,
            "detail": detail,
            "status_code": status_code,
        }
        meta = dict(metadata or {})
        if errors:
            meta["errors"] = errors
        if meta:
            payload["metadata"] = meta
        return payload

    @staticmethod
    def field_errors(validation_errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Aplana los errores de pydantic a pares campo/mensaje."""
        errors = []
        for error in validation_errors:
            location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            errors.append(
                {
                    "field": ".".join(location) or None,
                    "message": error.get("msg", "Valor no válido"),
                }
            )
        return errors
