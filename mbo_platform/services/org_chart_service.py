import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from mbo_platform.core.exceptions import NotFoundException, ValidationException
from mbo_platform.crud.user import user as user_crud
from mbo_platform.models.user import User, UserRole
from mbo_platform.schemas.user import UserSummary

logger = logging.getLogger(__name__)


class OrgChartService:
    """Jerarquía de responsables: validación de ciclos y vista por rol."""

    @staticmethod
    def ensure_no_cycle(db: Session, user_id: Optional[int], manager_id: Optional[int]) -> None:
        """Rechaza un manager_id que haría al usuario ancestro de sí mismo."""
        if manager_id is None:
            return
        if user_id is not None and manager_id == user_id:
            raise ValidationException("Un usuario no puede ser su propio responsable", field="manager_id")

        manager = user_crud.get(db, id=manager_id)
        if not manager:
            raise NotFoundException("Responsable", manager_id)
        if user_id is None:
            return

        seen = set()
        current = manager
        while current is not None:
            if current.id == user_id:
                logger.warning("Ciclo rechazado: %s no puede depender de %s", user_id, manager_id)
                raise ValidationException(
                    "La asignación del responsable crearía un ciclo en el organigrama",
                    field="manager_id",
                )
            if current.id in seen:
                logger.warning("Ciclo existente en la cadena de responsables de %s", manager_id)
                return
            seen.add(current.id)
            current = current.manager

    @staticmethod
    def manager_chain(user: User) -> List[User]:
        chain = []
        seen = {user.id}
        current = user.manager
        while current is not None:
            if current.id in seen:
                logger.warning("Ciclo existente en la cadena de responsables de %s", user.id)
                break
            seen.add(current.id)
            chain.append(current)
            current = current.manager
        return chain

    @classmethod
    def visible_users(cls, db: Session, current_user: dict) -> List[User]:
        if current_user["role"] == UserRole.ADMIN.value:
            return db.query(User).order_by(User.id).all()

        me = user_crud.get(db, id=current_user["id"])
        if not me:
            raise NotFoundException("Usuario", current_user["id"])

        candidates = [me]
        candidates.extend(cls.manager_chain(me))
        candidates.extend(user_crud.get_direct_reports(db, me.id))
        if me.manager_id is not None:
            candidates.extend(user_crud.get_direct_reports(db, me.manager_id))

        visible: Dict[int, User] = {}
        for candidate in candidates:
            visible.setdefault(candidate.id, candidate)
        return sorted(visible.values(), key=lambda u: u.id)

    @staticmethod
    def _node(user: User) -> Dict[str, Any]:
        return {
            "id": user.id,
            "full_name": user.full_name,
            "email": user.email,
            "department": user.department,
            "role": user.role,
            "manager_id": user.manager_id,
            "children": [],
        }

    @classmethod
    def build_tree(cls, users: List[User]) -> List[Dict[str, Any]]:
        """Árbol anidado; un nodo cuyo responsable no es visible pasa a ser raíz."""
        nodes = {user.id: cls._node(user) for user in users}
        roots = []
        for user in users:
            parent = nodes.get(user.manager_id) if user.manager_id != user.id else None
            if parent is None:
                roots.append(nodes[user.id])
            else:
                parent["children"].append(nodes[user.id])

        reachable = set()

        def collect(start: Dict[str, Any]) -> None:
            stack = [start]
            while stack:
                node = stack.pop()
                if node["id"] in reachable:
                    continue
                reachable.add(node["id"])
                stack.extend(node["children"])

        for root in roots:
            collect(root)

        # Los nodos no alcanzables desde una raíz forman un ciclo en los datos
        for user in users:
            if user.id in reachable:
                continue
            logger.warning("Ciclo en el organigrama: el usuario %s se muestra como raíz", user.id)
            node = nodes[user.id]
            parent = nodes[user.manager_id]
            parent["children"] = [child for child in parent["children"] if child is not node]
            roots.append(node)
            collect(node)
        return roots

    @classmethod
    def org_chart(cls, db: Session, current_user: dict) -> Dict[str, Any]:
        users = cls.visible_users(db, current_user)
        return {
            "users": [UserSummary.model_validate(u).model_dump() for u in users],
            "tree": cls.build_tree(users),
        }
