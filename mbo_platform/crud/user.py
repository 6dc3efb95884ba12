from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from mbo_platform.crud.base import CRUDBase
from mbo_platform.models.user import User, UserRole
from mbo_platform.schemas.user import UserCreate, UserFilter, UserUpdate

ALL_DEPARTMENTS = "all"


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    """CRUD de empleados y administradores."""

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def get_multi_with_filters(
        self,
        db: Session,
        *,
        filter_obj: UserFilter,
        skip: int = 0,
        limit: int = 100,
    ) -> tuple[List[User], int]:
        query = db.query(User)
        if filter_obj.role:
            query = query.filter(User.role == filter_obj.role)
        if filter_obj.department:
            query = query.filter(User.department == filter_obj.department)
        if filter_obj.is_active is not None:
            query = query.filter(User.is_active == filter_obj.is_active)
        if filter_obj.search:
            term = f"%{filter_obj.search}%"
            query = query.filter(
                or_(
                    User.email.ilike(term),
                    User.first_name.ilike(term),
                    User.last_name.ilike(term),
                )
            )

        total = query.count()
        users = query.order_by(User.last_name, User.first_name, User.id).offset(skip).limit(limit).all()
        return users, total

    def get_active_employees(self, db: Session, department: Optional[str] = None) -> List[User]:
        """Empleados activos de un departamento; "all" o None devuelve todos."""
        query = db.query(User).filter(User.role == UserRole.EMPLOYEE.value, User.is_active.is_(True))
        if department and department.lower() != ALL_DEPARTMENTS:
            query = query.filter(User.department == department)
        return query.order_by(User.id).all()

    def get_employees(self, db: Session) -> List[User]:
        return db.query(User).filter(User.role == UserRole.EMPLOYEE.value).order_by(User.id).all()

    def get_direct_reports(self, db: Session, manager_id: int) -> List[User]:
        return db.query(User).filter(User.manager_id == manager_id).order_by(User.id).all()


user = CRUDUser(User)
