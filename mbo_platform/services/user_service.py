import logging

from sqlalchemy.orm import Session

from mbo_platform.core.exceptions import ConflictException, NotFoundException, ValidationException
from mbo_platform.crud.user import user as user_crud
from mbo_platform.models.user import User
from mbo_platform.schemas.user import ProfileUpdate, UserCreate, UserUpdate
from mbo_platform.services.org_chart_service import OrgChartService

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    def create_user(db: Session, *, data: UserCreate, admin_id: int) -> User:
        if user_crud.get_by_email(db, data.email):
            raise ConflictException("Ya existe un usuario con este email")
        OrgChartService.ensure_no_cycle(db, None, data.manager_id)
        user = user_crud.create(db, obj_in=data, user_id=admin_id)
        logger.info("Usuario %s creado por %s", user.id, admin_id)
        return user

    @staticmethod
    def update_user(db: Session, *, user_id: int, data: UserUpdate, admin_id: int) -> User:
        user = user_crud.get(db, id=user_id)
        if not user:
            raise NotFoundException("Usuario", user_id)

        changes = data.model_dump(exclude_unset=True)
        for required in ("email", "first_name", "last_name", "role", "is_active"):
            if required in changes and changes[required] is None:
                raise ValidationException(f"El campo {required} no puede ser nulo", field=required)

        if changes.get("email") and changes["email"].lower() != user.email.lower():
            existing = user_crud.get_by_email(db, changes["email"])
            if existing and existing.id != user.id:
                raise ConflictException("Ya existe un usuario con este email")
        if "manager_id" in changes:
            OrgChartService.ensure_no_cycle(db, user.id, changes["manager_id"])

        return user_crud.update(db, db_obj=user, obj_in=changes, user_id=admin_id)

    @staticmethod
    def delete_user(db: Session, *, user_id: int, admin_id: int) -> User:
        """Baja lógica: el usuario queda inactivo y conserva su histórico."""
        user = user_crud.get(db, id=user_id)
        if not user:
            raise NotFoundException("Usuario", user_id)
        if user.id == admin_id:
            raise ValidationException("No puedes eliminarte a ti mismo")
        user.soft_delete(admin_id)
        db.commit()
        db.refresh(user)
        logger.info("Usuario %s desactivado por %s", user.id, admin_id)
        return user

    @staticmethod
    def update_profile(db: Session, *, user_id: int, data: ProfileUpdate) -> User:
        """Actualiza solo los datos personales del propio usuario."""
        user = user_crud.get(db, id=user_id)
        if not user:
            raise NotFoundException("Usuario", user_id)

        changes = data.model_dump(exclude_unset=True)
        for required in ("first_name", "last_name"):
            if required in changes and changes[required] is None:
                raise ValidationException(f"El campo {required} no puede ser nulo", field=required)

        user = user_crud.update(db, db_obj=user, obj_in=changes, user_id=user_id)
        logger.info("Usuario %s actualizó su perfil (%s)", user_id, ", ".join(sorted(changes)) or "sin cambios")
        return user
