import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from mbo_platform.core.exceptions import NotFoundException
from mbo_platform.crud.document import document as document_crud
from mbo_platform.crud.user import user as user_crud
from mbo_platform.models.document import DocumentAcceptance, MboRegulationAcceptance
from mbo_platform.models.user import User

logger = logging.getLogger(__name__)


class DocumentService:
    @staticmethod
    def accept_document(db: Session, *, user_id: int, document_id: int) -> tuple[DocumentAcceptance, bool]:
        if not document_crud.get(db, id=document_id):
            raise NotFoundException("Documento", document_id)
        acceptance, created = document_crud.accept(db, user_id, document_id)
        if created:
            logger.info("Usuario %s aceptó el documento %s", user_id, document_id)
        return acceptance, created

    @staticmethod
    def acceptance_status(db: Session, *, user_id: int, document_id: int) -> dict:
        if not document_crud.get(db, id=document_id):
            raise NotFoundException("Documento", document_id)
        acceptance = document_crud.get_acceptance(db, user_id, document_id)
        return {
            "document_id": document_id,
            "accepted": acceptance is not None,
            "accepted_at": acceptance.accepted_at if acceptance else None,
        }

    @staticmethod
    def accept_mbo_regulation(db: Session, *, user_id: int) -> User:
        """Registra la aceptación del reglamento MBO una sola vez."""
        user = user_crud.get(db, id=user_id)
        if not user:
            raise NotFoundException("Usuario", user_id)
        if document_crud.get_regulation_acceptance(db, user_id):
            return user

        accepted_at = datetime.now(timezone.utc)
        db.add(MboRegulationAcceptance(user_id=user_id, accepted_at=accepted_at, created_by=user_id))
        user.mbo_regulation_accepted_at = accepted_at
        user.updated_by = user_id
        db.commit()
        db.refresh(user)
        logger.info("Usuario %s aceptó el reglamento MBO", user_id)
        return user
