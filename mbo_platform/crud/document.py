from typing import List, Optional

from sqlalchemy.orm import Session

from mbo_platform.crud.base import CRUDBase
from mbo_platform.models.document import Document, DocumentAcceptance, MboRegulationAcceptance
from mbo_platform.schemas.document import DocumentCreate, DocumentUpdate


class CRUDDocument(CRUDBase[Document, DocumentCreate, DocumentUpdate]):
    def get_acceptance(self, db: Session, user_id: int, document_id: int) -> Optional[DocumentAcceptance]:
        return (
            db.query(DocumentAcceptance)
            .filter(
                DocumentAcceptance.user_id == user_id,
                DocumentAcceptance.document_id == document_id,
            )
            .first()
        )

    def get_user_acceptances(self, db: Session, user_id: int) -> List[DocumentAcceptance]:
        return (
            db.query(DocumentAcceptance)
            .filter(DocumentAcceptance.user_id == user_id)
            .order_by(DocumentAcceptance.accepted_at.desc(), DocumentAcceptance.id.desc())
            .all()
        )

    def accept(self, db: Session, user_id: int, document_id: int) -> tuple[DocumentAcceptance, bool]:
        """Registra la aceptación; si ya existe la devuelve sin duplicarla."""
        existing = self.get_acceptance(db, user_id, document_id)
        if existing:
            return existing, False
        acceptance = DocumentAcceptance(user_id=user_id, document_id=document_id, created_by=user_id)
        db.add(acceptance)
        db.commit()
        db.refresh(acceptance)
        return acceptance, True

    def get_regulation_acceptance(self, db: Session, user_id: int) -> Optional[MboRegulationAcceptance]:
        return db.query(MboRegulationAcceptance).filter(MboRegulationAcceptance.user_id == user_id).first()


document = CRUDDocument(Document)
