import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from mbo_platform.models.base import BaseModel


class DocumentType(str, enum.Enum):
    REGULATION = "regulation"
    POLICY = "policy"
    CONTRACT = "contract"


class Document(BaseModel):
    __tablename__ = "documents"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    doc_type = Column(String(20), nullable=False)
    file_path = Column(String(500), nullable=True)
    requires_acceptance = Column(Boolean, default=False, nullable=False)

    acceptances = relationship(
        "DocumentAcceptance",
        back_populates="document",
        cascade="all, delete-orphan",
    )


class DocumentAcceptance(BaseModel):
    __tablename__ = "document_acceptances"
    __table_args__ = (
        UniqueConstraint("user_id", "document_id", name="uq_document_acceptance"),
    )

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    document_id = Column(Integer, ForeignKey("documents.id", ondelete="CASCADE"), nullable=False)
    accepted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="document_acceptances")
    document = relationship("Document", back_populates="acceptances")


class MboRegulationAcceptance(BaseModel):
    __tablename__ = "mbo_regulation_acceptances"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    accepted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="regulation_acceptance")
