from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mbo_platform.models.document import DocumentType


class DocumentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    doc_type: DocumentType = DocumentType.POLICY
    file_path: Optional[str] = Field(None, max_length=500)
    requires_acceptance: bool = False

    model_config = ConfigDict(use_enum_values=True)


class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    doc_type: Optional[DocumentType] = None
    file_path: Optional[str] = Field(None, max_length=500)
    requires_acceptance: Optional[bool] = None

    model_config = ConfigDict(use_enum_values=True)


class DocumentResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    doc_type: str
    file_path: Optional[str] = None
    requires_acceptance: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AcceptanceCreate(BaseModel):
    document_id: int


class AcceptanceResponse(BaseModel):
    id: int
    user_id: int
    document_id: int
    accepted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
