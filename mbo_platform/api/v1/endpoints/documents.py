from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mbo_platform.api.deps import get_db, require_permission
from mbo_platform.core.exceptions import NotFoundException
from mbo_platform.core.permissions import Permission
from mbo_platform.crud.document import document as document_crud
from mbo_platform.schemas.document import (
    AcceptanceCreate,
    AcceptanceResponse,
    DocumentCreate,
    DocumentResponse,
    DocumentUpdate,
)
from mbo_platform.services.document_service import DocumentService
from mbo_platform.templates.api import ApiResponseTemplate

router = APIRouter()


@router.get("/documents")
async def read_documents(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DOCUMENTS_VIEW)),
):
    return ApiResponseTemplate.success(
        data=[DocumentResponse.model_validate(d).model_dump() for d in document_crud.get_all(db)],
        message="Documentos obtenidos exitosamente",
    )


@router.get("/documents/{document_id}")
async def read_document(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DOCUMENTS_VIEW)),
):
    document = document_crud.get(db, id=document_id)
    if not document:
        raise NotFoundException("Documento", document_id)
    return ApiResponseTemplate.success(
        data=DocumentResponse.model_validate(document).model_dump(),
        message="Documento obtenido exitosamente",
    )


@router.post("/documents", status_code=status.HTTP_201_CREATED)
async def create_document(
    document_in: DocumentCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DOCUMENTS_MANAGE)),
):
    document = document_crud.create(db, obj_in=document_in, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=DocumentResponse.model_validate(document).model_dump(),
        message="Documento creado exitosamente",
        status_code=status.HTTP_201_CREATED,
    )


@router.patch("/documents/{document_id}")
async def update_document(
    document_id: int,
    document_in: DocumentUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DOCUMENTS_MANAGE)),
):
    document = document_crud.get(db, id=document_id)
    if not document:
        raise NotFoundException("Documento", document_id)
    # title, doc_type y requires_acceptance no admiten nulo
    changes = {
        field: value
        for field, value in document_in.model_dump(exclude_unset=True).items()
        if value is not None or field in ("description", "file_path")
    }
    document = document_crud.update(db, db_obj=document, obj_in=changes, user_id=current_user["id"])
    return ApiResponseTemplate.success(
        data=DocumentResponse.model_validate(document).model_dump(),
        message="Documento actualizado exitosamente",
    )


@router.delete("/documents/{document_id}")
async def delete_document(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DOCUMENTS_MANAGE)),
):
    if not document_crud.get(db, id=document_id):
        raise NotFoundException("Documento", document_id)
    document_crud.remove(db, id=document_id)
    return ApiResponseTemplate.success(message="Documento eliminado exitosamente")


@router.get("/my-acceptances")
async def read_my_acceptances(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DOCUMENTS_ACCEPT)),
):
    acceptances = document_crud.get_user_acceptances(db, current_user["id"])
    return ApiResponseTemplate.success(
        data=[AcceptanceResponse.model_validate(a).model_dump() for a in acceptances],
        message="Aceptaciones obtenidas exitosamente",
    )


@router.post("/acceptances", status_code=status.HTTP_201_CREATED)
async def accept_document(
    acceptance_in: AcceptanceCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DOCUMENTS_ACCEPT)),
):
    acceptance, created = DocumentService.accept_document(
        db, user_id=current_user["id"], document_id=acceptance_in.document_id
    )
    return ApiResponseTemplate.success(
        data=AcceptanceResponse.model_validate(acceptance).model_dump(),
        message="Documento aceptado" if created else "El documento ya estaba aceptado",
    )


@router.get("/acceptances/{document_id}/status")
async def read_acceptance_status(
    document_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_permission(Permission.DOCUMENTS_ACCEPT)),
):
    return ApiResponseTemplate.success(
        data=DocumentService.acceptance_status(db, user_id=current_user["id"], document_id=document_id),
        message="Estado de aceptación obtenido",
    )
