"""Document review endpoints: browse, edit, verify, delete and export."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from docreview.api.schemas import (
    DeleteResponseSchema,
    DocumentCreateSchema,
    FieldUpdateRequestSchema,
    VerificationRequestSchema,
)
from docreview.api.v1.dependencies import (
    get_delete_document_handler,
    get_document_handler,
    get_export_document_handler,
    get_export_documents_handler,
    get_list_documents_handler,
    get_save_document_handler,
    get_update_document_field_handler,
    get_verify_document_handler,
)
from docreview.application.commands.delete_document import DeleteDocumentCommand, DeleteDocumentHandler
from docreview.application.commands.save_document import SaveDocumentCommand, SaveDocumentHandler
from docreview.application.commands.update_document_field import (
    UpdateDocumentFieldCommand,
    UpdateDocumentFieldHandler,
)
from docreview.application.commands.verify_document import VerifyDocumentCommand, VerifyDocumentHandler
from docreview.application.dto.document_dto import ExportFileDTO
from docreview.application.queries.export_documents import (
    ExportDocumentHandler,
    ExportDocumentQuery,
    ExportDocumentsHandler,
    ExportDocumentsQuery,
)
from docreview.application.queries.get_document import GetDocumentHandler, GetDocumentQuery
from docreview.application.queries.list_documents import ListDocumentsHandler, ListDocumentsQuery
from docreview.domain.exceptions import (
    DomainValidationError,
    EntityNotFoundError,
    EntityValidationError,
    RepositoryError,
)
from docreview.domain.value_objects.document_type import DocumentType, VerificationStatus

router = APIRouter(prefix="/documents", tags=["documents"])


def _parse_type(value: Optional[str]) -> DocumentType:
    if not value:
        raise HTTPException(status_code=400, detail="Document type is required")
    try:
        return DocumentType.parse(value)
    except DomainValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _file_response(export: ExportFileDTO) -> Response:
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("")
def list_documents(
    type: str = Query(...),
    limit: Optional[int] = Query(None, ge=1),
    handler: ListDocumentsHandler = Depends(get_list_documents_handler),
) -> Dict[str, Any]:
    try:
        dto = handler.handle(ListDocumentsQuery(document_type=_parse_type(type), limit=limit))
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to fetch documents") from exc
    return dto.to_dict()


@router.post("", status_code=201)
def create_document(
    payload: DocumentCreateSchema,
    handler: SaveDocumentHandler = Depends(get_save_document_handler),
) -> Dict[str, Any]:
    try:
        return handler.handle(
            SaveDocumentCommand(
                data=payload.data,
                metadata=payload.metadata,
                remark=payload.remark,
                image_url=payload.imageUrl,
            )
        )
    except DomainValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to create document") from exc


@router.get("/export")
def export_documents(
    type: str = Query(...),
    format: str = Query("csv"),
    handler: ExportDocumentsHandler = Depends(get_export_documents_handler),
) -> Response:
    try:
        export = handler.handle(ExportDocumentsQuery(document_type=_parse_type(type), format=format))
    except DomainValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to export documents") from exc
    return _file_response(export)


@router.get("/{document_id}")
def get_document(
    document_id: str,
    type: str = Query(...),
    handler: GetDocumentHandler = Depends(get_document_handler),
) -> Dict[str, Any]:
    try:
        return handler.handle(GetDocumentQuery(document_id=document_id, document_type=_parse_type(type)))
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to load document") from exc


@router.put("/{document_id}")
def update_document_field(
    document_id: str,
    payload: FieldUpdateRequestSchema,
    handler: UpdateDocumentFieldHandler = Depends(get_update_document_field_handler),
) -> Dict[str, Any]:
    command = UpdateDocumentFieldCommand(
        document_id=document_id,
        document_type=_parse_type(payload.type),
        field=payload.field,
        new_value=payload.newValue,
        old_value=payload.oldValue,
    )
    try:
        return handler.handle(command)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (DomainValidationError, EntityValidationError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to update document") from exc


@router.post("/{document_id}/verification")
def update_verification(
    document_id: str,
    payload: VerificationRequestSchema,
    handler: VerifyDocumentHandler = Depends(get_verify_document_handler),
) -> Dict[str, Any]:
    try:
        command = VerifyDocumentCommand(
            document_id=document_id,
            document_type=_parse_type(payload.type),
            status=VerificationStatus.parse(payload.status),
            user=payload.user,
            notes=payload.notes,
            data=payload.data,
            metadata=payload.metadata,
        )
        return handler.handle(command)
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except DomainValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to update verification status") from exc


@router.delete("/{document_id}", response_model=DeleteResponseSchema)
def delete_document(
    document_id: str,
    type: str = Query(...),
    handler: DeleteDocumentHandler = Depends(get_delete_document_handler),
) -> DeleteResponseSchema:
    try:
        handler.handle(DeleteDocumentCommand(document_id=document_id, document_type=_parse_type(type)))
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to delete document") from exc
    return DeleteResponseSchema(message="Document deleted successfully")


@router.get("/{document_id}/export")
def export_document(
    document_id: str,
    type: str = Query(...),
    format: str = Query("json"),
    handler: ExportDocumentHandler = Depends(get_export_document_handler),
) -> Response:
    try:
        export = handler.handle(
            ExportDocumentQuery(document_id=document_id, document_type=_parse_type(type), format=format)
        )
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except DomainValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RepositoryError as exc:
        raise HTTPException(status_code=500, detail="Failed to export document") from exc
    return _file_response(export)
