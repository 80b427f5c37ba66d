"""Batch endpoints: upload a document and follow its page-by-page extraction."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from docreview.api.schemas import (
    BatchCreatedSchema,
    BatchListSchema,
    BatchViewSchema,
    RetryResponseSchema,
    batch_summary_to_schema,
    batch_view_to_schema,
)
from docreview.api.v1.dependencies import (
    get_batch_handler,
    get_batch_registry,
    get_list_batches_handler,
    get_start_batch_handler,
)
from docreview.application.batch.registry import BatchRegistry
from docreview.application.commands.start_batch import StartBatchCommand, StartBatchHandler
from docreview.application.queries.get_batch import GetBatchHandler, GetBatchQuery
from docreview.application.queries.list_batches import ListBatchesHandler, ListBatchesQuery
from docreview.domain.exceptions import (
    BatchSessionError,
    DomainValidationError,
    EntityNotFoundError,
)
from docreview.domain.value_objects.document_type import DocumentType

router = APIRouter(prefix="/batches", tags=["batches"])


@router.post("", response_model=BatchCreatedSchema, status_code=202)
async def create_batch(
    file: UploadFile = File(...),
    documentType: str = Form(...),
    mode: Optional[str] = Form(None),
    handler: StartBatchHandler = Depends(get_start_batch_handler),
) -> BatchCreatedSchema:
    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")
    try:
        document_type = DocumentType.parse(documentType)
    except DomainValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    content = await file.read()
    command = StartBatchCommand(
        document_type=document_type,
        file_name=file.filename,
        content=content,
        content_type=file.content_type or "",
        use_backend=(mode or "").lower() == "backend",
    )
    try:
        result = await handler.handle(command)
    except DomainValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BatchSessionError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return BatchCreatedSchema(**result)


@router.get("", response_model=BatchListSchema)
def list_batches(
    active: bool = False,
    handler: ListBatchesHandler = Depends(get_list_batches_handler),
) -> BatchListSchema:
    summaries = handler.handle(ListBatchesQuery(active_only=active))
    return BatchListSchema(batches=[batch_summary_to_schema(summary) for summary in summaries], total=len(summaries))


@router.get("/{batch_id}", response_model=BatchViewSchema)
def get_batch(
    batch_id: str,
    handler: GetBatchHandler = Depends(get_batch_handler),
) -> BatchViewSchema:
    try:
        view = handler.handle(GetBatchQuery(batch_id=batch_id))
    except EntityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return batch_view_to_schema(view)


@router.post("/{batch_id}/retry", response_model=RetryResponseSchema)
async def retry_failed_pages(
    batch_id: str,
    registry: BatchRegistry = Depends(get_batch_registry),
) -> RetryResponseSchema:
    coordinator = registry.get(batch_id)
    if coordinator is None:
        raise HTTPException(status_code=404, detail=f"Batch not found: {batch_id}")
    return RetryResponseSchema(batchId=batch_id, retriedPages=coordinator.retry_failed())


@router.delete("/{batch_id}", status_code=204)
async def delete_batch(
    batch_id: str,
    registry: BatchRegistry = Depends(get_batch_registry),
) -> None:
    coordinator = registry.remove(batch_id)
    if coordinator is None:
        raise HTTPException(status_code=404, detail=f"Batch not found: {batch_id}")
    coordinator.reset()
