"""Single-page extraction endpoint consumed by direct-mode batches."""
from __future__ import annotations

import base64
import binascii
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from docreview.api.schemas import ProcessPageRequestSchema, ProcessPageResponseSchema
from docreview.api.v1.dependencies import get_process_page_handler
from docreview.application.commands.process_page import ProcessPageCommand, ProcessPageHandler
from docreview.domain.exceptions import DomainValidationError, RepositoryError
from docreview.domain.value_objects.document_type import DocumentType
from docreview.infrastructure.pdf.image_processor import decode_data_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["process-page"])


@router.post("/process-page", response_model=ProcessPageResponseSchema, response_model_exclude_none=True)
async def process_page(
    request: ProcessPageRequestSchema,
    handler: ProcessPageHandler = Depends(get_process_page_handler),
):
    if not request.documentType:
        return JSONResponse(status_code=400, content={"error": "Missing document type"})
    try:
        document_type = DocumentType.parse(request.documentType)
    except DomainValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    data_url = request.imageDataUrl or request.imageUrl
    try:
        if data_url:
            detected_mime, image = decode_data_url(data_url)
            file_name = request.fileName or f"page-{request.pageNumber}.jpg"
            mime_type = request.mimeType or detected_mime
        elif request.pageBuffer:
            image = base64.b64decode(request.pageBuffer, validate=True)
            file_name = request.fileName or f"page-{request.pageNumber}.png"
            mime_type = request.mimeType or "image/png"
        else:
            return JSONResponse(
                status_code=400,
                content={"error": "Missing page image data (pageBuffer or imageDataUrl required)"},
            )
    except (ValueError, binascii.Error) as exc:
        return JSONResponse(status_code=400, content={"error": f"Invalid page image data: {exc}"})

    command = ProcessPageCommand(
        document_type=document_type,
        image=image,
        file_name=file_name,
        mime_type=mime_type,
        original_file_name=request.originalFileName or file_name,
        page_number=request.pageNumber,
    )
    logger.info("Processing page %d of %s", command.page_number, command.original_file_name)
    try:
        result = await handler.handle(command)
    except RepositoryError as exc:
        logger.exception("Failed to store page %d", command.page_number)
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})
    return ProcessPageResponseSchema(**result)
