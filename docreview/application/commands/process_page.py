"""ProcessPage Command - extracts one page through the upstream engine and stores it.

A page already stored for the same upload (original filename, document type
and page number) is not stored twice; the existing record is returned.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from docreview.application.batch.contracts import ExtractionOutcome
from docreview.domain.entities.document import ExtractedDocument
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.value_objects.document_type import DocumentType


class UpstreamExtractor(Protocol):
    async def extract(
        self,
        image: bytes,
        file_name: str,
        mime_type: str,
        document_type: DocumentType,
    ) -> ExtractionOutcome: ...


@dataclass(frozen=True)
class ProcessPageCommand:
    document_type: DocumentType
    image: bytes
    file_name: str
    mime_type: str
    original_file_name: str
    page_number: int
    image_url: Optional[str] = None


class ProcessPageHandler:
    """Handles ProcessPage commands."""

    def __init__(self, document_repository: DocumentRepository, extractor: UpstreamExtractor):
        self._documents = document_repository
        self._extractor = extractor

    async def handle(self, command: ProcessPageCommand) -> Dict[str, Any]:
        outcome = await self._extractor.extract(
            command.image,
            command.file_name,
            command.mime_type,
            command.document_type,
        )
        if not outcome.ok:
            return {"success": False, "pageNumber": command.page_number, "error": outcome.error}

        existing = self._documents.find_for_page(
            command.document_type,
            command.original_file_name,
            command.page_number,
        )
        if existing is not None:
            return {
                "success": True,
                "pageNumber": command.page_number,
                "extractedData": existing.to_dict(),
                "message": f"Page {command.page_number} was already processed",
            }

        document = ExtractedDocument.create(
            command.document_type,
            outcome.data or {},
            original_filename=command.original_file_name,
            page_number=command.page_number,
            file_size=len(command.image),
            image_url=command.image_url,
        )
        self._documents.save(document)
        return {
            "success": True,
            "pageNumber": command.page_number,
            "extractedData": document.to_dict(),
            "message": f"Page {command.page_number} processed successfully",
        }
