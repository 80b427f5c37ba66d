"""SaveDocument Command - stores a document record posted by a client."""
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from docreview.domain.entities.document import ExtractedDocument
from docreview.domain.exceptions import DomainValidationError
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.value_objects.document_type import DocumentType


@dataclass(frozen=True)
class SaveDocumentCommand:
    data: Dict[str, Any]
    metadata: Dict[str, Any]
    remark: Optional[str] = None
    image_url: Optional[str] = None


class SaveDocumentHandler:
    def __init__(self, document_repository: DocumentRepository):
        self._documents = document_repository

    def handle(self, command: SaveDocumentCommand) -> Dict[str, Any]:
        raw_type = command.metadata.get("document_type") or command.data.get("document_type")
        if not raw_type:
            raise DomainValidationError("metadata.document_type is required")
        document_type = DocumentType.parse(raw_type)

        original_filename = command.metadata.get("original_filename") or command.metadata.get("filename") or ""
        page_number = command.metadata.get("page_number") or 1
        try:
            page_number = int(page_number)
        except (TypeError, ValueError) as exc:
            raise DomainValidationError("metadata.page_number must be an integer") from exc

        document = ExtractedDocument.create(
            document_type,
            command.data,
            original_filename=original_filename,
            page_number=page_number,
            file_size=int(command.metadata.get("file_size") or 0),
            remark=command.remark,
            image_url=command.image_url,
        )
        extra_metadata = {k: v for k, v in command.metadata.items() if k not in document.metadata}
        if extra_metadata:
            document = replace(document, metadata={**document.metadata, **extra_metadata})
        self._documents.save(document)
        return document.to_dict()
