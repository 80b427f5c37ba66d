"""VerifyDocument Command - moves a document through the review workflow."""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from docreview.domain.exceptions import EntityNotFoundError
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.value_objects.document_type import DocumentType, VerificationStatus


@dataclass(frozen=True)
class VerifyDocumentCommand:
    document_id: str
    document_type: DocumentType
    status: VerificationStatus
    user: str = "user"
    notes: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class VerifyDocumentHandler:
    def __init__(self, document_repository: DocumentRepository):
        self._documents = document_repository

    def handle(self, command: VerifyDocumentCommand) -> Dict[str, Any]:
        document = self._documents.find_by_id(command.document_id, command.document_type)
        if document is None:
            raise EntityNotFoundError("Document", command.document_id)
        updated = document.with_verification(
            command.status,
            user=command.user,
            notes=command.notes,
            data=command.data,
            metadata=command.metadata,
        )
        self._documents.save(updated)
        return updated.to_dict()
