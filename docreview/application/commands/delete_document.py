"""DeleteDocument Command - removes a stored document."""
from dataclasses import dataclass
from typing import Any, Dict

from docreview.domain.exceptions import EntityNotFoundError
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.value_objects.document_type import DocumentType


@dataclass(frozen=True)
class DeleteDocumentCommand:
    document_id: str
    document_type: DocumentType


class DeleteDocumentHandler:
    """Handles DeleteDocument commands."""

    def __init__(self, document_repository: DocumentRepository):
        self._documents = document_repository

    def handle(self, command: DeleteDocumentCommand) -> Dict[str, Any]:
        if not self._documents.delete(command.document_id, command.document_type):
            raise EntityNotFoundError("Document", command.document_id)
        return {"document_id": command.document_id, "deleted": True}
