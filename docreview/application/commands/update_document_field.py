"""UpdateDocumentField Command - applies one user edit and records it in the document history."""
from dataclasses import dataclass
from typing import Any, Dict

from docreview.domain.exceptions import EntityNotFoundError
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.value_objects.document_type import DocumentType


@dataclass(frozen=True)
class UpdateDocumentFieldCommand:
    document_id: str
    document_type: DocumentType
    field: str
    new_value: Any
    old_value: Any = None
    user: str = "user"


class UpdateDocumentFieldHandler:
    def __init__(self, document_repository: DocumentRepository):
        self._documents = document_repository

    def handle(self, command: UpdateDocumentFieldCommand) -> Dict[str, Any]:
        document = self._documents.find_by_id(command.document_id, command.document_type)
        if document is None:
            raise EntityNotFoundError("Document", command.document_id)
        updated = document.with_field_update(
            command.field,
            command.new_value,
            old_value=command.old_value,
            user=command.user,
        )
        self._documents.save(updated)
        return updated.to_dict()
