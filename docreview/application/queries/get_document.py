"""GetDocument Query - Retrieves one stored document."""
from dataclasses import dataclass
from typing import Any, Dict

from docreview.domain.exceptions import EntityNotFoundError
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.value_objects.document_type import DocumentType


@dataclass(frozen=True)
class GetDocumentQuery:
    document_id: str
    document_type: DocumentType


class GetDocumentHandler:
    def __init__(self, document_repository: DocumentRepository):
        self._documents = document_repository

    def handle(self, query: GetDocumentQuery) -> Dict[str, Any]:
        document = self._documents.find_by_id(query.document_id, query.document_type)
        if document is None:
            raise EntityNotFoundError("Document", query.document_id)
        return document.to_dict()
