"""
ListDocuments Query - Retrieves stored documents of one type, newest first.
"""
from dataclasses import dataclass
from typing import Optional

from docreview.application.dto.document_dto import DocumentListDTO
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.value_objects.document_type import DocumentType


@dataclass(frozen=True)
class ListDocumentsQuery:
    """Query to list documents of a type."""

    document_type: DocumentType
    limit: Optional[int] = None


class ListDocumentsHandler:
    """Handles ListDocuments queries."""

    def __init__(self, document_repository: DocumentRepository):
        """
        Initialize handler with repository dependency.

        Args:
            document_repository: Repository for document persistence
        """
        self._documents = document_repository

    def handle(self, query: ListDocumentsQuery) -> DocumentListDTO:
        documents = self._documents.find_all(query.document_type, limit=query.limit)
        return DocumentListDTO(
            document_type=query.document_type.value,
            documents=[document.to_dict() for document in documents],
        )
