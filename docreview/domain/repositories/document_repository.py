"""Document repository interface (Abstract Base Class)."""

from abc import ABC, abstractmethod
from typing import List, Optional

from docreview.domain.entities.document import ExtractedDocument
from docreview.domain.value_objects.document_type import DocumentType


class DocumentRepository(ABC):
    """Abstract repository for extracted documents, partitioned by document type."""

    @abstractmethod
    def save(self, document: ExtractedDocument) -> None:
        """Persist (insert or replace) the given document."""

    @abstractmethod
    def find_by_id(self, document_id: str, document_type: DocumentType) -> Optional[ExtractedDocument]:
        """Return the document with the provided identifier, if it exists."""

    @abstractmethod
    def find_all(self, document_type: DocumentType, limit: Optional[int] = None) -> List[ExtractedDocument]:
        """Return documents of a type, newest first."""

    @abstractmethod
    def find_for_page(
        self,
        document_type: DocumentType,
        original_filename: str,
        page_number: int,
    ) -> Optional[ExtractedDocument]:
        """Return the document already extracted for a page of an upload, if any."""

    @abstractmethod
    def delete(self, document_id: str, document_type: DocumentType) -> bool:
        """Delete the document; return True if removed."""
