"""Data Transfer Objects for document queries."""

from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass(frozen=True)
class DocumentListDTO:
    """List of documents of one type, newest first."""

    document_type: str
    documents: List[Dict[str, Any]]

    @property
    def total(self) -> int:
        return len(self.documents)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API response."""
        return {
            "document_type": self.document_type,
            "documents": list(self.documents),
            "total": self.total,
        }


@dataclass(frozen=True)
class ExportFileDTO:
    """Rendered export ready to stream back to the client."""

    filename: str
    media_type: str
    content: str
