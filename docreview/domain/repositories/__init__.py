"""Domain repository interfaces."""

from .document_repository import DocumentRepository
from .session_store import SessionStore

__all__ = ["DocumentRepository", "SessionStore"]
