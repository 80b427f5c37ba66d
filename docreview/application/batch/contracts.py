"""
Ports the coordinator depends on.

Concrete HTTP implementations live in ``docreview.infrastructure.http``; tests
inject fakes that satisfy the same protocols.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from docreview.domain.entities.batch_session import BatchSession
from docreview.domain.entities.page_descriptor import PageDescriptor
from docreview.domain.value_objects.document_type import DocumentType


@dataclass(frozen=True)
class ExtractionContext:
    """Document-level context sent along with every page."""

    document_type: DocumentType
    original_file_name: str


@dataclass(frozen=True)
class ExtractionOutcome:
    ok: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, data: Optional[Dict[str, Any]]) -> "ExtractionOutcome":
        return cls(ok=True, data=dict(data or {}))

    @classmethod
    def failure(cls, error: Optional[str]) -> "ExtractionOutcome":
        return cls(ok=False, error=error or "Unknown error")


class ExtractionClient(Protocol):
    async def submit(self, page: PageDescriptor, context: ExtractionContext) -> ExtractionOutcome:
        """Extract one page. Must resolve, never raise."""
        ...


class BatchStatusClient(Protocol):
    async def fetch(self, session_id: str) -> BatchSession:
        """Fetch the session status.

        Raises ``SessionNotFoundError`` on 404, ``BackendUnavailableError`` on
        network failure and ``BatchStatusError`` on any other failure.
        """
        ...
