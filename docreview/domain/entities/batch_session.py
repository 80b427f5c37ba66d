"""
BatchSession - read-only view of a backend batch session status payload.

The batch backend owns the authoritative per-page status in polled mode; this
module parses its ``/batch/status/{sessionId}`` response into typed objects
and tolerates the legacy single ``processing_page`` field.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

from docreview.domain.value_objects.page_status import PageStatus, SessionState


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class RemotePageInfo:
    """Backend view of a single page."""

    status: PageStatus
    document_id: Optional[str] = None
    error: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RemotePageInfo":
        document_id = data.get("document_id")
        return cls(
            status=PageStatus.from_remote(data.get("status")),
            document_id=str(document_id) if document_id else None,
            error=data.get("error") or None,
            image_url=data.get("image_url") or None,
        )


@dataclass(frozen=True)
class SessionDocument:
    """A finalized extraction record published by the backend."""

    page: int
    id: str
    data: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    image_url: Optional[str] = None
    filename: Optional[str] = None
    remark: Optional[str] = None
    json_url: Optional[str] = None
    excel_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["SessionDocument"]:
        page = _as_int(data.get("page"), default=0)
        doc_id = data.get("id") or data.get("_id")
        if page < 1 or not doc_id:
            return None
        return cls(
            page=page,
            id=str(doc_id),
            data=dict(data.get("data") or {}),
            metadata=dict(data.get("metadata") or {}),
            image_url=data.get("imageUrl") or data.get("image_url"),
            filename=data.get("filename"),
            remark=data.get("remark"),
            json_url=data.get("json_url"),
            excel_url=data.get("excel_url"),
        )


@dataclass(frozen=True)
class BatchSession:
    """Aggregate status of one backend batch session."""

    session_id: str
    status: SessionState
    total_pages: int
    completed_pages: int = 0
    failed_pages: int = 0
    processing_pages: FrozenSet[int] = frozenset()
    page_info: Dict[int, RemotePageInfo] = field(default_factory=dict)
    documents: List[SessionDocument] = field(default_factory=list)

    @property
    def processed_pages(self) -> int:
        return self.completed_pages + self.failed_pages

    def is_terminal(self) -> bool:
        """A completed/failed session must not be polled again."""
        return self.status.is_terminal()

    def is_finished(self) -> bool:
        return self.is_terminal() or self.processed_pages >= self.total_pages

    def has_progress(self) -> bool:
        return self.processed_pages > 0

    def document_for_page(self, page_number: int) -> Optional[SessionDocument]:
        for document in self.documents:
            if document.page == page_number:
                return document
        return None

    @classmethod
    def from_payload(cls, session_id: str, payload: Dict[str, Any]) -> "BatchSession":
        """Parse the backend JSON body."""
        raw_processing = payload.get("processing_pages")
        processing: set[int] = set()
        if isinstance(raw_processing, list):
            processing.update(_as_int(p, default=-1) for p in raw_processing)
        legacy_page = payload.get("processing_page")
        if legacy_page is not None:
            processing.add(_as_int(legacy_page, default=-1))
        processing.discard(-1)

        page_info: Dict[int, RemotePageInfo] = {}
        for key, value in (payload.get("pages_info") or {}).items():
            page_number = _as_int(key, default=0)
            if page_number < 1 or not isinstance(value, dict):
                continue
            page_info[page_number] = RemotePageInfo.from_dict(value)

        documents: List[SessionDocument] = []
        for entry in payload.get("documents") or []:
            if not isinstance(entry, dict):
                continue
            document = SessionDocument.from_dict(entry)
            if document is not None:
                documents.append(document)

        return cls(
            session_id=session_id,
            status=SessionState.parse(payload.get("status")),
            total_pages=_as_int(payload.get("total_pages")),
            completed_pages=_as_int(payload.get("completed_pages")),
            failed_pages=_as_int(payload.get("failed_pages")),
            processing_pages=frozenset(processing),
            page_info=page_info,
            documents=documents,
        )
