"""Apply a backend ``BatchSession`` onto the local PageState table."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from docreview.application.batch.page_store import PageRecordStore
from docreview.domain.entities.batch_session import BatchSession, SessionDocument
from docreview.domain.value_objects.page_status import PageStatus

logger = logging.getLogger(__name__)

INFERRED_FAILURE_MESSAGE = "Page failed on the batch backend"


@dataclass(frozen=True)
class ResolvedPage:
    """A page the backend finished with a known document id."""

    page_number: int
    document_id: str
    document: Optional[SessionDocument] = None


@dataclass
class ReconciliationResult:
    changed: List[int] = field(default_factory=list)
    resolved: List[ResolvedPage] = field(default_factory=list)
    image_updates: Dict[int, str] = field(default_factory=dict)


def resolve_image_url(image_url: Optional[str], backend_url: str) -> Optional[str]:
    """Prefix backend-relative image paths with the backend base URL.

    Examples:
        >>> resolve_image_url("/images/p1.png", "http://backend:8000")
        'http://backend:8000/images/p1.png'
        >>> resolve_image_url("https://cdn/p1.png", "http://backend:8000")
        'https://cdn/p1.png'
    """
    if not image_url:
        return None
    if image_url.startswith(("http://", "https://", "data:")):
        return image_url
    if not backend_url:
        return image_url
    return f"{backend_url.rstrip('/')}/{image_url.lstrip('/')}"


def reconcile(store: PageRecordStore, session: BatchSession, backend_url: str = "") -> ReconciliationResult:
    """
    Merge one status payload into ``store``.

    Precedence per page: explicit ``pages_info`` entry, then the in-flight set
    (``processing_pages`` or legacy ``processing_page``), then inference from
    the processed count (Completed when a document exists, Error otherwise).
    Pages the backend says nothing about keep any terminal state they reached
    and otherwise fall back to Pending.
    """
    result = ReconciliationResult()
    for page_number in store.page_numbers():
        page = store.get(page_number)
        info = session.page_info.get(page_number)
        document = session.document_for_page(page_number)
        document_id: Optional[str] = None

        if info is not None:
            status = info.status
            error = info.error
            document_id = info.document_id or (document.id if document else None)
            resolved_url = resolve_image_url(info.image_url or (document.image_url if document else None), backend_url)
        elif page_number in session.processing_pages:
            status, error = PageStatus.PROCESSING, None
            resolved_url = None
        elif page_number <= session.processed_pages:
            if document is not None:
                status, error, document_id = PageStatus.COMPLETED, None, document.id
            else:
                status, error = PageStatus.ERROR, INFERRED_FAILURE_MESSAGE
            resolved_url = resolve_image_url(document.image_url, backend_url) if document else None
        elif page.status.is_terminal():
            continue
        else:
            status, error = PageStatus.PENDING, None
            resolved_url = None

        if resolved_url and store.update_image_ref(page_number, resolved_url):
            result.image_updates[page_number] = resolved_url

        data = document.data if document is not None else None
        if page.apply_remote(status, data, error):
            result.changed.append(page_number)

        if status is PageStatus.COMPLETED and document_id:
            result.resolved.append(ResolvedPage(page_number, document_id, document))

    logger.debug(
        "Reconciled session %s: %d changed, %d resolved",
        session.session_id,
        len(result.changed),
        len(result.resolved),
    )
    return result
