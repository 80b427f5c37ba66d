"""
Stable result shape handed to ``on_page_complete``.

Direct mode receives whole document records from ``/process-page``; polled
mode only gets the minimal backend document (``id``, ``data``, ``metadata``),
so the missing metadata is synthesized here from the batch context.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from docreview.application.batch.contracts import ExtractionContext
from docreview.domain.entities.batch_session import SessionDocument
from docreview.domain.entities.document import export_urls, generate_document_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_result(
    page_number: int,
    payload: Optional[Dict[str, Any]],
    context: ExtractionContext,
    *,
    document_id: Optional[str] = None,
    image_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build the normalized result for one completed page.

    ``payload`` is either a full document record (has ``data``) or the bare
    extracted data.
    """
    moment = now or _utcnow()
    record = dict(payload or {})
    if isinstance(record.get("data"), dict):
        data = dict(record["data"])
    else:
        data = {key: value for key, value in record.items() if key not in {"id", "metadata"}}

    resolved_id = str(document_id or record.get("id") or record.get("_id") or generate_document_id(page_number, moment))
    metadata = dict(record.get("metadata") or {})
    metadata.setdefault("filename", context.original_file_name)
    metadata.setdefault("original_filename", context.original_file_name)
    metadata.setdefault("document_type", context.document_type.value)
    metadata.setdefault("page_number", page_number)
    metadata.setdefault("processed_at", moment.isoformat())

    urls = export_urls(resolved_id)
    return {
        "id": resolved_id,
        "data": data,
        "metadata": metadata,
        "filename": record.get("filename") or metadata["filename"],
        "document_type": metadata["document_type"],
        "remark": record.get("remark") or "Document processed successfully",
        "imageUrl": record.get("imageUrl") or record.get("image_url") or image_url,
        "created_at": record.get("created_at") or metadata["processed_at"],
        "updated_at": record.get("updated_at") or metadata["processed_at"],
        "json_url": record.get("json_url") or urls["json_url"],
        "excel_url": record.get("excel_url") or urls["excel_url"],
    }


def normalize_session_document(
    document: SessionDocument,
    context: ExtractionContext,
    *,
    image_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "id": document.id,
        "data": document.data,
        "metadata": document.metadata,
        "filename": document.filename,
        "remark": document.remark,
        "imageUrl": document.image_url,
        "json_url": document.json_url,
        "excel_url": document.excel_url,
    }
    return normalize_result(
        document.page,
        payload,
        context,
        image_url=image_url,
        now=now,
    )
