"""Async client for the batch-session backend (``/batch/start/`` and ``/batch/status/{id}/``)."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from docreview.domain.entities.batch_session import BatchSession
from docreview.domain.exceptions import (
    BackendUnavailableError,
    BatchStatusError,
    SessionNotFoundError,
)
from docreview.domain.value_objects.document_type import DocumentType

logger = logging.getLogger(__name__)


class BatchBackendClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        upload_timeout_seconds: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds, connect=min(10.0, timeout_seconds))
        self._upload_timeout = httpx.Timeout(upload_timeout_seconds, connect=min(10.0, upload_timeout_seconds))
        self._transport = transport

    def status_url(self, session_id: str) -> str:
        return f"{self._base_url}/batch/status/{session_id}/"

    async def fetch_raw(self, session_id: str) -> Dict[str, Any]:
        """Return the raw status payload; errors follow the BatchSessionError taxonomy."""
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.status_url(session_id))
            except httpx.TransportError as exc:
                raise BackendUnavailableError(session_id, f"Batch backend unreachable: {exc}", exc) from exc

        if response.status_code == 404:
            raise SessionNotFoundError(session_id)
        if response.status_code >= 400:
            raise BatchStatusError(
                session_id,
                f"Backend returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise BatchStatusError(session_id, "Invalid JSON from batch backend", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            raise BatchStatusError(session_id, "Unexpected status payload", status_code=response.status_code)
        return payload

    async def fetch(self, session_id: str) -> BatchSession:
        return BatchSession.from_payload(session_id, await self.fetch_raw(session_id))

    async def list_sessions(self) -> Dict[str, Any]:
        """Sessions the backend currently tracks, as ``{"sessions": [...], "total": n}``."""
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(f"{self._base_url}/extraction/batch-sessions/")
            except httpx.TransportError as exc:
                raise BackendUnavailableError("", f"Batch backend unreachable: {exc}", exc) from exc

        if response.status_code >= 400:
            raise BatchStatusError("", f"Backend returned {response.status_code}", status_code=response.status_code)
        try:
            payload = response.json()
        except ValueError as exc:
            raise BatchStatusError("", "Invalid JSON from batch backend", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            raise BatchStatusError("", "Unexpected sessions payload", status_code=response.status_code)
        sessions = payload.get("sessions") or []
        return {"sessions": sessions, "total": payload.get("total") or len(sessions)}

    async def start(
        self,
        filename: str,
        content: bytes,
        content_type: str,
        document_type: DocumentType,
    ) -> str:
        """Hand a whole upload to the backend and return the new session id."""
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        data = {"document_type": document_type.value}
        async with httpx.AsyncClient(timeout=self._upload_timeout, transport=self._transport) as client:
            try:
                response = await client.post(f"{self._base_url}/batch/start/", data=data, files=files)
                response.raise_for_status()
                payload = response.json()
            except httpx.TransportError as exc:
                raise BackendUnavailableError("", f"Batch backend unreachable: {exc}", exc) from exc
            except httpx.HTTPStatusError as exc:
                raise BatchStatusError(
                    "",
                    f"Batch start failed with {exc.response.status_code}",
                    status_code=exc.response.status_code,
                ) from exc
            except ValueError as exc:
                raise BatchStatusError("", "Invalid JSON from batch backend") from exc

        session_id = payload.get("session_id") if isinstance(payload, dict) else None
        if not session_id:
            raise BatchStatusError("", "Batch backend response missing session_id")
        logger.info("Started backend batch session %s for %s", session_id, filename)
        return str(session_id)
