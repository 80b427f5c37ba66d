"""Client for the upstream OCR/extraction engine used by ``/api/process-page``."""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from docreview.application.batch.contracts import ExtractionOutcome
from docreview.domain.value_objects.document_type import DocumentType

logger = logging.getLogger(__name__)


class UpstreamExtractionClient:
    """One multipart call per page; no retries here, the engine retries internally."""

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout = httpx.Timeout(timeout_seconds, connect=min(10.0, timeout_seconds))
        self._timeout_minutes = round(timeout_seconds / 60)
        self._transport = transport

    async def extract(
        self,
        image: bytes,
        file_name: str,
        mime_type: str,
        document_type: DocumentType,
    ) -> ExtractionOutcome:
        files = {"file": (file_name, image, mime_type or "image/png")}
        data = {"document_type": document_type.value.lower()}
        logger.info("Sending %s (%d bytes) to extraction engine", file_name, len(image))
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(self._url, data=data, files=files)
            except httpx.TimeoutException:
                return ExtractionOutcome.failure(f"Request timeout ({self._timeout_minutes} minutes)")
            except httpx.RequestError as exc:
                logger.warning("Extraction engine unreachable: %s", exc)
                return ExtractionOutcome.failure(f"External API request failed: {exc}")

        if response.status_code >= 400:
            logger.warning("Extraction engine answered %d: %s", response.status_code, response.text[:200])
            return ExtractionOutcome.failure(f"External API error: {response.status_code}")
        try:
            payload = response.json()
        except ValueError:
            return ExtractionOutcome.failure("Invalid JSON response from external API")
        if not isinstance(payload, dict):
            return ExtractionOutcome.failure("Invalid JSON response from external API")

        data_payload = payload.get("data")
        return ExtractionOutcome.success(data_payload if isinstance(data_payload, dict) else payload)
