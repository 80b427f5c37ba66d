"""HTTP extraction client calling the ``/process-page`` endpoint for one page."""
from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Dict, Optional

import httpx

from docreview.application.batch.contracts import ExtractionContext, ExtractionOutcome
from docreview.domain.entities.page_descriptor import PageDescriptor

logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "timeout"


class HttpExtractionClient:
    """Submits a page and normalises every failure into an ``ExtractionOutcome``."""

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 900.0,
        connect_timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._connect_timeout = min(connect_timeout_seconds, timeout_seconds)
        self._transport = transport

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def submit(self, page: PageDescriptor, context: ExtractionContext) -> ExtractionOutcome:
        try:
            return await asyncio.wait_for(self._post(page, context), timeout=self._timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("Page %d timed out after %.0fs", page.page_number, self._timeout_seconds)
            return ExtractionOutcome.failure(TIMEOUT_ERROR)
        except httpx.HTTPStatusError as exc:
            message = _error_from_response(exc.response) or f"HTTP error! status: {exc.response.status_code}"
            logger.warning("Page %d rejected with %d: %s", page.page_number, exc.response.status_code, message)
            return ExtractionOutcome.failure(message)
        except httpx.RequestError as exc:
            logger.warning("Page %d request failed: %s", page.page_number, exc)
            return ExtractionOutcome.failure(f"Network error: {exc}")
        except ValueError as exc:
            logger.warning("Page %d returned an unreadable body: %s", page.page_number, exc)
            return ExtractionOutcome.failure("Invalid response from extraction service")

    async def _post(self, page: PageDescriptor, context: ExtractionContext) -> ExtractionOutcome:
        timeout = httpx.Timeout(self._timeout_seconds, connect=self._connect_timeout)
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            response = await client.post(self._url, json=build_request_body(page, context))
            response.raise_for_status()
            body = response.json()

        if not isinstance(body, dict):
            raise ValueError("response body is not an object")
        if body.get("success"):
            data = body.get("extractedData")
            if data is not None and not isinstance(data, dict):
                raise ValueError("extractedData is not an object")
            return ExtractionOutcome.success(data)
        return ExtractionOutcome.failure(body.get("error") or "Processing failed")


def build_request_body(page: PageDescriptor, context: ExtractionContext) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "fileName": page.file_name,
        "mimeType": page.mime_type,
        "documentType": context.document_type.value,
        "originalFileName": context.original_file_name,
        "pageNumber": page.page_number,
    }
    image_ref = page.image_ref
    if isinstance(image_ref, (bytes, bytearray)):
        body["pageBuffer"] = base64.b64encode(bytes(image_ref)).decode("ascii")
    elif image_ref.startswith("data:"):
        body["imageDataUrl"] = image_ref
    else:
        body["imageUrl"] = image_ref
    return body


def _error_from_response(response: httpx.Response) -> Optional[str]:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        return payload.get("error") or payload.get("detail")
    return None
