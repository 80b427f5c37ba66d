"""
Unit tests for HttpExtractionClient against an in-process transport.
"""
import asyncio
import json

import httpx
import pytest

from docreview.application.batch.contracts import ExtractionContext
from docreview.domain.entities.page_descriptor import PageDescriptor
from docreview.domain.value_objects.document_type import DocumentType
from docreview.infrastructure.http.extraction_client import HttpExtractionClient, build_request_body

URL = "http://frontend/api/process-page"
CONTEXT = ExtractionContext(document_type=DocumentType.NPT, original_file_name="shift.pdf")


def _page(image_ref="data:image/jpeg;base64,QUJD"):
    return PageDescriptor(page_number=2, file_name="shift_page_2.jpg", mime_type="image/jpeg", image_ref=image_ref)


def _submit(handler, page=None, **kwargs):
    client = HttpExtractionClient(URL, transport=httpx.MockTransport(handler), **kwargs)
    return asyncio.run(client.submit(page or _page(), CONTEXT))


class TestRequestBody:
    def test_data_url(self):
        body = build_request_body(_page(), CONTEXT)
        assert body == {
            "fileName": "shift_page_2.jpg",
            "mimeType": "image/jpeg",
            "documentType": "NPT",
            "originalFileName": "shift.pdf",
            "pageNumber": 2,
            "imageDataUrl": "data:image/jpeg;base64,QUJD",
        }

    def test_raw_bytes_are_base64_encoded(self):
        body = build_request_body(_page(b"ABC"), CONTEXT)
        assert body["pageBuffer"] == "QUJD"
        assert "imageDataUrl" not in body

    def test_plain_url(self):
        body = build_request_body(_page("http://backend/images/2.jpg"), CONTEXT)
        assert body["imageUrl"] == "http://backend/images/2.jpg"


class TestSubmit:
    def test_success(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "pageNumber": 2, "extractedData": {"id": "d2"}})

        outcome = _submit(handler)

        assert outcome.ok
        assert outcome.data == {"id": "d2"}
        assert seen["body"]["documentType"] == "NPT"

    def test_reported_failure(self):
        outcome = _submit(lambda request: httpx.Response(200, json={"success": False, "error": "Unreadable page"}))
        assert not outcome.ok
        assert outcome.error == "Unreadable page"

    def test_failure_without_message(self):
        outcome = _submit(lambda request: httpx.Response(200, json={"success": False}))
        assert outcome.error == "Processing failed"

    def test_http_error_uses_body_message(self):
        outcome = _submit(lambda request: httpx.Response(400, json={"error": "Missing document type"}))
        assert outcome.error == "Missing document type"

    def test_http_error_without_body(self):
        outcome = _submit(lambda request: httpx.Response(502, text="bad gateway"))
        assert outcome.error == "HTTP error! status: 502"

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        outcome = _submit(handler)
        assert outcome.error.startswith("Network error:")

    def test_transport_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        assert _submit(handler).error == "timeout"

    def test_overall_deadline(self):
        class SlowTransport(httpx.AsyncBaseTransport):
            async def handle_async_request(self, request):
                await asyncio.sleep(1)
                return httpx.Response(200, json={"success": True})

        client = HttpExtractionClient(URL, timeout_seconds=0.01, transport=SlowTransport())
        outcome = asyncio.run(client.submit(_page(), CONTEXT))
        assert outcome.error == "timeout"

    def test_invalid_json(self):
        outcome = _submit(lambda request: httpx.Response(200, text="<html>"))
        assert outcome.error == "Invalid response from extraction service"

    @pytest.mark.parametrize("extracted", [[1, 2], 5, "text"])
    def test_non_object_extracted_data(self, extracted):
        outcome = _submit(lambda request: httpx.Response(200, json={"success": True, "extractedData": extracted}))
        assert not outcome.ok
        assert outcome.error == "Invalid response from extraction service"

    def test_success_without_extracted_data(self):
        outcome = _submit(lambda request: httpx.Response(200, json={"success": True}))
        assert outcome.ok
        assert outcome.data == {}
