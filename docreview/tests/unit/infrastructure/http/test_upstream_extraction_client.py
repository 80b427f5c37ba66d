"""
Unit tests for UpstreamExtractionClient.
"""
import asyncio

import httpx

from docreview.domain.value_objects.document_type import DocumentType
from docreview.infrastructure.http.upstream_extraction_client import UpstreamExtractionClient

URL = "http://engine/extract/"


def _extract(handler, **kwargs):
    client = UpstreamExtractionClient(URL, transport=httpx.MockTransport(handler), **kwargs)
    return asyncio.run(client.extract(b"jpeg-bytes", "scan_page_1.jpg", "image/jpeg", DocumentType.REBUT))


def test_sends_lowercase_document_type():
    seen = {}

    def handler(request):
        seen["body"] = request.content
        return httpx.Response(200, json={"data": {"header": {"date": "2025-03-01"}}})

    outcome = _extract(handler)

    assert outcome.ok
    assert outcome.data == {"header": {"date": "2025-03-01"}}
    assert b"rebut" in seen["body"]
    assert b"jpeg-bytes" in seen["body"]


def test_payload_without_data_key_is_used_whole():
    outcome = _extract(lambda request: httpx.Response(200, json={"header": {}, "items": []}))
    assert outcome.data == {"header": {}, "items": []}


def test_error_status():
    outcome = _extract(lambda request: httpx.Response(500, text="boom"))
    assert outcome.error == "External API error: 500"


def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    assert _extract(handler).error == "Request timeout (5 minutes)"


def test_connection_failure():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert _extract(handler).error.startswith("External API request failed:")


def test_invalid_json():
    outcome = _extract(lambda request: httpx.Response(200, text="not json"))
    assert outcome.error == "Invalid JSON response from external API"
