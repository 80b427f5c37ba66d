"""Integration tests for POST /api/process-page."""
from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

from docreview.api.v1 import dependencies
from docreview.application.batch.contracts import ExtractionOutcome
from docreview.application.commands.process_page import ProcessPageHandler
from docreview.infrastructure.persistence.file_document_repository import FileDocumentRepository
from docreview.main import app


class FakeExtractor:
    def __init__(self, outcome):
        self.outcome = outcome
        self.images = []

    async def extract(self, image, file_name, mime_type, document_type):
        self.images.append((image, file_name, mime_type))
        return self.outcome


@pytest.fixture(autouse=True)
def reset_dependency_overrides():
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture()
def extractor():
    return FakeExtractor(ExtractionOutcome.success({"header": {"date": "2025-03-01"}}))


@pytest.fixture()
def client(tmp_path, extractor) -> TestClient:
    handler = ProcessPageHandler(FileDocumentRepository(str(tmp_path)), extractor)
    app.dependency_overrides[dependencies.get_process_page_handler] = lambda: handler
    return TestClient(app)


def test_data_url_page_is_processed(client: TestClient, extractor) -> None:
    response = client.post(
        "/api/process-page",
        json={
            "imageDataUrl": "data:image/jpeg;base64," + base64.b64encode(b"jpeg").decode(),
            "fileName": "scan_page_1.jpg",
            "documentType": "Rebut",
            "originalFileName": "scan.pdf",
            "pageNumber": 1,
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["extractedData"]["metadata"]["original_filename"] == "scan.pdf"
    assert extractor.images == [(b"jpeg", "scan_page_1.jpg", "image/jpeg")]


def test_page_buffer_is_accepted(client: TestClient, extractor) -> None:
    response = client.post(
        "/api/process-page",
        json={"pageBuffer": base64.b64encode(b"png").decode(), "documentType": "NPT", "pageNumber": 3},
    )

    assert response.status_code == 200
    assert extractor.images == [(b"png", "page-3.png", "image/png")]


def test_second_submission_returns_existing_document(client: TestClient) -> None:
    body = {
        "pageBuffer": base64.b64encode(b"png").decode(),
        "documentType": "Kosu",
        "originalFileName": "team.pdf",
        "pageNumber": 2,
    }
    first = client.post("/api/process-page", json=body).json()
    second = client.post("/api/process-page", json=body).json()

    assert second["extractedData"]["id"] == first["extractedData"]["id"]
    assert "already processed" in second["message"]


def test_missing_document_type(client: TestClient) -> None:
    response = client.post("/api/process-page", json={"pageBuffer": "cG5n"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing document type"}


def test_missing_image(client: TestClient) -> None:
    response = client.post("/api/process-page", json={"documentType": "Rebut"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing page image data (pageBuffer or imageDataUrl required)"}


def test_engine_failure_is_reported_in_body(tmp_path) -> None:
    handler = ProcessPageHandler(
        FileDocumentRepository(str(tmp_path)),
        FakeExtractor(ExtractionOutcome.failure("External API error: 503")),
    )
    app.dependency_overrides[dependencies.get_process_page_handler] = lambda: handler

    response = TestClient(app).post(
        "/api/process-page",
        json={"pageBuffer": "cG5n", "documentType": "Rebut", "pageNumber": 4},
    )

    assert response.status_code == 200
    assert response.json() == {"success": False, "pageNumber": 4, "error": "External API error: 503"}
