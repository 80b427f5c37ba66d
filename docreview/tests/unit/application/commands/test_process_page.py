"""
Unit tests for ProcessPage command handler.

The upstream engine is faked; the repository is a Mock so the duplicate-page
guard can be exercised without touching disk.
"""
import asyncio
from unittest.mock import Mock

import pytest

from docreview.application.batch.contracts import ExtractionOutcome
from docreview.application.commands.process_page import ProcessPageCommand, ProcessPageHandler
from docreview.domain.entities.document import ExtractedDocument
from docreview.domain.value_objects.document_type import DocumentType


class FakeExtractor:
    def __init__(self, outcome):
        self.outcome = outcome
        self.calls = []

    async def extract(self, image, file_name, mime_type, document_type):
        self.calls.append((file_name, mime_type, document_type))
        return self.outcome


@pytest.fixture
def mock_document_repository():
    """Mock document repository."""
    repo = Mock()
    repo.find_for_page = Mock(return_value=None)
    repo.save = Mock(return_value=None)
    return repo


@pytest.fixture
def command():
    return ProcessPageCommand(
        document_type=DocumentType.REBUT,
        image=b"jpeg-bytes",
        file_name="scan_page_2.jpg",
        mime_type="image/jpeg",
        original_file_name="scan.pdf",
        page_number=2,
    )


class TestProcessPageHandler:
    def test_success_stores_document(self, mock_document_repository, command):
        extractor = FakeExtractor(ExtractionOutcome.success({"header": {"date": "2025-03-01"}}))
        handler = ProcessPageHandler(mock_document_repository, extractor)

        result = asyncio.run(handler.handle(command))

        assert result["success"] is True
        assert result["pageNumber"] == 2
        assert result["message"] == "Page 2 processed successfully"
        saved = mock_document_repository.save.call_args[0][0]
        assert saved.document_type is DocumentType.REBUT
        assert saved.page_number == 2
        assert saved.original_filename == "scan.pdf"
        assert saved.metadata["file_size"] == len(b"jpeg-bytes")
        assert result["extractedData"]["id"] == saved.id
        assert extractor.calls == [("scan_page_2.jpg", "image/jpeg", DocumentType.REBUT)]

    def test_engine_failure_is_reported_not_raised(self, mock_document_repository, command):
        handler = ProcessPageHandler(mock_document_repository, FakeExtractor(ExtractionOutcome.failure("External API error: 500")))

        result = asyncio.run(handler.handle(command))

        assert result == {"success": False, "pageNumber": 2, "error": "External API error: 500"}
        mock_document_repository.save.assert_not_called()

    def test_already_processed_page_is_not_duplicated(self, mock_document_repository, command):
        existing = ExtractedDocument.create(
            DocumentType.REBUT, {}, original_filename="scan.pdf", page_number=2, document_id="existing-2"
        )
        mock_document_repository.find_for_page.return_value = existing
        handler = ProcessPageHandler(mock_document_repository, FakeExtractor(ExtractionOutcome.success({})))

        result = asyncio.run(handler.handle(command))

        assert result["success"] is True
        assert result["extractedData"]["id"] == "existing-2"
        assert "already processed" in result["message"]
        mock_document_repository.save.assert_not_called()
        mock_document_repository.find_for_page.assert_called_once_with(DocumentType.REBUT, "scan.pdf", 2)
