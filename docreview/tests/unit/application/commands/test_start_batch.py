"""
Unit tests for StartBatch command handler.
"""
import asyncio
from unittest.mock import Mock

import pytest

from docreview.application.batch.registry import BatchRegistry
from docreview.application.commands.start_batch import StartBatchCommand, StartBatchHandler
from docreview.domain.entities.page_descriptor import PageDescriptor
from docreview.domain.value_objects.document_type import DocumentType
from docreview.infrastructure.persistence.memory_session_store import InMemorySessionStore


class FakeBackend:
    def __init__(self):
        self.calls = []

    async def start(self, filename, content, content_type, document_type):
        self.calls.append((filename, document_type))
        return "backend-session"


@pytest.fixture
def splitter():
    splitter = Mock()
    splitter.split = Mock(
        return_value=[PageDescriptor(page_number=n, file_name=f"scan_page_{n}.jpg", image_ref="data:,") for n in (1, 2)]
    )
    return splitter


@pytest.fixture
def harness(splitter):
    registry = BatchRegistry()
    backend = FakeBackend()
    stores = {}
    coordinators = {}

    def session_store_factory(batch_id):
        stores[batch_id] = InMemorySessionStore()
        return stores[batch_id]

    def coordinator_factory(batch_id, sessions):
        coordinator = Mock(completed=False, finished_at=None)
        coordinator.sessions = sessions
        coordinators[batch_id] = coordinator
        return coordinator

    handler = StartBatchHandler(registry, splitter, backend, session_store_factory, coordinator_factory)
    return handler, registry, backend, stores, coordinators


class TestStartBatchHandler:
    def test_direct_batch_is_registered_and_started(self, harness, splitter):
        handler, registry, backend, stores, coordinators = harness

        result = asyncio.run(
            handler.handle(StartBatchCommand(DocumentType.REBUT, "scan.pdf", b"%PDF", "application/pdf"))
        )

        batch_id = result["batchId"]
        assert result["totalPages"] == 2
        assert registry.get(batch_id) is coordinators[batch_id]
        assert backend.calls == []
        assert stores[batch_id].load() is None
        pages, document_type, file_name = coordinators[batch_id].start.call_args[0]
        assert [page.page_number for page in pages] == [1, 2]
        assert document_type is DocumentType.REBUT
        assert file_name == "scan.pdf"
        splitter.split.assert_called_once_with(b"%PDF", "scan.pdf", "application/pdf")

    def test_backend_batch_persists_session_reference(self, harness):
        handler, registry, backend, stores, coordinators = harness

        result = asyncio.run(
            handler.handle(
                StartBatchCommand(DocumentType.NPT, "shift.pdf", b"%PDF", "application/pdf", use_backend=True)
            )
        )

        reference = stores[result["batchId"]].load()
        assert reference.session_id == "backend-session"
        assert backend.calls == [("shift.pdf", DocumentType.NPT)]
        assert coordinators[result["batchId"]].sessions is stores[result["batchId"]]

    def test_each_upload_gets_its_own_batch(self, harness):
        handler, registry, *_ = harness
        command = StartBatchCommand(DocumentType.KOSU, "team.pdf", b"%PDF")

        first = asyncio.run(handler.handle(command))
        second = asyncio.run(handler.handle(command))

        assert first["batchId"] != second["batchId"]
        assert sorted(registry.ids()) == sorted([first["batchId"], second["batchId"]])
