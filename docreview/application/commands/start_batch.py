"""StartBatch Command - splits an upload into pages and starts a coordinator for it.

With ``use_backend`` the whole upload is first handed to the batch backend and
the returned session id persisted, so the coordinator picks polled mode.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Protocol

from docreview.application.batch.coordinator import BatchCoordinator
from docreview.application.batch.registry import BatchRegistry
from docreview.domain.entities.page_descriptor import PageDescriptor
from docreview.domain.repositories.session_store import SessionStore
from docreview.domain.value_objects.document_type import DocumentType
from docreview.domain.value_objects.session_reference import SessionReference

logger = logging.getLogger(__name__)


class PageSplitter(Protocol):
    def split(self, content: bytes, file_name: str, mime_type: str = "") -> List[PageDescriptor]: ...


class BatchStarter(Protocol):
    async def start(
        self,
        filename: str,
        content: bytes,
        content_type: str,
        document_type: DocumentType,
    ) -> str: ...


CoordinatorFactory = Callable[[str, SessionStore], BatchCoordinator]
SessionStoreFactory = Callable[[str], SessionStore]


@dataclass(frozen=True)
class StartBatchCommand:
    document_type: DocumentType
    file_name: str
    content: bytes
    content_type: str = ""
    use_backend: bool = False


class StartBatchHandler:
    """Handles StartBatch commands."""

    def __init__(
        self,
        registry: BatchRegistry,
        splitter: PageSplitter,
        backend: BatchStarter,
        session_store_factory: SessionStoreFactory,
        coordinator_factory: CoordinatorFactory,
    ):
        self._registry = registry
        self._splitter = splitter
        self._backend = backend
        self._session_store_factory = session_store_factory
        self._coordinator_factory = coordinator_factory

    async def handle(self, command: StartBatchCommand) -> Dict[str, Any]:
        pages = self._splitter.split(command.content, command.file_name, command.content_type)
        batch_id = uuid.uuid4().hex
        sessions = self._session_store_factory(batch_id)

        if command.use_backend:
            session_id = await self._backend.start(
                command.file_name,
                command.content,
                command.content_type,
                command.document_type,
            )
            sessions.save(SessionReference(session_id=session_id, timestamp=datetime.now(timezone.utc)))

        coordinator = self._coordinator_factory(batch_id, sessions)
        self._registry.add(batch_id, coordinator)
        coordinator.start(pages, command.document_type, command.file_name)
        logger.info("Batch %s created with %d pages", batch_id, len(pages))
        return {"batchId": batch_id, "totalPages": len(pages)}
