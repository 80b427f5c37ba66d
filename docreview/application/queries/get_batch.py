"""GetBatch Query - Snapshot of a running or finished batch."""
from dataclasses import dataclass

from docreview.application.batch.registry import BatchRegistry
from docreview.application.dto.batch_dto import BatchViewDTO
from docreview.domain.exceptions import EntityNotFoundError


@dataclass(frozen=True)
class GetBatchQuery:
    batch_id: str


class GetBatchHandler:
    def __init__(self, registry: BatchRegistry):
        self._registry = registry

    def handle(self, query: GetBatchQuery) -> BatchViewDTO:
        coordinator = self._registry.get(query.batch_id)
        if coordinator is None:
            raise EntityNotFoundError("Batch", query.batch_id)
        context = coordinator.context
        return BatchViewDTO(
            batch_id=query.batch_id,
            mode=coordinator.mode.value if coordinator.mode else None,
            session_id=coordinator.session_id,
            document_type=context.document_type.value if context else "",
            original_file_name=context.original_file_name if context else "",
            completed=coordinator.completed,
            progress=coordinator.progress(),
            pages=[page.to_dict() for page in coordinator.pages()],
            results=coordinator.results(),
        )
