"""ListBatches Query - Batches currently held by this process."""
from dataclasses import dataclass
from typing import List

from docreview.application.batch.registry import BatchRegistry
from docreview.application.dto.batch_dto import BatchSummaryDTO


@dataclass(frozen=True)
class ListBatchesQuery:
    active_only: bool = False


class ListBatchesHandler:
    def __init__(self, registry: BatchRegistry):
        self._registry = registry

    def handle(self, query: ListBatchesQuery) -> List[BatchSummaryDTO]:
        summaries: List[BatchSummaryDTO] = []
        for batch_id in self._registry.ids():
            coordinator = self._registry.get(batch_id)
            if coordinator is None:
                continue
            if query.active_only and coordinator.completed:
                continue
            context = coordinator.context
            summaries.append(
                BatchSummaryDTO(
                    batch_id=batch_id,
                    mode=coordinator.mode.value if coordinator.mode else None,
                    document_type=context.document_type.value if context else "",
                    original_file_name=context.original_file_name if context else "",
                    completed=coordinator.completed,
                    progress=coordinator.progress(),
                )
            )
        return summaries
