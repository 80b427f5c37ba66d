"""Page-batch extraction coordinator: throttled direct submission or polled backend sessions."""
from docreview.application.batch.contracts import (
    BatchStatusClient,
    ExtractionClient,
    ExtractionContext,
    ExtractionOutcome,
)
from docreview.application.batch.coordinator import BatchCoordinator, BatchMode
from docreview.application.batch.policy import BatchPolicy
from docreview.application.batch.registry import BatchRegistry

__all__ = [
    "BatchCoordinator",
    "BatchMode",
    "BatchPolicy",
    "BatchRegistry",
    "BatchStatusClient",
    "ExtractionClient",
    "ExtractionContext",
    "ExtractionOutcome",
]
