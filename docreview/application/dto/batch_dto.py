"""
Data Transfer Objects for batch coordinator views.

These DTOs are what the API layer reads from a running batch; they carry no
behaviour beyond serialization.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class BatchProgress:
    """Counts and timing for one batch lifecycle."""

    total: int
    pending: int
    processing: int
    completed: int
    error: int
    elapsed_seconds: float
    estimated_seconds_remaining: Optional[float] = None
    high_failure_rate: bool = False

    @property
    def finished(self) -> int:
        return self.completed + self.error

    def to_dict(self) -> Dict[str, Any]:
        """Convert DTO to dictionary."""
        return {
            "total": self.total,
            "pending": self.pending,
            "processing": self.processing,
            "completed": self.completed,
            "error": self.error,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "estimated_seconds_remaining": (
                round(self.estimated_seconds_remaining, 1)
                if self.estimated_seconds_remaining is not None
                else None
            ),
            "high_failure_rate": self.high_failure_rate,
        }


@dataclass(frozen=True)
class BatchViewDTO:
    """Everything the host needs to render a batch."""

    batch_id: str
    mode: Optional[str]
    session_id: Optional[str]
    document_type: str
    original_file_name: str
    completed: bool
    progress: BatchProgress
    pages: List[Dict[str, Any]]
    results: Dict[int, Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "mode": self.mode,
            "session_id": self.session_id,
            "document_type": self.document_type,
            "original_file_name": self.original_file_name,
            "completed": self.completed,
            "progress": self.progress.to_dict(),
            "pages": list(self.pages),
            "results": {str(page): result for page, result in self.results.items()},
        }


@dataclass(frozen=True)
class BatchSummaryDTO:
    """One row of the batch listing."""

    batch_id: str
    mode: Optional[str]
    document_type: str
    original_file_name: str
    completed: bool
    progress: BatchProgress
