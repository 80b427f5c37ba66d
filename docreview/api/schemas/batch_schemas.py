"""
Schemas for batch coordinator endpoints
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class BatchCreatedSchema(BaseModel):
    batchId: str
    totalPages: int


class BatchProgressSchema(BaseModel):
    total: int
    pending: int
    processing: int
    completed: int
    error: int
    elapsedSeconds: float
    estimatedSecondsRemaining: Optional[float] = None
    highFailureRate: bool = False


class PageStateSchema(BaseModel):
    pageNumber: int
    fileName: str
    mimeType: str
    byteSize: int = 0
    status: str
    extractedData: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    retryCount: int = 0
    imageUrl: Optional[str] = None


class BatchViewSchema(BaseModel):
    batchId: str
    mode: Optional[str] = None
    sessionId: Optional[str] = None
    documentType: str
    originalFileName: str
    completed: bool
    progress: BatchProgressSchema
    pages: List[PageStateSchema]
    results: Dict[str, Dict[str, Any]]


class BatchSummarySchema(BaseModel):
    batchId: str
    mode: Optional[str] = None
    documentType: str
    originalFileName: str
    completed: bool
    progress: BatchProgressSchema


class BatchListSchema(BaseModel):
    batches: List[BatchSummarySchema]
    total: int


class RetryResponseSchema(BaseModel):
    batchId: str
    retriedPages: List[int]


def progress_to_schema(progress) -> BatchProgressSchema:
    return BatchProgressSchema(
        total=progress.total,
        pending=progress.pending,
        processing=progress.processing,
        completed=progress.completed,
        error=progress.error,
        elapsedSeconds=round(progress.elapsed_seconds, 3),
        estimatedSecondsRemaining=progress.estimated_seconds_remaining,
        highFailureRate=progress.high_failure_rate,
    )


def batch_summary_to_schema(summary) -> BatchSummarySchema:
    return BatchSummarySchema(
        batchId=summary.batch_id,
        mode=summary.mode,
        documentType=summary.document_type,
        originalFileName=summary.original_file_name,
        completed=summary.completed,
        progress=progress_to_schema(summary.progress),
    )


def batch_view_to_schema(view) -> BatchViewSchema:
    return BatchViewSchema(
        batchId=view.batch_id,
        mode=view.mode,
        sessionId=view.session_id,
        documentType=view.document_type,
        originalFileName=view.original_file_name,
        completed=view.completed,
        progress=progress_to_schema(view.progress),
        pages=[PageStateSchema(**page) for page in view.pages],
        results={str(page): result for page, result in view.results.items()},
    )
