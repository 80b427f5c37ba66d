"""Shared FastAPI dependencies for v1 API routers.

These factories centralize construction of repositories, HTTP clients and
handlers so routers can depend on simple callables. Tests swap any of them
through ``app.dependency_overrides``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from docreview.application.batch.coordinator import BatchCoordinator
from docreview.application.batch.policy import BatchPolicy
from docreview.application.batch.registry import BatchRegistry
from docreview.application.commands.delete_document import DeleteDocumentHandler
from docreview.application.commands.process_page import ProcessPageHandler
from docreview.application.commands.save_document import SaveDocumentHandler
from docreview.application.commands.start_batch import StartBatchHandler
from docreview.application.commands.update_document_field import UpdateDocumentFieldHandler
from docreview.application.commands.verify_document import VerifyDocumentHandler
from docreview.application.queries.export_documents import ExportDocumentHandler, ExportDocumentsHandler
from docreview.application.queries.get_batch import GetBatchHandler
from docreview.application.queries.get_document import GetDocumentHandler
from docreview.application.queries.list_batches import ListBatchesHandler
from docreview.application.queries.list_documents import ListDocumentsHandler
from docreview.config import get_settings
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.repositories.session_store import SessionStore
from docreview.domain.services.document_exporter import DocumentExporter
from docreview.infrastructure.http.batch_backend_client import BatchBackendClient
from docreview.infrastructure.http.extraction_client import HttpExtractionClient
from docreview.infrastructure.http.upstream_extraction_client import UpstreamExtractionClient
from docreview.infrastructure.pdf.pdf_splitter import PdfSplitter
from docreview.infrastructure.persistence.file_document_repository import FileDocumentRepository
from docreview.infrastructure.persistence.file_session_store import FileSessionStore


@lru_cache()
def _document_repository() -> DocumentRepository:
    return FileDocumentRepository(get_settings().data_dir)


def get_document_repository() -> DocumentRepository:
    """Provide a singleton document repository instance."""
    return _document_repository()


@lru_cache()
def _batch_registry() -> BatchRegistry:
    return BatchRegistry(retention_seconds=get_settings().batch_retention_seconds)


def get_batch_registry() -> BatchRegistry:
    """Provide the process-wide batch registry."""
    return _batch_registry()


@lru_cache()
def _batch_backend_client() -> BatchBackendClient:
    settings = get_settings()
    return BatchBackendClient(settings.ensure_backend_url())


def get_batch_backend_client() -> BatchBackendClient:
    """Provide a cached batch backend client."""
    return _batch_backend_client()


@lru_cache()
def _exporter() -> DocumentExporter:
    return DocumentExporter()


def _session_store_for(batch_id: str) -> SessionStore:
    return FileSessionStore(str(Path(get_settings().data_dir)), key=batch_id)


def _extraction_client_for(policy: BatchPolicy) -> HttpExtractionClient:
    return HttpExtractionClient(get_settings().process_page_url, timeout_seconds=policy.page_timeout_seconds)


def _coordinator_for(batch_id: str, sessions: SessionStore) -> BatchCoordinator:
    settings = get_settings()
    policy = BatchPolicy.from_settings(settings)
    return BatchCoordinator(
        _extraction_client_for(policy),
        _batch_backend_client(),
        sessions,
        policy=policy,
        backend_url=settings.ensure_backend_url(),
    )


@lru_cache()
def _get_start_batch_handler() -> StartBatchHandler:
    return StartBatchHandler(
        _batch_registry(),
        PdfSplitter(),
        _batch_backend_client(),
        _session_store_for,
        _coordinator_for,
    )


def get_start_batch_handler() -> StartBatchHandler:
    """Provide a cached StartBatch handler."""
    return _get_start_batch_handler()


@lru_cache()
def _get_batch_handler() -> GetBatchHandler:
    return GetBatchHandler(_batch_registry())


def get_batch_handler() -> GetBatchHandler:
    """Provide a cached GetBatch handler."""
    return _get_batch_handler()


@lru_cache()
def _get_list_batches_handler() -> ListBatchesHandler:
    return ListBatchesHandler(_batch_registry())


def get_list_batches_handler() -> ListBatchesHandler:
    """Provide a cached ListBatches handler."""
    return _get_list_batches_handler()


@lru_cache()
def _get_process_page_handler() -> ProcessPageHandler:
    settings = get_settings()
    return ProcessPageHandler(
        _document_repository(),
        UpstreamExtractionClient(settings.extraction_api_url, timeout_seconds=settings.upstream_timeout_seconds),
    )


def get_process_page_handler() -> ProcessPageHandler:
    """Provide a cached ProcessPage handler."""
    return _get_process_page_handler()


@lru_cache()
def _get_list_documents_handler() -> ListDocumentsHandler:
    return ListDocumentsHandler(_document_repository())


def get_list_documents_handler() -> ListDocumentsHandler:
    return _get_list_documents_handler()


@lru_cache()
def _get_document_handler() -> GetDocumentHandler:
    return GetDocumentHandler(_document_repository())


def get_document_handler() -> GetDocumentHandler:
    return _get_document_handler()


@lru_cache()
def _get_save_document_handler() -> SaveDocumentHandler:
    return SaveDocumentHandler(_document_repository())


def get_save_document_handler() -> SaveDocumentHandler:
    return _get_save_document_handler()


@lru_cache()
def _get_update_document_field_handler() -> UpdateDocumentFieldHandler:
    return UpdateDocumentFieldHandler(_document_repository())


def get_update_document_field_handler() -> UpdateDocumentFieldHandler:
    return _get_update_document_field_handler()


@lru_cache()
def _get_verify_document_handler() -> VerifyDocumentHandler:
    return VerifyDocumentHandler(_document_repository())


def get_verify_document_handler() -> VerifyDocumentHandler:
    return _get_verify_document_handler()


@lru_cache()
def _get_delete_document_handler() -> DeleteDocumentHandler:
    return DeleteDocumentHandler(_document_repository())


def get_delete_document_handler() -> DeleteDocumentHandler:
    """Provide a cached DeleteDocument handler."""
    return _get_delete_document_handler()


@lru_cache()
def _get_export_document_handler() -> ExportDocumentHandler:
    return ExportDocumentHandler(_document_repository(), _exporter())


def get_export_document_handler() -> ExportDocumentHandler:
    return _get_export_document_handler()


@lru_cache()
def _get_export_documents_handler() -> ExportDocumentsHandler:
    return ExportDocumentsHandler(_document_repository(), _exporter())


def get_export_documents_handler() -> ExportDocumentsHandler:
    return _get_export_documents_handler()
