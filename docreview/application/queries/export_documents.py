"""
Export queries - render one document or a whole document type as JSON or CSV.

``excel`` is accepted as an alias for ``csv``: the generated links point at
``format=excel`` and spreadsheet tools open the CSV directly.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timezone

from docreview.application.dto.document_dto import ExportFileDTO
from docreview.domain.exceptions import DomainValidationError, EntityNotFoundError
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.services.document_exporter import DocumentExporter
from docreview.domain.value_objects.document_type import DocumentType

JSON_MEDIA_TYPE = "application/json"
CSV_MEDIA_TYPE = "text/csv"


def _normalize_format(value: str) -> str:
    fmt = (value or "json").strip().lower()
    if fmt == "excel":
        return "csv"
    if fmt not in {"json", "csv"}:
        raise DomainValidationError(f"Unsupported export format: {value!r}")
    return fmt


@dataclass(frozen=True)
class ExportDocumentQuery:
    document_id: str
    document_type: DocumentType
    format: str = "json"


class ExportDocumentHandler:
    """Handles single-document exports."""

    def __init__(self, document_repository: DocumentRepository, exporter: DocumentExporter):
        self._documents = document_repository
        self._exporter = exporter

    def handle(self, query: ExportDocumentQuery) -> ExportFileDTO:
        fmt = _normalize_format(query.format)
        document = self._documents.find_by_id(query.document_id, query.document_type)
        if document is None:
            raise EntityNotFoundError("Document", query.document_id)

        if fmt == "json":
            return ExportFileDTO(
                filename=self._exporter.filename_for(document, "json"),
                media_type=JSON_MEDIA_TYPE,
                content=json.dumps(self._exporter.prepare(document), indent=2, ensure_ascii=False),
            )
        return ExportFileDTO(
            filename=self._exporter.filename_for(document, "csv"),
            media_type=CSV_MEDIA_TYPE,
            content=self._exporter.to_csv(document),
        )


@dataclass(frozen=True)
class ExportDocumentsQuery:
    document_type: DocumentType
    format: str = "csv"


class ExportDocumentsHandler:
    """Handles bulk exports of every stored document of a type."""

    def __init__(self, document_repository: DocumentRepository, exporter: DocumentExporter):
        self._documents = document_repository
        self._exporter = exporter

    def handle(self, query: ExportDocumentsQuery) -> ExportFileDTO:
        fmt = _normalize_format(query.format)
        documents = self._documents.find_all(query.document_type)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        base_name = f"{query.document_type.value}_export_{stamp}"

        if fmt == "json":
            payload = [document.to_dict() for document in documents]
            return ExportFileDTO(
                filename=f"{base_name}.json",
                media_type=JSON_MEDIA_TYPE,
                content=json.dumps(payload, indent=2, ensure_ascii=False),
            )
        return ExportFileDTO(
            filename=f"{base_name}.csv",
            media_type=CSV_MEDIA_TYPE,
            content=self._exporter.bulk_csv(documents, query.document_type),
        )
