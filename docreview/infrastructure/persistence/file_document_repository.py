"""File-based implementation of DocumentRepository."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from docreview.constants import DOCUMENT_SNAPSHOT_VERSION
from docreview.domain.entities.document import ExtractedDocument
from docreview.domain.exceptions import RepositoryError
from docreview.domain.repositories.document_repository import DocumentRepository
from docreview.domain.value_objects.document_type import DocumentType

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]+$")


class FileDocumentRepository(DocumentRepository):
    """Persist documents as one JSON snapshot per document, grouped by type."""

    def __init__(self, base_dir: str = "backend_data") -> None:
        self.base_dir = Path(base_dir) / "documents"
        self._ensure_base_dir()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def save(self, document: ExtractedDocument) -> None:
        snapshot = {"version": DOCUMENT_SNAPSHOT_VERSION, **document.to_dict()}
        type_dir = self._type_dir(document.document_type)
        try:
            type_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError(f"Failed to create directory for {document.document_type.value}", exc)

        snapshot_path = self._snapshot_path(document.id, document.document_type)
        tmp_path = snapshot_path.with_suffix(".tmp")

        try:
            tmp_path.write_text(json.dumps(snapshot, indent=2, default=str), encoding="utf-8")
            tmp_path.replace(snapshot_path)
            logger.debug("Saved document %s", document.id)
        except (OSError, TypeError, ValueError) as exc:
            raise RepositoryError(f"Failed to save document {document.id}", exc)
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)

    def find_by_id(self, document_id: str, document_type: DocumentType) -> Optional[ExtractedDocument]:
        data = self._load_snapshot(document_id, document_type)
        if data is None:
            return None
        try:
            return ExtractedDocument.from_dict(data)
        except Exception as exc:  # pragma: no cover - unexpected snapshot structure
            raise RepositoryError(f"Failed to hydrate document {document_id}", exc)

    def find_all(self, document_type: DocumentType, limit: Optional[int] = None) -> List[ExtractedDocument]:
        type_dir = self._type_dir(document_type)
        if not type_dir.exists():
            return []

        documents: List[ExtractedDocument] = []
        for path in type_dir.glob("*.json"):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                documents.append(ExtractedDocument.from_dict(data))
            except Exception as exc:
                logger.warning("Skipping document %s due to snapshot error: %s", path.stem, exc)
                continue

        documents.sort(key=lambda document: document.created_at, reverse=True)
        return documents if limit is None else documents[:limit]

    def find_for_page(
        self,
        document_type: DocumentType,
        original_filename: str,
        page_number: int,
    ) -> Optional[ExtractedDocument]:
        for document in self.find_all(document_type):
            if document.original_filename == original_filename and document.page_number == page_number:
                return document
        return None

    def delete(self, document_id: str, document_type: DocumentType) -> bool:
        snapshot_path = self._snapshot_path(document_id, document_type)
        if not snapshot_path.exists():
            return False
        try:
            snapshot_path.unlink()
            logger.info("Deleted document %s", document_id)
            return True
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError(f"Failed to delete document {document_id}", exc)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_base_dir(self) -> None:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError(f"Failed to create base directory {self.base_dir}", exc)

    def _type_dir(self, document_type: DocumentType) -> Path:
        return self.base_dir / document_type.value.lower()

    def _snapshot_path(self, document_id: str, document_type: DocumentType) -> Path:
        if not _SAFE_ID.match(document_id or ""):
            raise RepositoryError(f"Invalid document id {document_id!r}")
        return self._type_dir(document_type) / f"{document_id}.json"

    def _load_snapshot(self, document_id: str, document_type: DocumentType) -> Optional[dict]:
        snapshot_path = self._snapshot_path(document_id, document_type)
        if not snapshot_path.exists():
            return None
        try:
            return json.loads(snapshot_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise RepositoryError(f"Corrupted snapshot for document {document_id}", exc)
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError(f"Failed to read snapshot for document {document_id}", exc)
