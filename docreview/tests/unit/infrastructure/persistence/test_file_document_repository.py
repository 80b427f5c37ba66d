"""Unit tests for FileDocumentRepository."""

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from docreview.domain.entities.document import ExtractedDocument
from docreview.domain.exceptions import RepositoryError
from docreview.domain.value_objects.document_type import DocumentType
from docreview.infrastructure.persistence.file_document_repository import FileDocumentRepository

BASE_TIME = datetime(2025, 3, 1, tzinfo=timezone.utc)


def make_document(doc_id, document_type=DocumentType.REBUT, page=1, filename="scan.pdf", offset=0):
    document = ExtractedDocument.create(
        document_type,
        {"header": {"page": page}},
        original_filename=filename,
        page_number=page,
        document_id=doc_id,
    )
    moment = BASE_TIME + timedelta(minutes=offset)
    return replace(document, created_at=moment, updated_at=moment)


@pytest.fixture
def repo(tmp_path):
    return FileDocumentRepository(str(tmp_path))


class TestFileDocumentRepository:
    def test_save_and_find(self, repo, tmp_path):
        document = make_document("doc-1")
        repo.save(document)

        snapshot = tmp_path / "documents" / "rebut" / "doc-1.json"
        assert snapshot.exists()
        assert json.loads(snapshot.read_text())["version"] == 1
        assert repo.find_by_id("doc-1", DocumentType.REBUT) == document

    def test_no_temp_files_left_behind(self, repo, tmp_path):
        repo.save(make_document("doc-1"))
        assert list((tmp_path / "documents" / "rebut").glob("*.tmp")) == []

    def test_types_are_partitioned(self, repo):
        repo.save(make_document("doc-1", DocumentType.NPT))
        assert repo.find_by_id("doc-1", DocumentType.REBUT) is None
        assert repo.find_by_id("doc-1", DocumentType.NPT) is not None

    def test_find_all_newest_first_with_limit(self, repo):
        repo.save(make_document("old", offset=0))
        repo.save(make_document("new", offset=10))
        repo.save(make_document("mid", offset=5))

        assert [d.id for d in repo.find_all(DocumentType.REBUT)] == ["new", "mid", "old"]
        assert [d.id for d in repo.find_all(DocumentType.REBUT, limit=1)] == ["new"]
        assert repo.find_all(DocumentType.KOSU) == []

    def test_find_all_skips_corrupt_snapshots(self, repo, tmp_path):
        repo.save(make_document("good"))
        (tmp_path / "documents" / "rebut" / "bad.json").write_text("{not json")

        assert [d.id for d in repo.find_all(DocumentType.REBUT)] == ["good"]

    def test_find_by_id_corrupt_snapshot_raises(self, repo, tmp_path):
        folder = tmp_path / "documents" / "rebut"
        folder.mkdir(parents=True)
        (folder / "bad.json").write_text("{not json")

        with pytest.raises(RepositoryError):
            repo.find_by_id("bad", DocumentType.REBUT)

    def test_find_for_page(self, repo):
        repo.save(make_document("p1", page=1))
        repo.save(make_document("p2", page=2))
        repo.save(make_document("other", page=1, filename="other.pdf"))

        assert repo.find_for_page(DocumentType.REBUT, "scan.pdf", 2).id == "p2"
        assert repo.find_for_page(DocumentType.REBUT, "scan.pdf", 3) is None

    def test_delete(self, repo):
        repo.save(make_document("doc-1"))
        assert repo.delete("doc-1", DocumentType.REBUT) is True
        assert repo.delete("doc-1", DocumentType.REBUT) is False
        assert repo.find_by_id("doc-1", DocumentType.REBUT) is None

    @pytest.mark.parametrize("bad_id", ["../escape", "a/b", ""])
    def test_unsafe_ids_rejected(self, repo, bad_id):
        with pytest.raises(RepositoryError):
            repo.find_by_id(bad_id, DocumentType.REBUT)
