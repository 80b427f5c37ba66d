"""
Unit tests for the normalized page result shape.
"""
from datetime import datetime, timezone

from docreview.application.batch.contracts import ExtractionContext
from docreview.application.batch.normalization import normalize_result, normalize_session_document
from docreview.domain.entities.batch_session import SessionDocument
from docreview.domain.value_objects.document_type import DocumentType

NOW = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)
CONTEXT = ExtractionContext(document_type=DocumentType.KOSU, original_file_name="team.pdf")

STABLE_KEYS = {
    "id", "data", "metadata", "filename", "document_type", "remark", "imageUrl",
    "created_at", "updated_at", "json_url", "excel_url",
}


def test_full_document_record_is_preserved():
    record = {
        "id": "abc",
        "data": {"header": {"date": "2025-03-01"}},
        "metadata": {"filename": "renamed.pdf", "page_number": 4},
        "remark": "Edited",
        "imageUrl": "/images/4.png",
        "created_at": "2025-02-01T00:00:00+00:00",
    }

    result = normalize_result(4, record, CONTEXT, now=NOW)

    assert set(result) == STABLE_KEYS
    assert result["id"] == "abc"
    assert result["data"] == {"header": {"date": "2025-03-01"}}
    assert result["filename"] == "renamed.pdf"
    assert result["remark"] == "Edited"
    assert result["imageUrl"] == "/images/4.png"
    assert result["created_at"] == "2025-02-01T00:00:00+00:00"
    assert result["updated_at"] == NOW.isoformat()


def test_bare_data_gets_synthesized_metadata():
    result = normalize_result(2, {"header": {"nom_ligne": "L1"}}, CONTEXT, now=NOW, image_url="http://b/2.png")

    assert result["data"] == {"header": {"nom_ligne": "L1"}}
    assert result["metadata"] == {
        "filename": "team.pdf",
        "original_filename": "team.pdf",
        "document_type": "Kosu",
        "page_number": 2,
        "processed_at": NOW.isoformat(),
    }
    assert result["document_type"] == "Kosu"
    assert result["remark"] == "Document processed successfully"
    assert result["imageUrl"] == "http://b/2.png"
    assert result["id"].startswith(f"{int(NOW.timestamp() * 1000)}-2-")


def test_explicit_document_id_wins():
    result = normalize_result(1, {"id": "payload-id"}, CONTEXT, document_id="backend-id", now=NOW)

    assert result["id"] == "backend-id"
    assert result["json_url"] == "/api/documents/backend-id/export?format=json"
    assert result["excel_url"] == "/api/documents/backend-id/export?format=excel"


def test_missing_payload_still_has_stable_shape():
    result = normalize_result(3, None, CONTEXT, document_id="d3", now=NOW)

    assert set(result) == STABLE_KEYS
    assert result["data"] == {}


def test_session_document():
    document = SessionDocument(page=5, id="d5", data={"team_summary": {"qte_realisee": 10}})

    result = normalize_session_document(document, CONTEXT, image_url="http://b/5.png", now=NOW)

    assert result["id"] == "d5"
    assert result["data"] == {"team_summary": {"qte_realisee": 10}}
    assert result["metadata"]["page_number"] == 5
    assert result["filename"] == "team.pdf"
    assert result["imageUrl"] == "http://b/5.png"
