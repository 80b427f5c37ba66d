"""
Unit tests for the ExtractedDocument entity
"""
from datetime import datetime, timezone

import pytest

from docreview.domain.entities.document import ExtractedDocument, generate_document_id
from docreview.domain.exceptions import DomainValidationError
from docreview.domain.value_objects.document_type import DocumentType, VerificationStatus


@pytest.fixture
def document():
    return ExtractedDocument.create(
        DocumentType.REBUT,
        {"header": {"date": "2025-03-01"}, "items": [{"reference": "R1", "quantity": 2}]},
        original_filename="scan.pdf",
        page_number=3,
        file_size=1024,
        document_id="doc-3",
    )


class TestCreate:
    def test_metadata_is_populated(self, document):
        assert document.id == "doc-3"
        assert document.page_number == 3
        assert document.original_filename == "scan.pdf"
        assert document.metadata["file_size"] == 1024
        assert document.data["document_type"] == "Rebut"
        assert document.verification_status is VerificationStatus.ORIGINAL

    def test_generated_ids_are_time_ordered(self):
        moment = datetime(2025, 3, 1, tzinfo=timezone.utc)
        identifier = generate_document_id(7, moment)
        assert identifier.startswith(f"{int(moment.timestamp() * 1000)}-7-")


class TestFieldUpdates:
    def test_nested_update_records_history(self, document):
        updated = document.with_field_update("data.header.date", "2025-03-02", old_value="2025-03-01")

        assert updated.data["header"]["date"] == "2025-03-02"
        assert document.data["header"]["date"] == "2025-03-01"
        assert updated.updated_by_user is True
        assert updated.history[-1].field == "data.header.date"
        assert updated.history[-1].old_value == "2025-03-01"

    def test_list_index_update(self, document):
        updated = document.with_field_update("data.items.0.quantity", 5)
        assert updated.data["items"][0]["quantity"] == 5

    def test_list_index_out_of_range(self, document):
        with pytest.raises(DomainValidationError):
            document.with_field_update("data.items.4.quantity", 5)

    def test_remark_update(self, document):
        assert document.with_field_update("remark", "checked").remark == "checked"

    @pytest.mark.parametrize("path", ["id", "data", "remark.x", "created_at"])
    def test_non_editable_paths(self, document, path):
        with pytest.raises(DomainValidationError):
            document.with_field_update(path, "x")


class TestVerification:
    def test_verified_sets_verifier(self, document):
        verified = document.with_verification(VerificationStatus.VERIFIED, user="qa", notes="ok")

        assert verified.verification_status is VerificationStatus.VERIFIED
        assert verified.verified_by == "qa"
        assert verified.verified_at is not None
        assert verified.verification_history[-1].notes == "ok"
        assert verified.updated_by_user is False

    def test_verification_with_data_marks_user_update(self, document):
        updated = document.with_verification(VerificationStatus.DRAFT, data={"header": {}})
        assert updated.data == {"header": {}}
        assert updated.verified_by is None
        assert updated.updated_by_user is True


class TestSerialization:
    def test_round_trip(self, document):
        edited = document.with_field_update("data.header.date", "x").with_verification(VerificationStatus.VERIFIED)
        restored = ExtractedDocument.from_dict(edited.to_dict())
        assert restored == edited

    def test_export_urls_in_dict(self, document):
        payload = document.to_dict()
        assert payload["json_url"] == "/api/documents/doc-3/export?format=json"
        assert payload["excel_url"] == "/api/documents/doc-3/export?format=excel"

    def test_type_falls_back_to_metadata(self):
        restored = ExtractedDocument.from_dict({"id": "a", "metadata": {"document_type": "npt"}})
        assert restored.document_type is DocumentType.NPT
