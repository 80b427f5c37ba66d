"""
Unit tests for merging backend session payloads into the page table.
"""
import pytest

from docreview.application.batch.page_store import PageRecordStore
from docreview.application.batch.reconciliation import reconcile, resolve_image_url
from docreview.domain.entities.batch_session import BatchSession
from docreview.domain.entities.page_descriptor import PageDescriptor
from docreview.domain.value_objects.page_status import PageStatus

BACKEND = "http://backend:8000"


@pytest.fixture
def store():
    store = PageRecordStore()
    store.seed(PageDescriptor(page_number=n, file_name="doc.pdf") for n in range(1, 5))
    return store


def _session(**payload):
    base = {"status": "processing", "total_pages": 4}
    base.update(payload)
    return BatchSession.from_payload("s-1", base)


class TestPrecedence:
    def test_pages_info_wins_over_processing_set(self, store):
        session = _session(
            processing_pages=[1],
            pages_info={"1": {"status": "failed", "error": "OCR crashed"}},
        )

        result = reconcile(store, session, BACKEND)

        page = store.get(1)
        assert page.status is PageStatus.ERROR
        assert page.error_message == "OCR crashed"
        assert 1 in result.changed

    def test_processing_pages_mark_in_flight(self, store):
        reconcile(store, _session(processing_pages=[2, 3]), BACKEND)

        assert [page.status for page in store.snapshots()] == [
            PageStatus.PENDING,
            PageStatus.PROCESSING,
            PageStatus.PROCESSING,
            PageStatus.PENDING,
        ]

    def test_legacy_single_processing_page(self, store):
        reconcile(store, _session(processing_page=4), BACKEND)

        assert store.get(4).status is PageStatus.PROCESSING

    def test_processed_count_inference(self, store):
        session = _session(
            completed_pages=1,
            failed_pages=1,
            documents=[{"page": 1, "id": "d1", "data": {"x": 1}}],
        )

        result = reconcile(store, session, BACKEND)

        assert store.get(1).status is PageStatus.COMPLETED
        assert store.get(1).extracted_data == {"x": 1}
        assert store.get(2).status is PageStatus.ERROR
        assert store.get(3).status is PageStatus.PENDING
        assert [resolved.page_number for resolved in result.resolved] == [1]
        assert result.resolved[0].document_id == "d1"

    def test_unmentioned_terminal_pages_keep_state(self, store):
        store.get(4).mark_error("earlier failure")

        reconcile(store, _session(), BACKEND)

        assert store.get(4).status is PageStatus.ERROR
        assert store.get(4).error_message == "earlier failure"


class TestResolution:
    def test_completed_without_document_id_is_not_resolved(self, store):
        session = _session(pages_info={"1": {"status": "completed"}})

        result = reconcile(store, session, BACKEND)

        assert store.get(1).status is PageStatus.COMPLETED
        assert result.resolved == []

    def test_relative_image_urls_are_resolved(self, store):
        session = _session(pages_info={"2": {"status": "processing", "image_url": "/images/2.png"}})

        result = reconcile(store, session, BACKEND)

        assert result.image_updates == {2: "http://backend:8000/images/2.png"}
        assert store.get(2).image_url() == "http://backend:8000/images/2.png"

    def test_second_identical_payload_changes_nothing(self, store):
        session = _session(processing_pages=[1])
        reconcile(store, session, BACKEND)

        result = reconcile(store, session, BACKEND)

        assert result.changed == []
        assert result.image_updates == {}


class TestResolveImageUrl:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, None),
            ("", None),
            ("images/a.png", "http://backend:8000/images/a.png"),
            ("/images/a.png", "http://backend:8000/images/a.png"),
            ("https://cdn.example.com/a.png", "https://cdn.example.com/a.png"),
            ("data:image/png;base64,AAAA", "data:image/png;base64,AAAA"),
        ],
    )
    def test_resolve(self, value, expected):
        assert resolve_image_url(value, BACKEND + "/") == expected

    def test_without_backend_url_path_is_kept(self):
        assert resolve_image_url("/images/a.png", "") == "/images/a.png"
