"""
Unit tests for PageStatus and SessionState value objects
"""
import pytest

from docreview.domain.value_objects.page_status import PageStatus, SessionState


class TestPageStatusTransitions:
    """Local transition rules."""

    @pytest.mark.parametrize(
        "current, target",
        [
            (PageStatus.PENDING, PageStatus.PROCESSING),
            (PageStatus.PENDING, PageStatus.ERROR),
            (PageStatus.PROCESSING, PageStatus.COMPLETED),
            (PageStatus.PROCESSING, PageStatus.ERROR),
            (PageStatus.ERROR, PageStatus.PENDING),
        ],
    )
    def test_valid_transitions(self, current, target):
        assert current.can_transition_to(target)

    @pytest.mark.parametrize(
        "current, target",
        [
            (PageStatus.PENDING, PageStatus.COMPLETED),
            (PageStatus.COMPLETED, PageStatus.PENDING),
            (PageStatus.COMPLETED, PageStatus.ERROR),
            (PageStatus.ERROR, PageStatus.COMPLETED),
            (PageStatus.PROCESSING, PageStatus.PENDING),
        ],
    )
    def test_invalid_transitions(self, current, target):
        assert not current.can_transition_to(target)

    def test_terminal_states(self):
        assert PageStatus.COMPLETED.is_terminal()
        assert PageStatus.ERROR.is_terminal()
        assert not PageStatus.PENDING.is_terminal()
        assert not PageStatus.PROCESSING.is_terminal()
        assert PageStatus.PROCESSING.is_active()


class TestRemoteVocabulary:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("failed", PageStatus.ERROR),
            ("FAILED", PageStatus.ERROR),
            ("completed", PageStatus.COMPLETED),
            ("processing", PageStatus.PROCESSING),
            ("pending", PageStatus.PENDING),
            ("queued", PageStatus.PENDING),
            (None, PageStatus.PENDING),
        ],
    )
    def test_from_remote(self, raw, expected):
        assert PageStatus.from_remote(raw) is expected

    def test_session_state_parse(self):
        assert SessionState.parse("completed") is SessionState.COMPLETED
        assert SessionState.parse("Failed") is SessionState.FAILED
        assert SessionState.parse("weird") is SessionState.PROCESSING
        assert SessionState.COMPLETED.is_terminal()
        assert not SessionState.PROCESSING.is_terminal()
