"""
PageStatus value object

Lifecycle of a single page inside a batch. Enforces valid local state
transitions; remote reconciliation uses ``from_remote`` to translate the
batch backend's vocabulary.
"""
from __future__ import annotations

from enum import Enum


class PageStatus(str, Enum):
    """Valid page states."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @classmethod
    def from_remote(cls, value: str | None) -> "PageStatus":
        """
        Map a batch backend page status onto the local vocabulary.

        The backend reports ``failed`` where we track ``error``; anything
        unknown is treated as still pending.

        Examples:
            >>> PageStatus.from_remote("failed")
            <PageStatus.ERROR: 'error'>
            >>> PageStatus.from_remote("queued")
            <PageStatus.PENDING: 'pending'>
        """
        normalized = (value or "").strip().lower()
        if normalized == "failed":
            return cls.ERROR
        try:
            return cls(normalized)
        except ValueError:
            return cls.PENDING

    def can_transition_to(self, new_status: "PageStatus") -> bool:
        """
        Check if a local transition to ``new_status`` is valid.

        Valid transitions:
        - PENDING → PROCESSING, ERROR (rejected before submission)
        - PROCESSING → COMPLETED, ERROR
        - COMPLETED → (none - terminal state)
        - ERROR → PENDING (explicit retry)
        """
        valid_transitions = {
            PageStatus.PENDING: {PageStatus.PROCESSING, PageStatus.ERROR},
            PageStatus.PROCESSING: {PageStatus.COMPLETED, PageStatus.ERROR},
            PageStatus.COMPLETED: set(),
            PageStatus.ERROR: {PageStatus.PENDING},
        }
        return new_status in valid_transitions.get(self, set())

    def is_terminal(self) -> bool:
        """Completed and Error pages need no further work from the batch."""
        return self in {PageStatus.COMPLETED, PageStatus.ERROR}

    def is_active(self) -> bool:
        return self is PageStatus.PROCESSING


class SessionState(str, Enum):
    """Aggregate status reported by the batch-session backend."""
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: str | None) -> "SessionState":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.PROCESSING

    def is_terminal(self) -> bool:
        return self in {SessionState.COMPLETED, SessionState.FAILED}
