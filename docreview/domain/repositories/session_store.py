"""Persistence interface for the active batch-session reference."""

from abc import ABC, abstractmethod
from typing import Optional

from docreview.domain.value_objects.session_reference import SessionReference


class SessionStore(ABC):
    """Holds at most one session reference for a batch host."""

    @abstractmethod
    def load(self) -> Optional[SessionReference]:
        """Return the persisted reference, or None when absent or unreadable."""

    @abstractmethod
    def save(self, reference: SessionReference) -> None:
        """Persist ``reference``, replacing any previous one."""

    @abstractmethod
    def clear(self) -> None:
        """Forget the persisted reference. Must be idempotent."""
