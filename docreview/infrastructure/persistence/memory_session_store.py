"""In-memory SessionStore, one reference per instance."""

from __future__ import annotations

from typing import Optional

from docreview.domain.repositories.session_store import SessionStore
from docreview.domain.value_objects.session_reference import SessionReference


class InMemorySessionStore(SessionStore):
    def __init__(self, reference: Optional[SessionReference] = None) -> None:
        self._reference = reference

    def load(self) -> Optional[SessionReference]:
        return self._reference

    def save(self, reference: SessionReference) -> None:
        self._reference = reference

    def clear(self) -> None:
        self._reference = None
