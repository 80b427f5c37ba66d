"""File-backed SessionStore holding ``{sessionId, timestamp}`` for one batch host."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from docreview.domain.exceptions import RepositoryError
from docreview.domain.repositories.session_store import SessionStore
from docreview.domain.value_objects.session_reference import SessionReference

logger = logging.getLogger(__name__)


class FileSessionStore(SessionStore):
    """Persist the session reference as ``<base_dir>/sessions/<key>.json``."""

    def __init__(self, base_dir: str = "backend_data", key: str = "batch-session") -> None:
        self.path = Path(base_dir) / "sessions" / f"{key}.json"

    def load(self) -> Optional[SessionReference]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable session reference %s: %s", self.path, exc)
            return None
        if not isinstance(data, dict):
            return None
        return SessionReference.from_dict(data)

    def save(self, reference: SessionReference) -> None:
        tmp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(reference.to_dict()), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError(f"Failed to save session reference {reference.session_id}", exc)
        finally:
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:  # pragma: no cover - disk failure
            raise RepositoryError("Failed to clear session reference", exc)
