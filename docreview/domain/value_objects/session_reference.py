"""Persisted pointer to a batch session started on the backend."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SessionReference:
    """Session id plus the moment it was handed to us."""

    session_id: str
    timestamp: datetime

    def __post_init__(self) -> None:
        if not self.session_id:
            raise ValueError("session_id must not be empty")
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", self.timestamp.replace(tzinfo=timezone.utc))

    def age_seconds(self, now: datetime) -> float:
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return (now - self.timestamp).total_seconds()

    def is_expired(self, now: datetime, max_age_seconds: float) -> bool:
        return self.age_seconds(now) >= max_age_seconds

    def to_dict(self) -> Dict[str, Any]:
        return {"sessionId": self.session_id, "timestamp": self.timestamp.isoformat()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["SessionReference"]:
        """Hydrate from storage; malformed entries yield ``None``."""
        session_id = data.get("sessionId") or data.get("session_id")
        raw_timestamp = data.get("timestamp")
        if not session_id or raw_timestamp is None:
            return None
        try:
            if isinstance(raw_timestamp, (int, float)):
                # Millisecond epoch values are what browser hosts persisted.
                seconds = raw_timestamp / 1000.0 if raw_timestamp > 1e11 else float(raw_timestamp)
                timestamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
            else:
                timestamp = datetime.fromisoformat(str(raw_timestamp).replace("Z", "+00:00"))
        except (TypeError, ValueError, OverflowError, OSError):
            return None
        return cls(session_id=str(session_id), timestamp=timestamp)
