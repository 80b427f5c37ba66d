"""Timing and sizing knobs for a batch run."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from docreview.config import Settings
from docreview.constants import BATCH_SIZE_TABLE, DEFAULT_BATCH_SIZE


@dataclass(frozen=True)
class BatchPolicy:
    """
    Everything the coordinator waits on or counts against.

    Defaults mirror the tuned production values; tests shrink them freely.
    """

    page_timeout_seconds: float = 900.0
    status_poll_interval_seconds: float = 2.0
    stale_no_progress_seconds: float = 120.0
    stale_idle_seconds: float = 60.0
    session_timeout_seconds: float = 600.0
    session_max_age_seconds: float = 3600.0
    batch_pause_seconds: float = 0.3
    batch_error_backoff_seconds: float = 2.0
    retry_delay_seconds: float = 0.5
    completion_grace_seconds: float = 1.0
    unavailable_grace_seconds: float = 2.0
    empty_batch_grace_seconds: float = 0.5
    batch_size_table: Tuple[Tuple[int, int], ...] = BATCH_SIZE_TABLE
    default_batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if self.default_batch_size < 1:
            raise ValueError("default_batch_size must be >= 1")
        for limit, size in self.batch_size_table:
            if limit < 0 or size < 1:
                raise ValueError(f"Invalid batch size entry: ({limit}, {size})")

    def batch_size_for(self, total_pages: int) -> int:
        """Pages allowed in flight at once for a batch of ``total_pages``.

        Examples:
            >>> BatchPolicy().batch_size_for(8)
            12
            >>> BatchPolicy().batch_size_for(25)
            8
            >>> BatchPolicy().batch_size_for(31)
            6
        """
        for limit, size in sorted(self.batch_size_table):
            if total_pages <= limit:
                return size
        return self.default_batch_size

    def with_overrides(self, **changes) -> "BatchPolicy":
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BatchPolicy":
        return cls(
            page_timeout_seconds=settings.page_timeout_seconds,
            status_poll_interval_seconds=settings.status_poll_interval_seconds,
            stale_no_progress_seconds=settings.stale_no_progress_seconds,
            stale_idle_seconds=settings.stale_idle_seconds,
            session_timeout_seconds=settings.session_timeout_seconds,
            session_max_age_seconds=settings.session_max_age_seconds,
            batch_pause_seconds=settings.batch_pause_seconds,
            batch_error_backoff_seconds=settings.batch_error_backoff_seconds,
            retry_delay_seconds=settings.retry_delay_seconds,
            completion_grace_seconds=settings.completion_grace_seconds,
            unavailable_grace_seconds=settings.unavailable_grace_seconds,
            empty_batch_grace_seconds=settings.empty_batch_grace_seconds,
        )
