"""
BatchCoordinator - drives one page batch to a single terminal signal.

Mode is chosen once per batch: a persisted, unexpired session reference that
the backend still recognises selects Polled mode, anything else Direct mode.
Every asynchronous continuation carries the generation it was started under
and drops its result when ``reset()`` or a new batch has moved on.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from docreview.application.batch.contracts import (
    BatchStatusClient,
    ExtractionClient,
    ExtractionContext,
)
from docreview.application.batch.normalization import normalize_result, normalize_session_document
from docreview.application.batch.page_store import PageRecordStore
from docreview.application.batch.policy import BatchPolicy
from docreview.application.batch.reconciliation import reconcile
from docreview.application.batch.session_poller import PollOutcome, SessionPoller
from docreview.application.batch.throttler import ConcurrencyThrottler
from docreview.application.dto.batch_dto import BatchProgress
from docreview.constants import HIGH_FAILURE_MIN_PAGES, HIGH_FAILURE_RATIO
from docreview.domain.entities.batch_session import BatchSession
from docreview.domain.entities.page_descriptor import PageDescriptor
from docreview.domain.entities.page_state import PageState
from docreview.domain.repositories.session_store import SessionStore
from docreview.domain.value_objects.document_type import DocumentType
from docreview.domain.value_objects.page_status import PageStatus

logger = logging.getLogger(__name__)

PageCompleteCallback = Callable[[int, Dict[str, Any]], Union[None, Awaitable[None]]]
AllCompleteCallback = Callable[[], Union[None, Awaitable[None]]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BatchMode(str, Enum):
    DIRECT = "direct"
    POLLED = "polled"


@dataclass
class _RunState:
    """Bookkeeping for the current batch lifecycle."""

    generation: int
    context: ExtractionContext
    started_at: float
    mode: Optional[BatchMode] = None
    session_id: Optional[str] = None
    last_progress_at: Optional[float] = None
    finished_at: Optional[float] = None
    completion_fired: bool = False
    terminal_reason: Optional[str] = None
    task: Optional["asyncio.Task[None]"] = None
    results: Dict[int, Dict[str, Any]] = field(default_factory=dict)


class BatchCoordinator:
    """Coordinates extraction of one batch of pages for a host view."""

    def __init__(
        self,
        extraction_client: ExtractionClient,
        status_client: BatchStatusClient,
        session_store: SessionStore,
        *,
        policy: Optional[BatchPolicy] = None,
        on_page_complete: Optional[PageCompleteCallback] = None,
        on_all_complete: Optional[AllCompleteCallback] = None,
        backend_url: str = "",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        now: Callable[[], datetime] = _utcnow,
    ):
        self._policy = policy or BatchPolicy()
        self._sessions = session_store
        self._on_page_complete = on_page_complete
        self._on_all_complete = on_all_complete
        self._backend_url = backend_url
        self._clock = clock
        self._sleep = sleep
        self._now = now

        self._store = PageRecordStore()
        self._throttler = ConcurrencyThrottler(
            self._store,
            extraction_client,
            self._policy,
            on_settled=self._page_settled,
            sleep=sleep,
        )
        self._poller = SessionPoller(status_client, session_store, self._policy, clock=clock, sleep=sleep)

        self._generation = 0
        self._run: Optional[_RunState] = None
        self._reported: Set[int] = set()
        self._tasks: Set["asyncio.Task[None]"] = set()
        self._direct_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Host operations
    # ------------------------------------------------------------------
    @property
    def policy(self) -> BatchPolicy:
        return self._policy

    @property
    def mode(self) -> Optional[BatchMode]:
        return self._run.mode if self._run else None

    @property
    def session_id(self) -> Optional[str]:
        return self._run.session_id if self._run else None

    @property
    def context(self) -> Optional[ExtractionContext]:
        return self._run.context if self._run else None

    @property
    def completed(self) -> bool:
        return bool(self._run and self._run.completion_fired)

    @property
    def finished_at(self) -> Optional[float]:
        """Clock reading when the completion signal fired."""
        return self._run.finished_at if self._run else None

    @property
    def terminal_reason(self) -> Optional[str]:
        return self._run.terminal_reason if self._run else None

    def start(
        self,
        pages: Iterable[PageDescriptor],
        document_type: Union[DocumentType, str],
        original_file_name: str,
    ) -> "asyncio.Task[None]":
        """Begin processing; a second call while a batch exists returns the same task."""
        if self._run is not None and self._run.task is not None:
            logger.info("Batch already started, ignoring repeated start")
            return self._run.task

        context = ExtractionContext(
            document_type=DocumentType.parse(document_type),
            original_file_name=original_file_name,
        )
        descriptors = list(pages)
        self._store.seed(descriptors)

        self._generation += 1
        run = _RunState(generation=self._generation, context=context, started_at=self._clock())
        self._run = run
        self._reported = set()
        run.task = self._spawn(self._drive(run.generation))
        logger.info(
            "Batch started: %d pages of %s (%s)",
            len(descriptors),
            original_file_name,
            context.document_type.value,
        )
        return run.task

    def retry_failed(self) -> List[int]:
        """Reset Error pages to Pending and resubmit them. Direct mode only."""
        run = self._run
        if run is None or run.mode is None:
            return []
        if run.mode is BatchMode.POLLED:
            logger.info("Retries for session %s are handled by the batch backend", run.session_id)
            return []

        failed = self._store.pages_in(PageStatus.ERROR)
        if not failed:
            return []
        for page_number in failed:
            self._store.get(page_number).reset_for_retry()
        logger.info("Retrying %d failed pages: %s", len(failed), failed)
        self._spawn(self._retry(run.generation, failed))
        return failed

    def reset(self) -> None:
        """Cancel all background work and forget the batch. Safe at any point."""
        self._generation += 1
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._sessions.clear()
        self._store.clear()
        self._reported = set()
        if self._run is not None:
            logger.info("Batch reset (mode=%s)", self._run.mode.value if self._run.mode else "unselected")
        self._run = None

    async def join(self) -> None:
        """Wait until no background work (initial run or retries) is left.

        Must not be awaited from inside a host callback.
        """
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def pages(self) -> List[PageState]:
        return self._store.snapshots()

    def results(self) -> Dict[int, Dict[str, Any]]:
        """Normalized results reported so far, keyed by page number."""
        if self._run is None:
            return {}
        return dict(self._run.results)

    def progress(self) -> BatchProgress:
        counts = self._store.counts()
        total = len(self._store)
        run = self._run
        if run is None:
            elapsed = 0.0
        else:
            elapsed = (run.finished_at if run.finished_at is not None else self._clock()) - run.started_at

        completed = counts[PageStatus.COMPLETED]
        errors = counts[PageStatus.ERROR]
        remaining = total - completed - errors
        estimate: Optional[float] = None
        if completed > 0 and remaining > 0:
            estimate = (elapsed / completed) * remaining
        elif total and remaining == 0:
            estimate = 0.0

        return BatchProgress(
            total=total,
            pending=counts[PageStatus.PENDING],
            processing=counts[PageStatus.PROCESSING],
            completed=completed,
            error=errors,
            elapsed_seconds=max(elapsed, 0.0),
            estimated_seconds_remaining=estimate,
            high_failure_rate=total > HIGH_FAILURE_MIN_PAGES and errors > total * HIGH_FAILURE_RATIO,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def _drive(self, generation: int) -> None:
        mode, session = await self._select_mode(generation)
        if not self._is_current(generation):
            return
        run = self._run
        run.mode = mode
        logger.info("Batch running in %s mode", mode.value)

        if mode is BatchMode.POLLED:
            await self._drive_polled(generation, session)
            return

        if len(self._store) == 0:
            logger.info("Empty batch, nothing to process")
            await self._sleep(self._policy.empty_batch_grace_seconds)
            await self._complete(generation, "empty")
            return

        async with self._direct_lock:
            if not self._is_current(generation):
                return
            await self._throttler.run(self._store.page_numbers(), run.context, lambda: self._is_current(generation))
        await self._maybe_complete(generation, "direct")

    async def _select_mode(self, generation: int) -> Tuple[BatchMode, Optional[BatchSession]]:
        reference = self._sessions.load()
        if reference is None:
            return BatchMode.DIRECT, None
        if reference.is_expired(self._now(), self._policy.session_max_age_seconds):
            logger.info(
                "Clearing expired session %s (%.0fs old)",
                reference.session_id,
                reference.age_seconds(self._now()),
            )
            self._sessions.clear()
            return BatchMode.DIRECT, None

        session = await self._poller.verify(reference.session_id)
        if not self._is_current(generation):
            return BatchMode.DIRECT, None
        if session is None:
            self._sessions.clear()
            logger.info("Falling back to direct mode")
            return BatchMode.DIRECT, None
        self._run.session_id = reference.session_id
        return BatchMode.POLLED, session

    async def _drive_polled(self, generation: int, session: BatchSession) -> None:
        run = self._run
        if len(self._store) == 0 and session.total_pages > 0:
            self._store.seed_numbers(session.total_pages, run.context.original_file_name)
        await self._apply_session(generation, session)
        if not self._is_current(generation):
            return

        if session.is_finished():
            outcome = self._poller.conclude(session)
        else:
            outcome = await self._poller.run(
                session.session_id,
                lambda fetched: self._apply_session(generation, fetched),
                lambda: self._is_current(generation),
            )
        if outcome is PollOutcome.CANCELLED or not self._is_current(generation):
            return
        grace = outcome.grace_seconds(self._policy)
        if grace > 0:
            await self._sleep(grace)
        await self._complete(generation, outcome.value)

    async def _retry(self, generation: int, page_numbers: List[int]) -> None:
        await self._sleep(self._policy.retry_delay_seconds)
        if not self._is_current(generation):
            return
        async with self._direct_lock:
            if not self._is_current(generation):
                return
            await self._throttler.run(page_numbers, self._run.context, lambda: self._is_current(generation))
        await self._maybe_complete(generation, "retry")

    async def _maybe_complete(self, generation: int, reason: str) -> None:
        if not self._is_current(generation):
            return
        if self._store.all_terminal():
            self._log_summary()
            await self._complete(generation, reason)

    async def _complete(self, generation: int, reason: str) -> None:
        if not self._is_current(generation):
            return
        run = self._run
        if run.completion_fired:
            return
        run.completion_fired = True
        run.terminal_reason = reason
        run.finished_at = self._clock()
        counts = self._store.counts()
        logger.info(
            "Batch complete (%s): %d completed, %d failed, %d unfinished",
            reason,
            counts[PageStatus.COMPLETED],
            counts[PageStatus.ERROR],
            counts[PageStatus.PENDING] + counts[PageStatus.PROCESSING],
        )
        await self._invoke(self._on_all_complete)

    # ------------------------------------------------------------------
    # Page reporting
    # ------------------------------------------------------------------
    async def _page_settled(self, page_number: int) -> None:
        run = self._run
        if run is None:
            return
        page = self._store.find(page_number)
        if page is None or page.status is not PageStatus.COMPLETED:
            return
        payload = normalize_result(
            page_number,
            page.extracted_data,
            run.context,
            image_url=page.image_url(),
            now=self._now(),
        )
        await self._report(run.generation, page_number, payload)

    async def _apply_session(self, generation: int, session: BatchSession) -> None:
        if not self._is_current(generation) or session.session_id != self._run.session_id:
            return
        run = self._run
        result = reconcile(self._store, session, self._backend_url)
        for resolved in result.resolved:
            page = self._store.get(resolved.page_number)
            if resolved.document is not None:
                payload = normalize_session_document(
                    resolved.document,
                    run.context,
                    image_url=page.image_url(),
                    now=self._now(),
                )
            else:
                payload = normalize_result(
                    resolved.page_number,
                    page.extracted_data,
                    run.context,
                    document_id=resolved.document_id,
                    image_url=page.image_url(),
                    now=self._now(),
                )
            await self._report(generation, resolved.page_number, payload)
            if not self._is_current(generation):
                return

    async def _report(self, generation: int, page_number: int, payload: Dict[str, Any]) -> None:
        if not self._is_current(generation) or page_number in self._reported:
            return
        self._reported.add(page_number)
        run = self._run
        run.results[page_number] = payload
        run.last_progress_at = self._clock()
        self._log_eta()
        await self._invoke(self._on_page_complete, page_number, payload)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _is_current(self, generation: int) -> bool:
        return self._run is not None and self._run.generation == generation and self._generation == generation

    def _spawn(self, coro: Awaitable[None]) -> "asyncio.Task[None]":
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: "asyncio.Task[None]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Batch task failed", exc_info=(type(exc), exc, exc.__traceback__))

    async def _invoke(self, callback: Optional[Callable[..., Any]], *args: Any) -> None:
        if callback is None:
            return
        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Host callback %s raised", getattr(callback, "__name__", repr(callback)))

    def _log_eta(self) -> None:
        progress = self.progress()
        if progress.estimated_seconds_remaining is None or progress.finished >= progress.total:
            return
        seconds = progress.estimated_seconds_remaining
        if seconds < 60:
            logger.info("%d/%d pages done, ~%ds remaining", progress.finished, progress.total, round(seconds))
        else:
            logger.info("%d/%d pages done, ~%dm remaining", progress.finished, progress.total, round(seconds / 60))

    def _log_summary(self) -> None:
        progress = self.progress()
        if progress.high_failure_rate:
            logger.warning(
                "High failure rate: %d of %d pages failed",
                progress.error,
                progress.total,
            )
