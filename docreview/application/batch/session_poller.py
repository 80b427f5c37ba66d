"""
SessionPoller - polled-mode tracking of a backend batch session.

Fetches immediately, then on a fixed interval. One fetch is fully reconciled
before the next interval starts, so fetches for a session never overlap.
Every terminal outcome except cancellation clears the persisted session
reference.
"""
from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

from docreview.application.batch.contracts import BatchStatusClient
from docreview.application.batch.policy import BatchPolicy
from docreview.domain.entities.batch_session import BatchSession
from docreview.domain.exceptions import (
    BackendUnavailableError,
    BatchSessionError,
    BatchStatusError,
    SessionNotFoundError,
)
from docreview.domain.repositories.session_store import SessionStore
from docreview.domain.value_objects.page_status import SessionState

logger = logging.getLogger(__name__)

SessionHandler = Callable[[BatchSession], Awaitable[None]]


class PollOutcome(str, Enum):
    """Why polling stopped."""
    COMPLETED = "completed"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    STALLED = "stalled"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    def grace_seconds(self, policy: BatchPolicy) -> float:
        """Delay before the completion signal, letting late page updates land."""
        if self in {PollOutcome.NOT_FOUND, PollOutcome.CANCELLED}:
            return 0.0
        if self is PollOutcome.UNAVAILABLE:
            return policy.unavailable_grace_seconds
        return policy.completion_grace_seconds

    def is_abnormal(self) -> bool:
        return self not in {PollOutcome.COMPLETED, PollOutcome.FAILED}


class SessionPoller:
    def __init__(
        self,
        client: BatchStatusClient,
        session_store: SessionStore,
        policy: BatchPolicy,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = client
        self._sessions = session_store
        self._policy = policy
        self._clock = clock
        self._sleep = sleep

    async def verify(self, session_id: str) -> Optional[BatchSession]:
        """One status fetch; ``None`` when the session cannot be confirmed."""
        try:
            session = await self._client.fetch(session_id)
        except SessionNotFoundError:
            logger.info("Persisted session %s no longer exists", session_id)
            return None
        except BatchSessionError as exc:
            logger.warning("Could not verify session %s: %s", session_id, exc)
            return None
        if session.is_terminal():
            logger.info("Persisted session %s is already %s", session_id, session.status.value)
        return session

    async def run(
        self,
        session_id: str,
        on_session: SessionHandler,
        is_live: Callable[[], bool],
    ) -> PollOutcome:
        """Poll ``session_id`` until a terminal condition, feeding every payload to ``on_session``."""
        started = self._clock()
        idle_since: Optional[float] = None
        logger.info("Polling batch session %s", session_id)

        while True:
            if not is_live():
                return PollOutcome.CANCELLED
            if self._clock() - started >= self._policy.session_timeout_seconds:
                logger.warning("Session %s exceeded the %.0fs polling limit", session_id, self._policy.session_timeout_seconds)
                return self._finish(session_id, PollOutcome.TIMED_OUT)

            session: Optional[BatchSession] = None
            try:
                session = await self._client.fetch(session_id)
            except SessionNotFoundError:
                if not is_live():
                    return PollOutcome.CANCELLED
                logger.warning("Session %s not found, stopping", session_id)
                return self._finish(session_id, PollOutcome.NOT_FOUND)
            except BackendUnavailableError as exc:
                if not is_live():
                    return PollOutcome.CANCELLED
                logger.warning("Batch backend unavailable while polling %s: %s", session_id, exc)
                return self._finish(session_id, PollOutcome.UNAVAILABLE)
            except BatchStatusError as exc:
                logger.warning("Status fetch for %s failed (%s), will retry", session_id, exc)

            if not is_live():
                return PollOutcome.CANCELLED

            if session is not None:
                logger.debug(
                    "Session %s: status=%s completed=%d failed=%d total=%d in_flight=%s",
                    session_id,
                    session.status.value,
                    session.completed_pages,
                    session.failed_pages,
                    session.total_pages,
                    sorted(session.processing_pages),
                )
                await on_session(session)
                if not is_live():
                    return PollOutcome.CANCELLED

                if session.is_finished():
                    return self.conclude(session)

                now = self._clock()
                if not session.has_progress() and now - started >= self._policy.stale_no_progress_seconds:
                    logger.warning("Session %s made no progress in %.0fs, treating as stuck", session_id, now - started)
                    return self._finish(session_id, PollOutcome.STALLED)

                if session.processing_pages:
                    idle_since = None
                else:
                    if idle_since is None:
                        idle_since = now
                    if now - idle_since >= self._policy.stale_idle_seconds:
                        logger.warning("Session %s has had nothing in flight for %.0fs, treating as stuck", session_id, now - idle_since)
                        return self._finish(session_id, PollOutcome.STALLED)

            await self._sleep(self._policy.status_poll_interval_seconds)

    def conclude(self, session: BatchSession) -> PollOutcome:
        """Stop tracking a session that reports itself finished, without fetching it again."""
        outcome = PollOutcome.FAILED if session.status is SessionState.FAILED else PollOutcome.COMPLETED
        logger.info(
            "Session %s finished (%s): %d completed, %d failed of %d",
            session.session_id,
            session.status.value,
            session.completed_pages,
            session.failed_pages,
            session.total_pages,
        )
        return self._finish(session.session_id, outcome)

    def _finish(self, session_id: str, outcome: PollOutcome) -> PollOutcome:
        self._sessions.clear()
        logger.info("Stopped polling session %s: %s", session_id, outcome.value)
        return outcome
