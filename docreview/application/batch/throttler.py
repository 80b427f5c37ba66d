"""
ConcurrencyThrottler - direct-mode page submission with bounded parallelism.

Pages are cut into consecutive batches sized by the batch total. Each batch is
launched in full and awaited jointly before the next one starts, so no more
than ``batch_size`` extraction calls are ever outstanding.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence

from docreview.application.batch.contracts import ExtractionClient, ExtractionContext
from docreview.application.batch.page_store import PageRecordStore
from docreview.application.batch.policy import BatchPolicy
from docreview.domain.value_objects.page_status import PageStatus

logger = logging.getLogger(__name__)

MISSING_IMAGE_MESSAGE = "Missing image URL - race condition detected"

PageSettled = Callable[[int], Awaitable[None]]
Liveness = Callable[[], bool]
Sleep = Callable[[float], Awaitable[None]]


class ConcurrencyThrottler:
    def __init__(
        self,
        store: PageRecordStore,
        client: ExtractionClient,
        policy: BatchPolicy,
        *,
        on_settled: PageSettled,
        sleep: Sleep = asyncio.sleep,
    ):
        self._store = store
        self._client = client
        self._policy = policy
        self._on_settled = on_settled
        self._sleep = sleep

    async def run(self, page_numbers: Sequence[int], context: ExtractionContext, is_live: Liveness) -> None:
        """Process ``page_numbers`` until every one of them settles or ``is_live`` turns false."""
        pending = [number for number in page_numbers if self._is_pending(number)]
        if not pending:
            return

        batch_size = self._policy.batch_size_for(len(self._store))
        batches = [pending[i:i + batch_size] for i in range(0, len(pending), batch_size)]
        logger.info(
            "Processing %d pages in %d batches of up to %d",
            len(pending),
            len(batches),
            batch_size,
        )

        for index, batch in enumerate(batches, start=1):
            if not is_live():
                return
            logger.info("Starting batch %d/%d with pages %s", index, len(batches), batch)
            results = await asyncio.gather(
                *(self._process_page(number, context, is_live) for number in batch),
                return_exceptions=True,
            )
            if not is_live():
                return

            failed = False
            for number, outcome in zip(batch, results):
                if isinstance(outcome, BaseException):
                    failed = True
                    logger.error(
                        "Unhandled error processing page %d",
                        number,
                        exc_info=(type(outcome), outcome, outcome.__traceback__),
                    )
                    await self._fail_escaped(number, outcome)

            if index < len(batches):
                if failed:
                    logger.warning("Batch %d/%d raised, backing off before the next batch", index, len(batches))
                    await self._sleep(self._policy.batch_error_backoff_seconds)
                else:
                    await self._sleep(self._policy.batch_pause_seconds)

    async def _process_page(self, page_number: int, context: ExtractionContext, is_live: Liveness) -> None:
        page = self._store.find(page_number)
        if page is None or page.status is not PageStatus.PENDING:
            status = page.status.value if page is not None else "missing"
            logger.info("Skipping page %d, already %s", page_number, status)
            return

        descriptor = page.descriptor()
        if not descriptor.has_image():
            logger.error("Page %d has no image reference", page_number)
            page.mark_error(MISSING_IMAGE_MESSAGE)
            await self._on_settled(page_number)
            return

        page.mark_processing()
        logger.info("Page %d started", page_number)
        outcome = await self._client.submit(descriptor, context)
        if not is_live():
            return

        page = self._store.find(page_number)
        if page is None or page.status is not PageStatus.PROCESSING:
            return
        if outcome.ok:
            page.mark_completed(outcome.data)
            logger.info("Page %d completed", page_number)
        else:
            page.mark_error(outcome.error)
            logger.warning("Page %d failed: %s", page_number, outcome.error)
        await self._on_settled(page_number)

    async def _fail_escaped(self, page_number: int, exc: BaseException) -> None:
        page = self._store.find(page_number)
        if page is None or page.status.is_terminal():
            return
        if page.status is PageStatus.PENDING:
            page.mark_processing()
        page.mark_error(str(exc) or type(exc).__name__)
        await self._on_settled(page_number)

    def _is_pending(self, page_number: int) -> bool:
        page = self._store.find(page_number)
        if page is None:
            return False
        if page.status is not PageStatus.PENDING:
            logger.info("Page %d is %s, not submitting it again", page_number, page.status.value)
            return False
        return True
