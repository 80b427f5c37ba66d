"""Fakes and fixtures for driving the batch coordinator deterministically."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from docreview.application.batch.contracts import ExtractionOutcome
from docreview.application.batch.coordinator import BatchCoordinator
from docreview.application.batch.policy import BatchPolicy
from docreview.domain.entities.batch_session import BatchSession
from docreview.domain.entities.page_descriptor import PageDescriptor
from docreview.infrastructure.persistence.memory_session_store import InMemorySessionStore

FIXED_NOW = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)
BACKEND_URL = "http://backend:8000"


class FakeTime:
    """Monotonic clock that only moves when the coordinator sleeps."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: List[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


class FakeExtractionClient:
    def __init__(self) -> None:
        self.outcomes: Dict[int, List[object]] = {}
        self.calls: List[int] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.ticks = 2
        self.gate: Optional[asyncio.Event] = None

    async def submit(self, page, context) -> ExtractionOutcome:
        self.calls.append(page.page_number)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            for _ in range(self.ticks):
                await asyncio.sleep(0)
            scripted = self.outcomes.get(page.page_number)
            result = scripted.pop(0) if scripted else None
            if isinstance(result, Exception):
                raise result
            if result is None:
                return ExtractionOutcome.success(
                    {"id": f"doc-{page.page_number}", "data": {"header": {"page": page.page_number}}}
                )
            return result
        finally:
            self.in_flight -= 1


class FakeStatusClient:
    """Replays scripted payloads or exceptions; the last entry repeats forever."""

    def __init__(self) -> None:
        self.script: List[object] = []
        self.calls = 0

    async def fetch(self, session_id: str) -> BatchSession:
        self.calls += 1
        if not self.script:
            raise AssertionError("status client called without a script")
        entry = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        await asyncio.sleep(0)
        if isinstance(entry, Exception):
            raise entry
        return BatchSession.from_payload(session_id, entry)


def make_pages(count: int, images: Optional[Dict[int, object]] = None) -> List[PageDescriptor]:
    images = images or {}
    pages = []
    for number in range(1, count + 1):
        image_ref = images.get(number, f"data:image/jpeg;base64,UEFHRS0{number}")
        pages.append(
            PageDescriptor(
                page_number=number,
                file_name=f"scan_page_{number}.jpg",
                mime_type="image/jpeg",
                image_ref=image_ref,
                byte_size=128,
            )
        )
    return pages


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def extraction_client() -> FakeExtractionClient:
    return FakeExtractionClient()


@pytest.fixture
def status_client() -> FakeStatusClient:
    return FakeStatusClient()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def page_factory():
    return make_pages


@pytest.fixture
def recorder():
    """Collects host callbacks."""

    class Recorder:
        def __init__(self) -> None:
            self.pages: List[tuple] = []
            self.all_complete = 0

        def on_page_complete(self, page_number, data) -> None:
            self.pages.append((page_number, data))

        def on_all_complete(self) -> None:
            self.all_complete += 1

        def page_numbers(self) -> List[int]:
            return sorted(number for number, _ in self.pages)

    return Recorder()


@pytest.fixture
def build_coordinator(extraction_client, status_client, session_store, fake_time, recorder):
    def _build(**overrides) -> BatchCoordinator:
        kwargs = dict(
            policy=BatchPolicy(),
            on_page_complete=recorder.on_page_complete,
            on_all_complete=recorder.on_all_complete,
            backend_url=BACKEND_URL,
            clock=fake_time.clock,
            sleep=fake_time.sleep,
            now=lambda: FIXED_NOW,
        )
        kwargs.update(overrides)
        return BatchCoordinator(extraction_client, status_client, session_store, **kwargs)

    return _build


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW
