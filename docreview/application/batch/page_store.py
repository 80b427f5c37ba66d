"""In-memory PageState table keyed by page number."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from docreview.domain.entities.page_descriptor import ImageRef, PageDescriptor
from docreview.domain.entities.page_state import PageState
from docreview.domain.exceptions import DomainValidationError, EntityNotFoundError
from docreview.domain.value_objects.page_status import PageStatus


class PageRecordStore:
    """Single-writer table of page states for one batch.

    The page-number set is fixed by ``seed`` and never grows or shrinks until
    the store is cleared.
    """

    def __init__(self) -> None:
        self._pages: Dict[int, PageState] = {}

    def seed(self, descriptors: Iterable[PageDescriptor]) -> None:
        """Replace the whole table with fresh Pending states.

        Validation runs before anything is replaced, so a bad list leaves the
        previous table intact.
        """
        staged: Dict[int, PageState] = {}
        for descriptor in descriptors:
            if descriptor.page_number in staged:
                raise DomainValidationError(f"Duplicate page number {descriptor.page_number}")
            staged[descriptor.page_number] = PageState.from_descriptor(descriptor)
        self._pages = staged

    def seed_numbers(self, total_pages: int, file_name: str) -> None:
        """Seed placeholder pages when only a remote count is known."""
        self.seed(
            PageDescriptor(page_number=number, file_name=file_name)
            for number in range(1, total_pages + 1)
        )

    def get(self, page_number: int) -> PageState:
        try:
            return self._pages[page_number]
        except KeyError as exc:
            raise EntityNotFoundError("PageState", str(page_number)) from exc

    def find(self, page_number: int) -> Optional[PageState]:
        return self._pages.get(page_number)

    def __contains__(self, page_number: object) -> bool:
        return page_number in self._pages

    def __len__(self) -> int:
        return len(self._pages)

    def page_numbers(self) -> List[int]:
        return sorted(self._pages)

    def snapshots(self) -> List[PageState]:
        return [self._pages[number].snapshot() for number in sorted(self._pages)]

    def pages_in(self, status: PageStatus) -> List[int]:
        return [number for number in sorted(self._pages) if self._pages[number].status is status]

    def counts(self) -> Dict[PageStatus, int]:
        counts = {status: 0 for status in PageStatus}
        for page in self._pages.values():
            counts[page.status] += 1
        return counts

    def all_terminal(self) -> bool:
        return all(page.status.is_terminal() for page in self._pages.values())

    def update_image_ref(self, page_number: int, image_ref: ImageRef) -> bool:
        page = self._pages.get(page_number)
        if page is None or not image_ref or page.image_ref == image_ref:
            return False
        page.image_ref = image_ref
        return True

    def clear(self) -> None:
        self._pages = {}
