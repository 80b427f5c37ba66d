"""
PageState Entity - mutable per-page record owned by the batch coordinator.

Invariants:
- ``extracted_data`` is present iff ``status`` is COMPLETED.
- ``error_message`` is present iff ``status`` is ERROR.
- ``retry_count`` only grows, and only through ``reset_for_retry``.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from docreview.domain.entities.page_descriptor import ImageRef, PageDescriptor
from docreview.domain.exceptions import EntityValidationError
from docreview.domain.value_objects.page_status import PageStatus


@dataclass
class PageState:
    page_number: int
    file_name: str
    mime_type: str
    image_ref: ImageRef
    byte_size: int = 0
    status: PageStatus = PageStatus.PENDING
    extracted_data: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    retry_count: int = 0

    @classmethod
    def from_descriptor(cls, descriptor: PageDescriptor) -> "PageState":
        """Create a fresh Pending state for ``descriptor``."""
        return cls(
            page_number=descriptor.page_number,
            file_name=descriptor.file_name,
            mime_type=descriptor.mime_type,
            image_ref=descriptor.image_ref,
            byte_size=descriptor.byte_size,
        )

    def descriptor(self) -> PageDescriptor:
        """Rebuild the submission descriptor, including any corrected image reference."""
        return PageDescriptor(
            page_number=self.page_number,
            file_name=self.file_name,
            mime_type=self.mime_type,
            image_ref=self.image_ref,
            byte_size=self.byte_size,
        )

    # ------------------------------------------------------------------
    # Local transitions (direct mode and retries)
    # ------------------------------------------------------------------
    def mark_processing(self) -> None:
        self._transition(PageStatus.PROCESSING)
        self.extracted_data = None
        self.error_message = None

    def mark_completed(self, data: Optional[Dict[str, Any]]) -> None:
        self._transition(PageStatus.COMPLETED)
        self.extracted_data = dict(data or {})
        self.error_message = None

    def mark_error(self, message: Optional[str]) -> None:
        self._transition(PageStatus.ERROR)
        self.extracted_data = None
        self.error_message = message or "Unknown error"

    def reset_for_retry(self) -> None:
        """Error → Pending, bumping the retry counter."""
        self._transition(PageStatus.PENDING)
        self.extracted_data = None
        self.error_message = None
        self.retry_count += 1

    # ------------------------------------------------------------------
    # Remote reconciliation (polled mode)
    # ------------------------------------------------------------------
    def apply_remote(
        self,
        status: PageStatus,
        data: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> bool:
        """Adopt the backend's view of this page.

        The backend is authoritative in polled mode, so no transition check is
        applied; invariants on payload fields still hold. Returns True when the
        visible status changed.
        """
        changed = status is not self.status
        self.status = status
        if status is PageStatus.COMPLETED:
            self.extracted_data = dict(data or self.extracted_data or {})
            self.error_message = None
        elif status is PageStatus.ERROR:
            self.extracted_data = None
            self.error_message = error or self.error_message or "Page failed on the batch backend"
        else:
            self.extracted_data = None
            self.error_message = None
        return changed

    def snapshot(self) -> "PageState":
        """Detached copy safe to hand to callers."""
        copy = replace(self)
        if self.extracted_data is not None:
            copy.extracted_data = dict(self.extracted_data)
        return copy

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "byteSize": self.byte_size,
            "status": self.status.value,
            "extractedData": self.extracted_data,
            "error": self.error_message,
            "retryCount": self.retry_count,
            "imageUrl": self.image_url(),
        }

    def image_url(self) -> Optional[str]:
        """The image reference when it is a fetchable URL (not inline data)."""
        if isinstance(self.image_ref, str) and self.image_ref and not self.image_ref.startswith("data:"):
            return self.image_ref
        return None

    def _transition(self, new_status: PageStatus) -> None:
        if not self.status.can_transition_to(new_status):
            raise EntityValidationError(
                "PageState",
                {
                    "page": self.page_number,
                    "status": f"Invalid transition from {self.status.value} to {new_status.value}",
                },
            )
        self.status = new_status
