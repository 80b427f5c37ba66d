"""Split uploaded PDFs and images into page descriptors for the batch coordinator."""
from __future__ import annotations

import logging
from mimetypes import guess_type
from pathlib import Path
from typing import List

import fitz  # type: ignore

from docreview.domain.entities.page_descriptor import PageDescriptor
from docreview.domain.exceptions import DomainValidationError
from docreview.infrastructure.pdf.image_processor import bytes_to_data_url, is_image_file

logger = logging.getLogger(__name__)


class PdfSplitter:
    """Renders each PDF page to a JPEG data URL."""

    def __init__(self, *, dpi: int = 200) -> None:
        self._dpi = dpi

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def split(self, content: bytes, file_name: str, mime_type: str = "") -> List[PageDescriptor]:
        """Dispatch on file type: PDFs are rendered page by page, images become one page."""

        if mime_type == "application/pdf" or file_name.lower().endswith(".pdf"):
            return self.split_pdf(content, file_name)
        if is_image_file(file_name, mime_type):
            return self.from_image(content, file_name, mime_type)
        raise DomainValidationError(
            f"Unsupported file type: {mime_type or 'unknown'}. Please upload PDF or image files."
        )

    def split_pdf(self, content: bytes, file_name: str) -> List[PageDescriptor]:
        stem = Path(file_name).stem
        pages: List[PageDescriptor] = []
        try:
            document = fitz.open(stream=content, filetype="pdf")
        except (RuntimeError, ValueError) as exc:
            raise DomainValidationError(f"Could not open PDF {file_name}: {exc}") from exc

        with document:
            for index in range(document.page_count):
                pixmap = document.load_page(index).get_pixmap(dpi=self._dpi, alpha=False)
                image = pixmap.tobytes("jpeg")
                pages.append(
                    PageDescriptor(
                        page_number=index + 1,
                        file_name=f"{stem}_page_{index + 1}.jpg",
                        mime_type="image/jpeg",
                        image_ref=bytes_to_data_url(image, "image/jpeg"),
                        byte_size=len(image),
                    )
                )

        logger.debug("Split %s into %d pages", file_name, len(pages))
        return pages

    def from_image(self, content: bytes, file_name: str, mime_type: str = "") -> List[PageDescriptor]:
        resolved_mime = mime_type or guess_type(file_name)[0] or "image/png"
        path = Path(file_name)
        return [
            PageDescriptor(
                page_number=1,
                file_name=f"{path.stem}_page_1{path.suffix}",
                mime_type=resolved_mime,
                image_ref=bytes_to_data_url(content, resolved_mime),
                byte_size=len(content),
            )
        ]
