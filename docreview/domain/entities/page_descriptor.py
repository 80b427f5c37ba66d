"""PageDescriptor - immutable input describing one page image of a batch."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

ImageRef = Union[str, bytes]


@dataclass(frozen=True)
class PageDescriptor:
    """
    One page handed to the coordinator by the host.

    ``image_ref`` is opaque to the coordinator: a data URL, an absolute or
    relative URL, or raw image bytes. An empty reference is legal here and is
    rejected later, per page, before any network call.
    """

    page_number: int
    file_name: str
    mime_type: str = "image/png"
    image_ref: ImageRef = ""
    byte_size: int = 0

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise ValueError("page_number must be >= 1")
        if self.byte_size < 0:
            raise ValueError("byte_size must be >= 0")

    def has_image(self) -> bool:
        return bool(self.image_ref)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "byteSize": self.byte_size,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageDescriptor":
        return cls(
            page_number=int(data.get("pageNumber") or data.get("page_number") or 0),
            file_name=str(data.get("fileName") or data.get("file_name") or ""),
            mime_type=str(data.get("mimeType") or data.get("mime_type") or "image/png"),
            image_ref=data.get("imageRef") or data.get("imageDataUrl") or data.get("image_ref") or "",
            byte_size=int(data.get("byteSize") or data.get("bufferSize") or data.get("byte_size") or 0),
        )
