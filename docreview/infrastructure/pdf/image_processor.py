"""Image encoding helpers used by the infrastructure layer."""
from __future__ import annotations

import base64
import binascii
import logging
from mimetypes import guess_type
from pathlib import Path
from typing import Tuple

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tif", ".tiff"}


def image_to_data_url(image_path: Path) -> str:
    """Convert an image on disk to a data URL."""

    mime_type, _ = guess_type(image_path)
    return bytes_to_data_url(image_path.read_bytes(), mime_type or "image/png")


def bytes_to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """Split ``data:<mime>;base64,<payload>`` into its MIME type and raw bytes.

    Raises ``ValueError`` for anything that is not a base64 data URL.
    """

    if not data_url.startswith("data:"):
        raise ValueError("Not a data URL")
    header, sep, payload = data_url.partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("Only base64 data URLs are supported")
    mime_type = header[len("data:"):-len(";base64")] or "application/octet-stream"
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("Invalid base64 payload") from exc


def is_image_file(file_name: str, mime_type: str = "") -> bool:
    if mime_type.startswith("image/"):
        return True
    return Path(file_name).suffix.lower() in IMAGE_EXTENSIONS
