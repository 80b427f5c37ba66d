"""PDF infrastructure utilities."""

from .pdf_splitter import PdfSplitter
from .image_processor import bytes_to_data_url, decode_data_url, image_to_data_url

__all__ = ["PdfSplitter", "bytes_to_data_url", "decode_data_url", "image_to_data_url"]
