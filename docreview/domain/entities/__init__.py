"""Domain entities package"""

from .batch_session import BatchSession, RemotePageInfo, SessionDocument
from .document import ExtractedDocument
from .page_descriptor import PageDescriptor
from .page_state import PageState

__all__ = [
    "BatchSession",
    "RemotePageInfo",
    "SessionDocument",
    "ExtractedDocument",
    "PageDescriptor",
    "PageState",
]
