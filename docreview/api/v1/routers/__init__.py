"""API v1 routers package."""

from . import active_sessions, batch_status, batches, documents, process_page

__all__ = [
    "active_sessions",
    "batch_status",
    "batches",
    "documents",
    "process_page",
]
