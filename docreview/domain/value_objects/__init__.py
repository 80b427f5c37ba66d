"""
Domain Value Objects

Immutable value objects that encapsulate domain concepts with validation.
"""
from .document_type import DocumentType, VerificationStatus
from .page_status import PageStatus, SessionState
from .session_reference import SessionReference

__all__ = [
    'DocumentType',
    'VerificationStatus',
    'PageStatus',
    'SessionState',
    'SessionReference',
]
