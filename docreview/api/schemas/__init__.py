"""
API Schemas - organized by domain
"""
from .batch_schemas import (
    BatchListSchema,
    BatchSummarySchema,
    BatchCreatedSchema,
    BatchProgressSchema,
    BatchViewSchema,
    PageStateSchema,
    RetryResponseSchema,
    batch_summary_to_schema,
    batch_view_to_schema,
)
from .document_schemas import (
    DeleteResponseSchema,
    DocumentCreateSchema,
    FieldUpdateRequestSchema,
    VerificationRequestSchema,
)
from .process_page_schemas import ProcessPageRequestSchema, ProcessPageResponseSchema

__all__ = [
    # Batch schemas
    "BatchCreatedSchema",
    "BatchListSchema",
    "BatchSummarySchema",
    "BatchProgressSchema",
    "BatchViewSchema",
    "PageStateSchema",
    "RetryResponseSchema",
    "batch_summary_to_schema",
    "batch_view_to_schema",
    # Document schemas
    "DeleteResponseSchema",
    "DocumentCreateSchema",
    "FieldUpdateRequestSchema",
    "VerificationRequestSchema",
    # Process page schemas
    "ProcessPageRequestSchema",
    "ProcessPageResponseSchema",
]
