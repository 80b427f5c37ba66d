from __future__ import annotations

# Single source of truth for static constants and versions.

DOCUMENT_SNAPSHOT_VERSION = 1

# Pages in flight per throttled batch, keyed by the largest batch total the
# size applies to. Anything larger falls back to DEFAULT_BATCH_SIZE.
BATCH_SIZE_TABLE = ((10, 12), (20, 10), (30, 8))
DEFAULT_BATCH_SIZE = 6

# Failure ratio above which a large batch is reported as unhealthy.
HIGH_FAILURE_RATIO = 0.3
HIGH_FAILURE_MIN_PAGES = 10

EXPORT_URL_TEMPLATE = "/api/documents/{document_id}/export?format={fmt}"
