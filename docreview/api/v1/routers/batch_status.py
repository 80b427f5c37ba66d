"""Proxy for the batch backend status endpoint."""
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from docreview.api.v1.dependencies import get_batch_backend_client
from docreview.domain.exceptions import (
    BackendUnavailableError,
    BatchStatusError,
    SessionNotFoundError,
)
from docreview.infrastructure.http.batch_backend_client import BatchBackendClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/batch-status", tags=["batches"])


@router.get("/{session_id}")
async def get_batch_status(
    session_id: str,
    client: BatchBackendClient = Depends(get_batch_backend_client),
) -> Dict[str, Any]:
    try:
        return await client.fetch_raw(session_id)
    except SessionNotFoundError:
        return JSONResponse(status_code=404, content={"error": "Session not found"})
    except BatchStatusError as exc:
        logger.warning("Backend status error for %s: %s", session_id, exc)
        return JSONResponse(status_code=exc.status_code or 500, content={"error": f"Backend error: {exc}"})
    except BackendUnavailableError as exc:
        logger.error("Batch backend unavailable: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Failed to get batch status"})
