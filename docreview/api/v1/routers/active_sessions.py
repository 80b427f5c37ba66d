"""Proxy for the batch backend's list of active sessions."""
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from docreview.api.v1.dependencies import get_batch_backend_client
from docreview.domain.exceptions import BackendUnavailableError, BatchStatusError
from docreview.infrastructure.http.batch_backend_client import BatchBackendClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/active-sessions", tags=["batches"])


@router.get("")
async def list_active_sessions(
    client: BatchBackendClient = Depends(get_batch_backend_client),
) -> Dict[str, Any]:
    try:
        listing = await client.list_sessions()
    except BatchStatusError as exc:
        logger.warning("Backend sessions endpoint failed: %s", exc)
        return JSONResponse(
            status_code=404,
            content={"success": False, "sessions": [], "error": "Backend sessions endpoint not available"},
        )
    except BackendUnavailableError as exc:
        logger.error("Batch backend unavailable: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "sessions": [], "error": "Failed to fetch active sessions"},
        )
    return {"success": True, **listing}
