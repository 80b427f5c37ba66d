"""
Schemas for the single-page extraction endpoint
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ProcessPageRequestSchema(BaseModel):
    pageBuffer: Optional[str] = None
    imageUrl: Optional[str] = None
    imageDataUrl: Optional[str] = None
    fileName: Optional[str] = None
    mimeType: Optional[str] = None
    documentType: Optional[str] = None
    originalFileName: Optional[str] = None
    pageNumber: int = 1


class ProcessPageResponseSchema(BaseModel):
    success: bool
    pageNumber: int
    extractedData: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    message: Optional[str] = None
