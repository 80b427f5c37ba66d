"""
Schemas for document review endpoints
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class DocumentCreateSchema(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    remark: Optional[str] = None
    imageUrl: Optional[str] = None


class FieldUpdateRequestSchema(BaseModel):
    type: str
    field: str
    newValue: Any = None
    oldValue: Any = None


class VerificationRequestSchema(BaseModel):
    type: str
    status: str
    user: str = "user"
    notes: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class DeleteResponseSchema(BaseModel):
    success: bool = True
    message: str
