"""
ExtractedDocument Entity - a persisted, reviewable extraction result.

One document corresponds to one processed page. This is an immutable entity:
edits and verification changes return new instances carrying an audit trail.
"""
from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from docreview.constants import EXPORT_URL_TEMPLATE
from docreview.domain.exceptions import DomainValidationError
from docreview.domain.value_objects.document_type import DocumentType, VerificationStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def generate_document_id(page_number: int, now: Optional[datetime] = None) -> str:
    """Time-ordered id: ``<epoch ms>-<page>-<random>``."""
    moment = now or _utcnow()
    return f"{int(moment.timestamp() * 1000)}-{page_number}-{uuid.uuid4().hex[:13]}"


def export_urls(document_id: str) -> Dict[str, str]:
    return {
        "json_url": EXPORT_URL_TEMPLATE.format(document_id=document_id, fmt="json"),
        "excel_url": EXPORT_URL_TEMPLATE.format(document_id=document_id, fmt="excel"),
    }


@dataclass(frozen=True)
class FieldChange:
    """Audit entry for a single user edit."""

    field: str
    old_value: Any
    new_value: Any
    updated_at: datetime
    updated_by: str = "user"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "updated_at": self.updated_at.isoformat(),
            "updated_by": self.updated_by,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldChange":
        return cls(
            field=data.get("field", ""),
            old_value=data.get("old_value"),
            new_value=data.get("new_value"),
            updated_at=_parse_datetime(data.get("updated_at")) or _utcnow(),
            updated_by=data.get("updated_by") or "user",
        )


@dataclass(frozen=True)
class VerificationEntry:
    status: VerificationStatus
    timestamp: datetime
    user: str = "user"
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "user": self.user,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerificationEntry":
        return cls(
            status=VerificationStatus.parse(data.get("status")),
            timestamp=_parse_datetime(data.get("timestamp")) or _utcnow(),
            user=data.get("user") or "user",
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class ExtractedDocument:
    """Reviewable extraction record for one page of an uploaded document."""

    id: str
    document_type: DocumentType
    data: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    remark: str = "Document processed successfully"
    image_url: Optional[str] = None
    retry_used: str = "no-retry"
    verification_status: VerificationStatus = VerificationStatus.ORIGINAL
    verification_history: List[VerificationEntry] = field(default_factory=list)
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    history: List[FieldChange] = field(default_factory=list)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    updated_by_user: bool = False

    @property
    def page_number(self) -> Optional[int]:
        value = self.metadata.get("page_number")
        return int(value) if isinstance(value, (int, float, str)) and str(value).isdigit() else None

    @property
    def original_filename(self) -> Optional[str]:
        return self.metadata.get("original_filename") or self.metadata.get("filename")

    @classmethod
    def create(
        cls,
        document_type: DocumentType,
        data: Dict[str, Any],
        *,
        original_filename: str,
        page_number: int,
        file_size: int = 0,
        remark: Optional[str] = None,
        image_url: Optional[str] = None,
        document_id: Optional[str] = None,
    ) -> "ExtractedDocument":
        """Build a new document from a freshly extracted page."""
        now = _utcnow()
        payload = dict(data or {})
        payload.setdefault("document_type", document_type.value)
        return cls(
            id=document_id or generate_document_id(page_number, now),
            document_type=document_type,
            data=payload,
            metadata={
                "filename": original_filename,
                "document_type": document_type.value,
                "processed_at": now.isoformat(),
                "file_size": file_size,
                "page_number": page_number,
                "original_filename": original_filename,
            },
            remark=remark or "Document processed successfully",
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )

    def with_field_update(
        self,
        field_path: str,
        new_value: Any,
        *,
        old_value: Any = None,
        user: str = "user",
    ) -> "ExtractedDocument":
        """Return a copy with ``field_path`` (dotted, e.g. ``data.header.date``) replaced."""
        root, _, rest = field_path.partition(".")
        if root not in {"data", "metadata", "remark"}:
            raise DomainValidationError(f"Field {field_path!r} is not editable")

        now = _utcnow()
        change = FieldChange(
            field=field_path,
            old_value=old_value,
            new_value=new_value,
            updated_at=now,
            updated_by=user,
        )
        if root == "remark":
            if rest:
                raise DomainValidationError(f"Field {field_path!r} is not editable")
            return replace(
                self,
                remark=str(new_value),
                history=[*self.history, change],
                updated_at=now,
                updated_by_user=True,
            )

        if not rest:
            raise DomainValidationError("A nested field path is required")
        container = copy.deepcopy(getattr(self, root))
        _set_path(container, rest.split("."), new_value)
        return replace(
            self,
            **{root: container},
            history=[*self.history, change],
            updated_at=now,
            updated_by_user=True,
        )

    def with_verification(
        self,
        status: VerificationStatus,
        *,
        user: str = "user",
        notes: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ExtractedDocument":
        now = _utcnow()
        entry = VerificationEntry(status=status, timestamp=now, user=user, notes=notes)
        verified = status is VerificationStatus.VERIFIED
        return replace(
            self,
            verification_status=status,
            verification_history=[*self.verification_history, entry],
            verified_by=user if verified else self.verified_by,
            verified_at=now if verified else self.verified_at,
            data=dict(data) if data is not None else self.data,
            metadata=dict(metadata) if metadata is not None else self.metadata,
            updated_by_user=self.updated_by_user or data is not None,
            updated_at=now,
        )

    def to_dict(self) -> Dict[str, Any]:
        urls = export_urls(self.id)
        return {
            "id": self.id,
            "document_type": self.document_type.value,
            "data": self.data,
            "metadata": self.metadata,
            "remark": self.remark,
            "imageUrl": self.image_url,
            "retry_used": self.retry_used,
            "json_url": urls["json_url"],
            "excel_url": urls["excel_url"],
            "verification_status": self.verification_status.value,
            "verification_history": [entry.to_dict() for entry in self.verification_history],
            "verified_by": self.verified_by,
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
            "history": [change.to_dict() for change in self.history],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "updated_by_user": self.updated_by_user,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractedDocument":
        metadata = dict(data.get("metadata") or {})
        raw_type = data.get("document_type") or metadata.get("document_type") or (data.get("data") or {}).get("document_type")
        return cls(
            id=str(data["id"]),
            document_type=DocumentType.parse(raw_type),
            data=dict(data.get("data") or {}),
            metadata=metadata,
            remark=data.get("remark") or "",
            image_url=data.get("imageUrl") or data.get("image_url"),
            retry_used=data.get("retry_used") or "no-retry",
            verification_status=VerificationStatus.parse(data.get("verification_status") or "original"),
            verification_history=[VerificationEntry.from_dict(e) for e in data.get("verification_history") or []],
            verified_by=data.get("verified_by"),
            verified_at=_parse_datetime(data.get("verified_at")),
            history=[FieldChange.from_dict(c) for c in data.get("history") or []],
            created_at=_parse_datetime(data.get("created_at")) or _utcnow(),
            updated_at=_parse_datetime(data.get("updated_at")) or _utcnow(),
            updated_by_user=bool(data.get("updated_by_user", False)),
        )


def _set_path(container: Any, parts: List[str], value: Any) -> None:
    target = container
    for index, part in enumerate(parts):
        last = index == len(parts) - 1
        if isinstance(target, list):
            try:
                position = int(part)
            except ValueError as exc:
                raise DomainValidationError(f"List index expected, got {part!r}") from exc
            if not 0 <= position < len(target):
                raise DomainValidationError(f"Index {position} out of range")
            if last:
                target[position] = value
            else:
                target = target[position]
        elif isinstance(target, dict):
            if last:
                target[part] = value
            else:
                target = target.setdefault(part, {})
        else:
            raise DomainValidationError(f"Cannot descend into {part!r}")
