"""Document types produced by the factory floor."""
from __future__ import annotations

from enum import Enum

from docreview.domain.exceptions import DomainValidationError


class DocumentType(str, Enum):
    REBUT = "Rebut"
    NPT = "NPT"
    KOSU = "Kosu"

    @classmethod
    def parse(cls, value: str | None) -> "DocumentType":
        """Accept the canonical label case-insensitively ("rebut", "NPT", ...)."""
        text = (value or "").strip()
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        raise DomainValidationError(f"Invalid document type: {value!r}")


class VerificationStatus(str, Enum):
    ORIGINAL = "original"
    DRAFT = "draft"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"
    REVISION_NEEDED = "revision_needed"

    @classmethod
    def parse(cls, value: str | None) -> "VerificationStatus":
        try:
            return cls((value or "").strip().lower())
        except ValueError as exc:
            raise DomainValidationError(f"Invalid verification status: {value!r}") from exc
