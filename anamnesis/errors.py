"""
Exception taxonomy for the intake core.

Eligibility rejections are not exceptions: they travel as ValidationVerdict
values. Everything here is either an input fault of the age calculator, a
lookup miss in the persistence collaborator, or a rendering fault that aborts
document generation.
"""

from __future__ import annotations

import hashlib
from typing import Any


def redact_identifier(value: Any) -> str | None:
    """Short, stable digest of a record identifier, safe to put in logs."""
    if value is None:
        return None
    return hashlib.sha256(str(value).encode()).hexdigest()[:12]


class InvalidDateError(ValueError):
    """Birth date is missing, unparseable, or lies after the reference date."""


class RecordNotFoundError(LookupError):
    """The persistence collaborator has no record for the given identifier."""

    def __init__(self, record_id: Any):
        self.record_ref = redact_identifier(record_id)
        super().__init__(f"No intake record for ref={self.record_ref}")


class RenderingFault(RuntimeError):
    """
    Operational fault while producing a document.

    Carries layout/language and a redacted record reference so the failure
    can be diagnosed from logs without exposing patient data.
    """

    def __init__(
        self,
        message: str,
        *,
        layout_id: str | None = None,
        language: str | None = None,
        record_ref: str | None = None,
    ):
        self.layout_id = layout_id
        self.language = language
        self.record_ref = record_ref
        super().__init__(message)

    def context(self) -> dict[str, str | None]:
        return {
            "layout_id": self.layout_id,
            "language": self.language,
            "record_ref": self.record_ref,
        }

    def __str__(self) -> str:
        base = super().__str__()
        parts = [f"{k}={v}" for k, v in self.context().items() if v is not None]
        return f"{base} ({', '.join(parts)})" if parts else base


class UnsupportedLanguageError(RenderingFault):
    pass


class TemplateIntegrityError(RenderingFault):
    """Template is missing, unparseable, or lacks a required placeholder."""


class SignatureDecodeError(RenderingFault):
    pass


class RenderConversionError(RenderingFault):
    """Markup could not be converted into a PDF byte stream."""
