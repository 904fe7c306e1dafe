"""
Value objects for a single intake submission.

Records are passed by value between the validator, the renderer and the
persistence collaborator. Nothing here talks to a database; age is always
derived from the birth date, never stored.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from enum import Enum

from anamnesis.domain.age import years

logger = logging.getLogger(__name__)


class InsuranceType(str, Enum):
    SELF_INSURED = "SELF_INSURED"
    FAMILY_INSURED = "FAMILY_INSURED"


class RelationshipType(str, Enum):
    MOTHER = "MOTHER"
    FATHER = "FATHER"
    LEGAL_GUARDIAN = "LEGAL_GUARDIAN"
    GRANDPARENT = "GRANDPARENT"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: str | None) -> RelationshipType:
        """Lenient parse; anything unrecognised becomes OTHER."""
        try:
            return cls((value or "").strip().upper())
        except ValueError:
            logger.warning("Unknown relationship type %r, defaulting to OTHER", value)
            return cls.OTHER


@dataclass(frozen=True)
class PersonalDetails:
    first_name: str
    last_name: str
    birth_date: date | None = None
    gender: str | None = None
    street: str | None = None
    zip_code: str | None = None
    city: str | None = None
    mobile_number: str | None = None
    phone_number: str | None = None
    email_address: str | None = None
    job: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Guardian:
    """Legal custody holder of a minor patient."""

    details: PersonalDetails
    relationship: RelationshipType = RelationshipType.OTHER


@dataclass(frozen=True)
class Policyholder:
    """Main insured person under whose policy the patient is covered."""

    details: PersonalDetails


@dataclass(frozen=True)
class Signature:
    """
    Captured signature image.

    The image bytes are fixed at capture; only the integrity metadata is
    updated afterwards, and only by returning a new instance.
    """

    data: bytes
    signed_at: datetime
    signature_hash: str
    signer_name: str = ""
    mime_type: str = "image/png"
    integrity_verified: bool = False
    tampered: bool = False
    last_integrity_check: datetime | None = None

    @classmethod
    def capture(
        cls,
        data: bytes,
        signer_name: str = "",
        signed_at: datetime | None = None,
        mime_type: str = "image/png",
    ) -> Signature:
        return cls(
            data=data,
            signed_at=signed_at or datetime.now(timezone.utc),
            signature_hash=hashlib.sha256(data).hexdigest(),
            signer_name=signer_name,
            mime_type=mime_type,
        )

    def verify_integrity(self, expected_hash: str, checked_at: datetime | None = None) -> Signature:
        verified = self.signature_hash == expected_hash
        return replace(
            self,
            integrity_verified=verified,
            tampered=not verified,
            last_integrity_check=checked_at or datetime.now(timezone.utc),
        )

    @property
    def is_valid(self) -> bool:
        return not self.tampered


@dataclass(frozen=True)
class PatientRecord:
    details: PersonalDetails
    insurance_type: InsuranceType = InsuranceType.SELF_INSURED
    language: str = "de"
    insurance_provider: str | None = None
    insurance_policy_number: str | None = None
    insurance_group_number: str | None = None
    allergies: str | None = None
    current_medications: str | None = None
    medical_conditions: str | None = None
    previous_surgeries: str | None = None
    primary_care_doctor: str | None = None
    guardian: Guardian | None = None
    policyholder: Policyholder | None = None
    signature: Signature | None = None

    def age(self, reference_date: date) -> int:
        return years(self.details.birth_date, reference_date)

    def has_signature(self) -> bool:
        return self.signature is not None and len(self.signature.data) > 0

    @property
    def is_family_insured(self) -> bool:
        return self.insurance_type == InsuranceType.FAMILY_INSURED
