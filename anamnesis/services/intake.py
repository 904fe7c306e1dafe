"""
Intake submission flow: schema check -> parse -> eligibility gate -> persist.

Schema errors and eligibility rejections are ordinary outcomes returned to
the caller; only accepted records reach the persistence collaborator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from anamnesis.documents.signature import decode_payload
from anamnesis.domain.age import parse_date
from anamnesis.domain.models import (
    Guardian,
    InsuranceType,
    PatientRecord,
    PersonalDetails,
    Policyholder,
    RelationshipType,
    Signature,
)
from anamnesis.errors import InvalidDateError, SignatureDecodeError
from anamnesis.i18n import resolve_language
from anamnesis.models.repository import PatientRepository
from anamnesis.schemas.intake import INTAKE_SCHEMA
from anamnesis.services.eligibility import EligibilityValidator, ValidationVerdict
from anamnesis.services.validation import validate_against_schema

logger = logging.getLogger(__name__)

PERSON_FIELDS = (
    "gender",
    "street",
    "zip_code",
    "city",
    "mobile_number",
    "phone_number",
    "email_address",
    "job",
)


class OutcomeKind(str, Enum):
    INVALID = "invalid"
    REJECTED = "rejected"
    ACCEPTED = "accepted"


@dataclass
class IntakeOutcome:
    kind: OutcomeKind
    verdict: ValidationVerdict | None = None
    patient_id: str | None = None
    errors: list[str] = field(default_factory=list)


def _optional_date(value: Any) -> date | None:
    try:
        return parse_date(value)
    except InvalidDateError:
        return None


def _has_data(person: dict[str, Any] | None) -> bool:
    return bool(person) and bool(
        (person.get("first_name") or "").strip() or (person.get("last_name") or "").strip()
    )


def _parse_person(data: dict[str, Any]) -> PersonalDetails:
    return PersonalDetails(
        first_name=(data.get("first_name") or "").strip(),
        last_name=(data.get("last_name") or "").strip(),
        birth_date=_optional_date(data.get("birth_date")),
        **{name: data.get(name) or None for name in PERSON_FIELDS},
    )


def parse_submission(payload: dict[str, Any], captured_at: datetime | None = None) -> PatientRecord:
    """
    Build a PatientRecord from a schema-valid payload.

    An unparseable birth date becomes None and is rejected later by the
    eligibility gate. Guardian and policyholder are parsed independently,
    even when they describe the same person.
    """
    details = _parse_person(payload)

    guardian = None
    if _has_data(payload.get("guardian")):
        raw = payload["guardian"]
        guardian = Guardian(
            details=_parse_person(raw),
            relationship=RelationshipType.parse(raw.get("relationship_type")),
        )

    policyholder = None
    if _has_data(payload.get("policyholder")):
        policyholder = Policyholder(details=_parse_person(payload["policyholder"]))

    if payload.get("insurance_type"):
        insurance_type = InsuranceType(payload["insurance_type"])
    else:
        insurance_type = (
            InsuranceType.FAMILY_INSURED if policyholder is not None else InsuranceType.SELF_INSURED
        )

    signature = None
    if payload.get("signature_data"):
        data, mime_type = decode_payload(payload["signature_data"])
        signature = Signature.capture(
            data, signer_name=details.full_name, signed_at=captured_at, mime_type=mime_type
        )

    return PatientRecord(
        details=details,
        insurance_type=insurance_type,
        language=resolve_language(payload.get("language")),
        insurance_provider=payload.get("insurance_provider"),
        insurance_policy_number=payload.get("insurance_policy_number"),
        insurance_group_number=payload.get("insurance_group_number"),
        allergies=payload.get("allergies"),
        current_medications=payload.get("current_medications"),
        medical_conditions=payload.get("medical_conditions"),
        previous_surgeries=payload.get("previous_surgeries"),
        primary_care_doctor=payload.get("primary_care_doctor"),
        guardian=guardian,
        policyholder=policyholder,
        signature=signature,
    )


def submit_intake(
    payload: dict[str, Any],
    repository: PatientRepository,
    validator: EligibilityValidator | None = None,
) -> IntakeOutcome:
    errors = validate_against_schema(payload, INTAKE_SCHEMA)
    if errors:
        logger.info("Intake payload failed schema validation: %d errors", len(errors))
        return IntakeOutcome(OutcomeKind.INVALID, errors=errors)

    try:
        record = parse_submission(payload)
    except SignatureDecodeError as exc:
        logger.info("Intake signature rejected: %s", exc)
        return IntakeOutcome(OutcomeKind.INVALID, errors=[f"signature_data: {exc}"])

    verdict = (validator or EligibilityValidator()).validate(record)
    if not verdict.is_accepted:
        return IntakeOutcome(OutcomeKind.REJECTED, verdict=verdict)

    patient_id = repository.add(record)
    return IntakeOutcome(OutcomeKind.ACCEPTED, verdict=verdict, patient_id=patient_id)
