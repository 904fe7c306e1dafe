"""
Persistence collaborator.

The core only sees the PatientRepository protocol and opaque string ids;
SqlPatientRepository maps PatientRecord value objects onto the storage
models and back, encrypting personal fields on the way in.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from datetime import date
from typing import Any, Protocol

from sqlalchemy.orm import Session

from anamnesis.domain.models import (
    Guardian,
    InsuranceType,
    PatientRecord,
    PersonalDetails,
    Policyholder,
    RelationshipType,
    Signature,
)
from anamnesis.errors import RecordNotFoundError, redact_identifier
from anamnesis.models.patient import LegalGuardian, Patient, SignatureRecord
from anamnesis.models.patient import Policyholder as PolicyholderRow
from anamnesis.services.encryption import EncryptionService

logger = logging.getLogger(__name__)

encryption = EncryptionService()

MEDICAL_FIELDS = (
    "insurance_provider",
    "insurance_policy_number",
    "insurance_group_number",
    "allergies",
    "current_medications",
    "medical_conditions",
    "previous_surgeries",
    "primary_care_doctor",
)


class PatientRepository(Protocol):
    def add(self, record: PatientRecord) -> str: ...

    def get(self, record_id: str) -> PatientRecord: ...


def _details_to_dict(details: PersonalDetails) -> dict[str, Any]:
    data = asdict(details)
    data["birth_date"] = details.birth_date.isoformat() if details.birth_date else None
    return data


def _details_from_dict(data: dict[str, Any]) -> PersonalDetails:
    birth_date = data.get("birth_date")
    return PersonalDetails(**{**data, "birth_date": date.fromisoformat(birth_date) if birth_date else None})


class SqlPatientRepository:
    def __init__(self, db: Session, crypto: EncryptionService | None = None):
        self.db = db
        self.crypto = crypto or encryption

    def add(self, record: PatientRecord) -> str:
        """Stage an accepted record in the session; the caller commits."""
        patient = Patient(
            encrypted_details=self.crypto.encrypt_fields(_details_to_dict(record.details)),
            encrypted_medical=self.crypto.encrypt_fields(
                {name: getattr(record, name) for name in MEDICAL_FIELDS}
            ),
            insurance_type=record.insurance_type.value,
            language=record.language,
        )
        if record.guardian is not None:
            patient.guardian = LegalGuardian(
                encrypted_details=self.crypto.encrypt_fields(_details_to_dict(record.guardian.details)),
                relationship_type=record.guardian.relationship.value,
            )
        if record.policyholder is not None:
            patient.policyholder = PolicyholderRow(
                encrypted_details=self.crypto.encrypt_fields(
                    _details_to_dict(record.policyholder.details)
                ),
            )
        if record.has_signature():
            sig = record.signature
            patient.signatures.append(
                SignatureRecord(
                    signature_data=sig.data,
                    signature_hash=sig.signature_hash,
                    mime_type=sig.mime_type,
                    encrypted_signer_name=self.crypto.encrypt(sig.signer_name),
                    signed_at=sig.signed_at,
                    integrity_verified=sig.integrity_verified,
                    tampered=sig.tampered,
                    last_integrity_check=sig.last_integrity_check,
                )
            )

        self.db.add(patient)
        self.db.flush()
        logger.info("Stored intake record ref=%s", redact_identifier(patient.id))
        return str(patient.id)

    def get(self, record_id: str) -> PatientRecord:
        try:
            key = uuid.UUID(str(record_id))
        except ValueError as exc:
            raise RecordNotFoundError(record_id) from exc

        patient = self.db.get(Patient, key)
        if patient is None:
            raise RecordNotFoundError(record_id)
        return self._to_record(patient)

    def _to_record(self, patient: Patient) -> PatientRecord:
        medical = self.crypto.decrypt_fields(patient.encrypted_medical)

        guardian = None
        if patient.guardian is not None:
            guardian = Guardian(
                details=_details_from_dict(self.crypto.decrypt_fields(patient.guardian.encrypted_details)),
                relationship=RelationshipType.parse(patient.guardian.relationship_type),
            )
        policyholder = None
        if patient.policyholder is not None:
            policyholder = Policyholder(
                details=_details_from_dict(
                    self.crypto.decrypt_fields(patient.policyholder.encrypted_details)
                ),
            )

        signature = None
        if patient.signatures:
            latest = patient.signatures[-1]
            signature = Signature(
                data=latest.signature_data,
                signed_at=latest.signed_at,
                signature_hash=latest.signature_hash,
                signer_name=self.crypto.decrypt(latest.encrypted_signer_name),
                mime_type=latest.mime_type,
                integrity_verified=latest.integrity_verified,
                tampered=latest.tampered,
                last_integrity_check=latest.last_integrity_check,
            )

        return PatientRecord(
            details=_details_from_dict(self.crypto.decrypt_fields(patient.encrypted_details)),
            insurance_type=InsuranceType(patient.insurance_type),
            language=patient.language,
            guardian=guardian,
            policyholder=policyholder,
            signature=signature,
            **{name: medical.get(name) for name in MEDICAL_FIELDS},
        )
