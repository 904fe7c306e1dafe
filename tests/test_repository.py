"""Tests for the SQL persistence collaborator."""

import base64
import uuid
from datetime import date, datetime, timezone

import pytest

from anamnesis.domain.models import (
    Guardian,
    InsuranceType,
    PatientRecord,
    PersonalDetails,
    Policyholder,
    RelationshipType,
    Signature,
)
from anamnesis.errors import RecordNotFoundError
from anamnesis.models.patient import Patient
from anamnesis.models.repository import SqlPatientRepository

from conftest import PNG_BASE64


def _make_record(**overrides):
    parent = PersonalDetails(first_name="Erika", last_name="Mustermann", birth_date=date(1980, 8, 12))
    fields = dict(
        details=PersonalDetails(
            first_name="Max",
            last_name="Mustermann",
            birth_date=date(2010, 5, 23),
            city="Berlin",
        ),
        insurance_type=InsuranceType.FAMILY_INSURED,
        language="en",
        insurance_provider="AOK",
        allergies="Penicillin",
        guardian=Guardian(parent, RelationshipType.MOTHER),
        policyholder=Policyholder(parent),
        signature=Signature.capture(
            base64.b64decode(PNG_BASE64),
            signer_name="Max Mustermann",
            signed_at=datetime(2026, 6, 15, 9, 30, tzinfo=timezone.utc),
        ),
    )
    fields.update(overrides)
    return PatientRecord(**fields)


def test_add_and_get_roundtrip(db_session):
    repo = SqlPatientRepository(db_session)
    record = _make_record()

    record_id = repo.add(record)
    db_session.commit()
    db_session.expire_all()
    loaded = repo.get(record_id)

    assert loaded.details == record.details
    assert loaded.insurance_type == InsuranceType.FAMILY_INSURED
    assert loaded.language == "en"
    assert loaded.insurance_provider == "AOK"
    assert loaded.allergies == "Penicillin"
    assert loaded.guardian == record.guardian
    assert loaded.policyholder == record.policyholder
    assert loaded.signature.data == record.signature.data
    assert loaded.signature.signature_hash == record.signature.signature_hash
    assert loaded.signature.signer_name == "Max Mustermann"


def test_guardian_and_policyholder_stored_separately(db_session):
    repo = SqlPatientRepository(db_session)
    record_id = repo.add(_make_record())
    db_session.commit()

    patient = db_session.get(Patient, uuid.UUID(record_id))
    assert patient.guardian is not None
    assert patient.policyholder is not None
    assert patient.guardian.id != patient.policyholder.id


def test_adult_without_attachments(db_session):
    repo = SqlPatientRepository(db_session)
    record = _make_record(
        insurance_type=InsuranceType.SELF_INSURED, guardian=None, policyholder=None, signature=None
    )
    loaded = repo.get(repo.add(record))
    assert loaded.guardian is None
    assert loaded.policyholder is None
    assert loaded.signature is None


def test_personal_data_encrypted_at_rest(db_session):
    repo = SqlPatientRepository(db_session)
    record_id = repo.add(_make_record())
    db_session.commit()

    patient = db_session.get(Patient, uuid.UUID(record_id))
    assert "Mustermann" not in patient.encrypted_details
    assert "Penicillin" not in patient.encrypted_medical
    assert "Erika" not in patient.guardian.encrypted_details
    assert patient.insurance_type == "FAMILY_INSURED"


@pytest.mark.parametrize("record_id", ["not-a-uuid", "00000000-0000-0000-0000-000000000000"])
def test_unknown_record(db_session, record_id):
    with pytest.raises(RecordNotFoundError) as exc_info:
        SqlPatientRepository(db_session).get(record_id)
    assert record_id not in str(exc_info.value)


def test_engine_options_per_backend():
    from anamnesis.models.database import _engine_options

    assert _engine_options("sqlite://") == {"connect_args": {"check_same_thread": False}}
    assert _engine_options("postgresql://u:p@localhost/db")["pool_pre_ping"] is True
