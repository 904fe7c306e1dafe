"""Tests for the HTTP surface."""

from datetime import date

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from anamnesis.api.routes import get_document_service, router
from anamnesis.documents.assembler import DocumentAssembler
from anamnesis.documents.renderer import TemplateRenderer
from anamnesis.documents.template_cache import TemplateCache
from anamnesis.models.database import get_db
from anamnesis.models.repository import SqlPatientRepository
from anamnesis.services.documents import DocumentService

from conftest import PNG_BASE64


def _birth_date(age: int) -> str:
    return date(date.today().year - age, 1, 1).isoformat()


def _make_submission(age=30, **overrides):
    submission = {
        "first_name": "Max",
        "last_name": "Mustermann",
        "birth_date": _birth_date(age),
        "insurance_type": "SELF_INSURED",
        "signature_data": f"data:image/png;base64,{PNG_BASE64}",
    }
    submission.update(overrides)
    return submission


@pytest.fixture
def converter(fake_converter):
    """Swappable converter so a test can make assembly fail."""
    state = {"fn": fake_converter}

    def convert(markup, target):
        state["fn"](markup, target)

    convert.state = state
    return convert


@pytest.fixture
def client(session_factory, converter):
    renderer = TemplateRenderer(cache=TemplateCache())
    assembler = DocumentAssembler(converter=converter)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def override_get_document_service():
        db = session_factory()
        try:
            yield DocumentService(SqlPatientRepository(db), renderer=renderer, assembler=assembler)
        finally:
            db.close()

    app = FastAPI()
    app.include_router(router, prefix="/api/v1")
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_service] = override_get_document_service
    return TestClient(app)


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_adult_intake_accepted_and_document_served(client):
    response = client.post("/api/v1/intake", json=_make_submission())
    assert response.status_code == 201
    body = response.json()
    assert body["verdict"]["state"] == "accepted"
    patient_id = body["patient_id"]

    document = client.get(f"/api/v1/patients/{patient_id}/document")
    assert document.status_code == 200
    assert document.headers["content-type"] == "application/pdf"
    assert document.content.startswith(b"%PDF-")
    etag = document.headers["etag"].strip('"')
    assert len(etag) == 64
    assert etag[:12] in document.headers["content-disposition"]


def test_minor_with_family_insurance_accepted(client):
    parent = {"first_name": "Erika", "last_name": "Mustermann"}
    submission = _make_submission(
        age=10,
        insurance_type="FAMILY_INSURED",
        guardian={**parent, "relationship_type": "MOTHER"},
        policyholder=parent,
    )
    response = client.post("/api/v1/intake", json=submission)
    assert response.status_code == 201

    preview = client.get(f"/api/v1/patients/{response.json()['patient_id']}/preview?lang=en")
    assert preview.status_code == 200
    assert 'id="guardian"' in preview.text
    assert 'lang="en"' in preview.text


def test_minor_without_guardian_rejected_with_localized_message(client):
    submission = _make_submission(age=10, insurance_type="FAMILY_INSURED")

    response = client.post("/api/v1/intake", json=submission)
    assert response.status_code == 422
    body = response.json()
    assert body["verdict"]["reason_code"] == "MissingGuardian"
    assert body["patient_id"] is None
    assert "Erziehungsberechtigter" in body["message"]

    english = client.post("/api/v1/intake?lang=en", json=submission)
    assert english.json()["message"] == "Patients under 18 must name a legal guardian."


def test_minor_self_insured_rejected(client):
    parent = {"first_name": "Erika", "last_name": "Mustermann"}
    submission = _make_submission(age=10, guardian=parent, policyholder=parent, language="en")

    response = client.post("/api/v1/intake", json=submission)
    assert response.status_code == 422
    assert response.json()["verdict"]["reason_code"] == "InvalidInsuranceTypeForMinor"
    assert response.json()["message"] == "Minor patients must be family-insured."


def test_schema_errors_listed(client):
    response = client.post("/api/v1/intake", json={"first_name": "Max", "insurance_type": "PRIVATE"})
    assert response.status_code == 422
    errors = response.json()["errors"]
    assert any("last_name" in e for e in errors)
    assert any(e.startswith("insurance_type") for e in errors)


def test_unknown_fields_reported_with_schema_errors(client):
    submission = _make_submission(shoe_size="44", guardian={"first_name": "Erika", "nickname": "Eri"})
    del submission["last_name"]

    response = client.post("/api/v1/intake", json=submission)

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Das Formular ist unvollständig oder fehlerhaft."
    errors = body["errors"]
    assert any("shoe_size" in e for e in errors)
    assert any(e.startswith("guardian") and "nickname" in e for e in errors)
    assert any("last_name" in e for e in errors)


def test_unknown_patient(client):
    response = client.get("/api/v1/patients/00000000-0000-0000-0000-000000000000/document")
    assert response.status_code == 404


def test_conversion_failure_returns_generic_error(client, converter):
    patient_id = client.post("/api/v1/intake", json=_make_submission()).json()["patient_id"]

    def broken(markup, target):
        raise RuntimeError("cairo exploded")

    converter.state["fn"] = broken
    response = client.get(f"/api/v1/patients/{patient_id}/document")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "document_unavailable"
    assert body["correlation_id"]
    assert "Mustermann" not in response.text
    assert "cairo" not in response.text
