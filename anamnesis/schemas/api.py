"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Intake submission
# ---------------------------------------------------------------------------

class PersonIn(BaseModel):
    # Unknown fields pass through; INTAKE_SCHEMA reports them with the other errors.
    model_config = ConfigDict(extra="allow")

    first_name: str | None = None
    last_name: str | None = None
    birth_date: str | None = None
    gender: str | None = None
    street: str | None = None
    zip_code: str | None = None
    city: str | None = None
    mobile_number: str | None = None
    phone_number: str | None = None
    email_address: str | None = None
    job: str | None = None


class GuardianIn(PersonIn):
    relationship_type: str | None = None


class IntakeSubmission(PersonIn):
    """
    Raw intake form. Everything is optional here; required fields and value
    ranges are enforced by INTAKE_SCHEMA so all problems are reported together.
    """

    language: str | None = None
    insurance_type: str | None = None
    insurance_provider: str | None = None
    insurance_policy_number: str | None = None
    insurance_group_number: str | None = None
    allergies: str | None = None
    current_medications: str | None = None
    medical_conditions: str | None = None
    previous_surgeries: str | None = None
    primary_care_doctor: str | None = None
    guardian: GuardianIn | None = None
    policyholder: PersonIn | None = None
    signature_data: str | None = None


class VerdictOut(BaseModel):
    state: str
    reason_code: str | None = None
    detail: str | None = None


class IntakeResponse(BaseModel):
    patient_id: str | None = None
    verdict: VerdictOut | None = None
    message: str | None = None
    errors: list[str] = []


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    error: str
    message: str
    correlation_id: str | None = None


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
    database: str = "connected"
