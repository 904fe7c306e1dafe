"""
Storage models for accepted intake submissions.

Personal data lives in ``encrypted_*`` columns (Fernet tokens of a JSON
object); the clear-text columns are the ones needed to route and audit a
record without decrypting it.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    LargeBinary,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from anamnesis.models.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Patient – one accepted intake submission
# ---------------------------------------------------------------------------
class Patient(Base):
    __tablename__ = "patients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    encrypted_details = Column(Text, nullable=False, comment="Personal fields")
    encrypted_medical = Column(Text, nullable=False, comment="Insurance numbers and medical history")

    insurance_type = Column(String(20), nullable=False)
    language = Column(String(10), nullable=False, default="de")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    guardian = relationship(
        "LegalGuardian", back_populates="patient", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )
    policyholder = relationship(
        "Policyholder", back_populates="patient", uselist=False,
        cascade="all, delete-orphan", lazy="selectin",
    )
    signatures = relationship(
        "SignatureRecord", back_populates="patient",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="SignatureRecord.signed_at",
    )


# ---------------------------------------------------------------------------
# Legal guardian – only for minors
# ---------------------------------------------------------------------------
class LegalGuardian(Base):
    __tablename__ = "legal_guardians"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id"), nullable=False, unique=True)
    encrypted_details = Column(Text, nullable=False)
    relationship_type = Column(String(30), nullable=False)

    patient = relationship("Patient", back_populates="guardian")


# ---------------------------------------------------------------------------
# Policyholder – the main insured person for FAMILY_INSURED patients
# ---------------------------------------------------------------------------
class Policyholder(Base):
    __tablename__ = "policyholders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id"), nullable=False, unique=True)
    encrypted_details = Column(Text, nullable=False)

    patient = relationship("Patient", back_populates="policyholder")


# ---------------------------------------------------------------------------
# Signature – captured image plus tamper-detection bookkeeping
# ---------------------------------------------------------------------------
class SignatureRecord(Base):
    __tablename__ = "signatures"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("patients.id"), nullable=False)
    signature_data = Column(LargeBinary, nullable=False)
    signature_hash = Column(String(64), nullable=False, comment="SHA-256 of signature_data")
    mime_type = Column(String(50), nullable=False, default="image/png")
    encrypted_signer_name = Column(Text, nullable=False)
    signed_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    integrity_verified = Column(Boolean, nullable=False, default=False)
    tampered = Column(Boolean, nullable=False, default=False)
    last_integrity_check = Column(DateTime(timezone=True), nullable=True)

    patient = relationship("Patient", back_populates="signatures")

    __table_args__ = (
        Index("ix_signature_patient", "patient_id"),
        Index("ix_signature_signed_at", "signed_at"),
    )
