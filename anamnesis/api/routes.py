"""
FastAPI routes – intake submission and document retrieval.

Eligibility rejections come back as 422 with a reason code and a localized
message. Rendering faults are not actionable for the submitter: they are
logged with a correlation id and answered with a generic 500.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response
from sqlalchemy import text
from sqlalchemy.orm import Session

from anamnesis.config import settings
from anamnesis.documents.assembler import DocumentAssembler
from anamnesis.documents.renderer import TemplateRenderer
from anamnesis.errors import RecordNotFoundError, RenderingFault
from anamnesis.i18n import get_message, resolve_language
from anamnesis.models.database import get_db
from anamnesis.models.repository import SqlPatientRepository
from anamnesis.schemas.api import (
    ErrorResponse,
    HealthResponse,
    IntakeResponse,
    IntakeSubmission,
    VerdictOut,
)
from anamnesis.services.documents import DocumentService
from anamnesis.services.intake import OutcomeKind, submit_intake

logger = logging.getLogger(__name__)

router = APIRouter()

renderer = TemplateRenderer()
assembler = DocumentAssembler()


def get_repository(db: Session = Depends(get_db)) -> SqlPatientRepository:
    return SqlPatientRepository(db)


def get_document_service(
    repository: SqlPatientRepository = Depends(get_repository),
) -> DocumentService:
    return DocumentService(repository, renderer=renderer, assembler=assembler)


def _document_unavailable(exc: RenderingFault, language: str | None) -> JSONResponse:
    correlation_id = uuid.uuid4().hex
    logger.error("Document unavailable [correlation_id=%s]: %s", correlation_id, exc)
    body = ErrorResponse(
        error="document_unavailable",
        message=get_message("document_unavailable", language),
        correlation_id=correlation_id,
    )
    return JSONResponse(status_code=500, content=body.model_dump())


def _not_found(language: str | None) -> HTTPException:
    return HTTPException(status_code=404, detail=get_message("record_not_found", language))


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Basic health endpoint – verifies DB connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        db_status = "disconnected"
    return HealthResponse(
        status="healthy",
        environment=settings.ENVIRONMENT,
        database=db_status,
    )


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------

@router.post("/intake", response_model=IntakeResponse, status_code=201)
def submit(
    submission: IntakeSubmission,
    lang: str | None = Query(default=None),
    db: Session = Depends(get_db),
    repository: SqlPatientRepository = Depends(get_repository),
):
    """Validate an intake form and store it if the patient is eligible."""
    language = resolve_language(lang or submission.language)
    outcome = submit_intake(submission.model_dump(exclude_none=True), repository)

    if outcome.kind == OutcomeKind.INVALID:
        body = IntakeResponse(message=get_message("schema_invalid", language), errors=outcome.errors)
        return JSONResponse(status_code=422, content=body.model_dump())

    verdict = VerdictOut(**outcome.verdict.to_dict())
    if outcome.kind == OutcomeKind.REJECTED:
        body = IntakeResponse(
            verdict=verdict,
            message=get_message(outcome.verdict.reason.value, language),
        )
        return JSONResponse(status_code=422, content=body.model_dump())

    db.commit()
    logger.info("Intake accepted")
    return IntakeResponse(patient_id=outcome.patient_id, verdict=verdict)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@router.get("/patients/{patient_id}/document")
def get_document(
    patient_id: str,
    lang: str | None = Query(default=None),
    service: DocumentService = Depends(get_document_service),
):
    """Signed intake PDF; the ETag is the document's content hash."""
    try:
        document = service.generate_document(patient_id)
    except RecordNotFoundError:
        raise _not_found(lang)
    except RenderingFault as exc:
        return _document_unavailable(exc, lang)

    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={
            "ETag": f'"{document.content_id}"',
            "Content-Disposition": f'inline; filename="anamnesebogen_{document.content_id[:12]}.pdf"',
        },
    )


@router.get("/patients/{patient_id}/preview", response_class=HTMLResponse)
def preview_document(
    patient_id: str,
    lang: str | None = Query(default=None),
    service: DocumentService = Depends(get_document_service),
):
    """Intake-display markup for a stored record."""
    try:
        markup = service.preview(patient_id, resolve_language(lang) if lang else None)
    except RecordNotFoundError:
        raise _not_found(lang)
    except RenderingFault as exc:
        return _document_unavailable(exc, lang)
    return HTMLResponse(content=markup)
