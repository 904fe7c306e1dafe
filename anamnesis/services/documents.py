"""
Document generation for stored intake records.

Re-fetches the record through the persistence collaborator and runs the
render -> embed -> assemble pipeline. Rendering faults propagate to the
caller with layout, language and a redacted record reference attached.
"""

from __future__ import annotations

import logging

from anamnesis.documents.assembler import AssembledDocument, DocumentAssembler
from anamnesis.documents.pipeline import build_document_pipeline
from anamnesis.documents.renderer import INTAKE_LAYOUT, PRINT_LAYOUT, TemplateRenderer
from anamnesis.errors import RenderingFault, redact_identifier
from anamnesis.i18n import resolve_language
from anamnesis.models.repository import PatientRepository

logger = logging.getLogger(__name__)


class DocumentService:
    def __init__(
        self,
        repository: PatientRepository,
        renderer: TemplateRenderer | None = None,
        assembler: DocumentAssembler | None = None,
    ):
        self.repository = repository
        self.renderer = renderer or TemplateRenderer()
        self.assembler = assembler or DocumentAssembler()

    def _run(self, record_id: str, layout_id: str, language: str | None, assemble: bool) -> dict:
        record = self.repository.get(record_id)
        record_ref = redact_identifier(record_id)
        lang = language or resolve_language(record.language)

        pipeline = build_document_pipeline(
            self.renderer, self.assembler if assemble else None, layout_id=layout_id
        )
        try:
            return pipeline.run({"record": record, "language": lang, "record_ref": record_ref})
        except RenderingFault as exc:
            exc.layout_id = exc.layout_id or layout_id
            exc.language = exc.language or lang
            exc.record_ref = exc.record_ref or record_ref
            logger.error("Document generation failed: %s | stages=%s", exc, pipeline.summary())
            raise

    def generate_document(self, record_id: str) -> AssembledDocument:
        """Signed print-layout PDF for a stored record."""
        context = self._run(record_id, PRINT_LAYOUT, None, assemble=True)
        return context["document"]

    def preview(self, record_id: str, language: str | None = None) -> str:
        """Intake-display markup for a stored record, with the signature inlined."""
        context = self._run(record_id, INTAKE_LAYOUT, language, assemble=False)
        return context["markup"]
