"""
Document generation pipeline: render -> embed_signature -> assemble.

Context keys: ``record``, ``language``, ``record_ref`` going in; ``markup``
and ``document`` coming out.
"""

from __future__ import annotations

import logging
from typing import Any

from anamnesis.documents import signature
from anamnesis.documents.assembler import DocumentAssembler
from anamnesis.documents.renderer import PRINT_LAYOUT, TemplateRenderer
from anamnesis.documents.stages import StagePipeline

logger = logging.getLogger(__name__)


def build_document_pipeline(
    renderer: TemplateRenderer,
    assembler: DocumentAssembler | None = None,
    layout_id: str = PRINT_LAYOUT,
) -> StagePipeline:
    """
    Stages for one document. Pass assembler=None to stop after embedding,
    which is how the on-screen preview is produced.
    """

    def render(context: dict[str, Any]) -> dict[str, Any]:
        markup = renderer.render(layout_id, context["record"], context["language"])
        return {"markup": markup}

    def embed_signature(context: dict[str, Any]) -> dict[str, Any]:
        record = context["record"]
        if record.has_signature():
            markup = signature.embed(
                context["markup"], record.signature.data, record.signature.mime_type
            )
        else:
            logger.info("No signature on record %s, leaving slot empty", context.get("record_ref"))
            markup = signature.embed(context["markup"], None)
        return {"markup": markup}

    def assemble(context: dict[str, Any]) -> dict[str, Any]:
        document = assembler.assemble(context["markup"], record_ref=context.get("record_ref"))
        return {"document": document}

    pipeline = StagePipeline(f"document_{layout_id}")
    pipeline.add_stage("render", render)
    pipeline.add_stage("embed_signature", embed_signature)
    if assembler is not None:
        pipeline.add_stage("assemble", assemble)
    return pipeline
