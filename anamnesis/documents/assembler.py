"""
Markup -> PDF conversion.

Each call converts into its own spooled temporary file (in memory up to
PDF_SPOOL_MAX_BYTES, on disk beyond that) which is closed and removed on
every exit path. Either complete PDF bytes come back or an exception does.
"""

from __future__ import annotations

import hashlib
import logging
import tempfile
import xml.etree.ElementTree as ET
from typing import BinaryIO, Callable, NamedTuple

from anamnesis.config import settings
from anamnesis.errors import RenderConversionError

logger = logging.getLogger(__name__)

Converter = Callable[[str, BinaryIO], None]


class AssembledDocument(NamedTuple):
    content: bytes
    content_id: str


def weasyprint_converter(markup: str, target: BinaryIO) -> None:
    """Render markup with WeasyPrint into target."""
    # Imported on first use: WeasyPrint loads Pango/Cairo at import time.
    from weasyprint import HTML

    HTML(string=markup).write_pdf(target)


def content_id_for(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def check_well_formed(markup: str, record_ref: str | None = None) -> None:
    try:
        ET.fromstring(markup.encode("utf-8"))
    except ET.ParseError as exc:
        raise RenderConversionError(
            f"Markup is not well-formed: {exc}", record_ref=record_ref
        ) from exc


def _is_complete_pdf(content: bytes) -> bool:
    return content.startswith(b"%PDF-") and content.rstrip().endswith(b"%%EOF")


class DocumentAssembler:
    def __init__(
        self,
        converter: Converter = weasyprint_converter,
        spool_max_bytes: int | None = None,
    ):
        self._converter = converter
        self._spool_max_bytes = (
            settings.PDF_SPOOL_MAX_BYTES if spool_max_bytes is None else spool_max_bytes
        )

    def assemble(self, markup: str, record_ref: str | None = None) -> AssembledDocument:
        check_well_formed(markup, record_ref)

        with tempfile.SpooledTemporaryFile(max_size=self._spool_max_bytes, suffix=".pdf") as buffer:
            try:
                self._converter(markup, buffer)
            except (RenderConversionError, OSError):
                raise
            except Exception as exc:
                raise RenderConversionError(
                    f"PDF conversion failed: {exc}", record_ref=record_ref
                ) from exc
            buffer.seek(0)
            content = buffer.read()

        if not _is_complete_pdf(content):
            raise RenderConversionError(
                f"Converter produced an incomplete document ({len(content)} bytes)",
                record_ref=record_ref,
            )

        document = AssembledDocument(content=content, content_id=content_id_for(content))
        logger.info(
            "Assembled PDF: %d bytes, content_id=%s", len(content), document.content_id[:12]
        )
        return document
