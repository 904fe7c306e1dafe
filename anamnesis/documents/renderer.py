"""
Template rendering for intake documents.

Two kinds of layout:

* ``intake`` – the on-screen intake display, one template per language
* ``print`` – a single language-agnostic layout used for the PDF, with
  labels supplied from the localization table

Templates come from a TemplateSource and are parsed once per process into
the shared TemplateCache. Rendering only reads the record, so identical
inputs always give byte-identical markup.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Protocol

from jinja2 import Environment, StrictUndefined, Template, TemplateError, meta
from markupsafe import Markup

from anamnesis.config import settings
from anamnesis.documents.signature import SIGNATURE_SLOT
from anamnesis.documents.template_cache import TemplateCache, template_cache
from anamnesis.domain.models import (
    Guardian,
    PatientRecord,
    PersonalDetails,
    Policyholder,
)
from anamnesis.errors import TemplateIntegrityError, UnsupportedLanguageError
from anamnesis.i18n import (
    RTL_LANGUAGES,
    SUPPORTED_LANGUAGES,
    get_labels,
    insurance_type_name,
    relationship_name,
)

logger = logging.getLogger(__name__)

INTAKE_LAYOUT = "intake"
PRINT_LAYOUT = "print"
LAYOUTS = (INTAKE_LAYOUT, PRINT_LAYOUT)

REQUIRED_PLACEHOLDERS = frozenset({"patient", "signature_slot"})

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

# Characters XML 1.0 forbids. Text pasted from word processors can carry them.
_XML_ILLEGAL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff\ud800-\udfff]")
_XML_BREAKS = str.maketrans({"\x0b": " ", "\x0c": " "})


class TemplateSource(Protocol):
    def load(self, layout_id: str, language: str | None) -> str: ...


class PackageTemplateSource:
    """Reads ``<layout>-<lang>.html`` (or ``<layout>.html``) from a directory."""

    def __init__(self, base_dir: Path | str | None = None):
        self.base_dir = Path(base_dir or settings.TEMPLATE_DIR or DEFAULT_TEMPLATE_DIR)

    def load(self, layout_id: str, language: str | None) -> str:
        name = f"{layout_id}-{language}.html" if language else f"{layout_id}.html"
        path = self.base_dir / name
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise TemplateIntegrityError(
                f"Template file {name} not found", layout_id=layout_id, language=language
            ) from exc


def format_date(value: date | datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime("%d.%m.%Y %H:%M" if isinstance(value, datetime) else "%d.%m.%Y")


def _person_view(details: PersonalDetails) -> dict[str, str]:
    locality = " ".join(p for p in (details.zip_code, details.city) if p)
    return {
        "first_name": details.first_name,
        "last_name": details.last_name,
        "name": details.full_name,
        "birth_date": format_date(details.birth_date),
        "gender": details.gender or "",
        "address": ", ".join(p for p in (details.street, locality) if p),
        "phone": details.phone_number or "",
        "mobile": details.mobile_number or "",
        "email": details.email_address or "",
        "job": details.job or "",
    }


def _guardian_view(guardian: Guardian, language: str) -> dict[str, str]:
    view = _person_view(guardian.details)
    view["relationship"] = relationship_name(guardian.relationship.value, language)
    return view


def _policyholder_view(policyholder: Policyholder) -> dict[str, str]:
    return _person_view(policyholder.details)


def xml_safe(value: Any) -> Any:
    """Output filter: drop characters that would make the markup invalid XML."""
    if isinstance(value, Markup) or not isinstance(value, str):
        return value
    return _XML_ILLEGAL.sub("", value.translate(_XML_BREAKS))


class TemplateRenderer:
    def __init__(
        self,
        source: TemplateSource | None = None,
        cache: TemplateCache | None = None,
    ):
        self.source = source or PackageTemplateSource()
        self.cache = template_cache if cache is None else cache
        self.env = Environment(
            autoescape=True,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            finalize=xml_safe,
        )

    # ------------------------------------------------------------------
    # Template loading
    # ------------------------------------------------------------------

    def _template_language(self, layout_id: str, language: str) -> str | None:
        if layout_id not in LAYOUTS:
            raise TemplateIntegrityError(f"Unknown layout {layout_id!r}", layout_id=layout_id)
        if language not in SUPPORTED_LANGUAGES:
            raise UnsupportedLanguageError(
                f"Unsupported language {language!r}", layout_id=layout_id, language=language
            )
        return None if layout_id == PRINT_LAYOUT else language

    def _compile(self, layout_id: str, language: str | None) -> Template:
        source = self.source.load(layout_id, language)
        try:
            parsed = self.env.parse(source)
        except TemplateError as exc:
            raise TemplateIntegrityError(
                f"Template does not parse: {exc}", layout_id=layout_id, language=language
            ) from exc

        missing = REQUIRED_PLACEHOLDERS - meta.find_undeclared_variables(parsed)
        if missing:
            raise TemplateIntegrityError(
                f"Template lacks placeholders: {', '.join(sorted(missing))}",
                layout_id=layout_id,
                language=language,
            )
        return self.env.from_string(source)

    def get_template(self, layout_id: str, language: str) -> Template:
        template_language = self._template_language(layout_id, language)
        return self.cache.get_or_load(
            (layout_id, template_language),
            lambda: self._compile(layout_id, template_language),
        )

    def warm_up(self) -> None:
        """Parse every known layout/language so template defects surface at startup."""
        for layout_id in LAYOUTS:
            for language in SUPPORTED_LANGUAGES:
                self.get_template(layout_id, language)
        logger.info("Template cache warm: %d templates", len(self.cache))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def build_context(self, record: PatientRecord, language: str) -> dict[str, Any]:
        signature = record.signature if record.has_signature() else None
        return {
            "lang": language,
            "dir": "rtl" if language in RTL_LANGUAGES else "ltr",
            "labels": get_labels(language),
            "patient": _person_view(record.details),
            "insurance": {
                "type": insurance_type_name(record.insurance_type.value, language),
                "provider": record.insurance_provider or "",
                "policy_number": record.insurance_policy_number or "",
                "group_number": record.insurance_group_number or "",
            },
            "history": {
                "allergies": record.allergies or "",
                "current_medications": record.current_medications or "",
                "medical_conditions": record.medical_conditions or "",
                "previous_surgeries": record.previous_surgeries or "",
                "primary_care_doctor": record.primary_care_doctor or "",
            },
            "guardian": _guardian_view(record.guardian, language) if record.guardian else None,
            "policyholder": _policyholder_view(record.policyholder) if record.policyholder else None,
            "signature_slot": Markup(SIGNATURE_SLOT),
            "signed_at": format_date(signature.signed_at) if signature else "",
        }

    def render(self, layout_id: str, record: PatientRecord, language: str) -> str:
        template = self.get_template(layout_id, language)
        try:
            return template.render(self.build_context(record, language))
        except TemplateError as exc:
            raise TemplateIntegrityError(
                f"Template failed to render: {exc}", layout_id=layout_id, language=language
            ) from exc
