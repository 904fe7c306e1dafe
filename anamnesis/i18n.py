"""
Localization collaborator.

The core only emits reason codes; this module turns them into messages for
the submitter, and supplies the field labels and enum display names of the
language-agnostic print layout. Supported: German (default), English, Arabic,
Russian.
"""

from __future__ import annotations

import logging

from anamnesis.config import settings

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("de", "en", "ar", "ru")
RTL_LANGUAGES = frozenset({"ar"})

MESSAGES = {
    "de": {
        "MissingGuardian": "Für Patienten unter 18 Jahren muss ein Erziehungsberechtigter angegeben werden.",
        "MissingPolicyholder": "Bitte geben Sie den Hauptversicherten an.",
        "InvalidInsuranceTypeForMinor": "Minderjährige Patienten müssen familienversichert sein.",
        "InvalidBirthDate": "Bitte geben Sie ein gültiges Geburtsdatum an.",
        "schema_invalid": "Das Formular ist unvollständig oder fehlerhaft.",
        "record_not_found": "Patientendaten nicht gefunden. Bitte versuchen Sie es erneut.",
        "document_unavailable": "Das Dokument konnte nicht erstellt werden.",
    },
    "en": {
        "MissingGuardian": "Patients under 18 must name a legal guardian.",
        "MissingPolicyholder": "Please provide the main policyholder.",
        "InvalidInsuranceTypeForMinor": "Minor patients must be family-insured.",
        "InvalidBirthDate": "Please enter a valid date of birth.",
        "schema_invalid": "The form is incomplete or malformed.",
        "record_not_found": "Patient data not found. Please try again.",
        "document_unavailable": "The document could not be generated.",
    },
    "ar": {
        "MissingGuardian": "يجب تحديد ولي أمر قانوني للمرضى دون سن 18 عامًا.",
        "MissingPolicyholder": "يرجى إدخال بيانات حامل وثيقة التأمين الرئيسي.",
        "InvalidInsuranceTypeForMinor": "يجب أن يكون المرضى القاصرون مؤمَّنين ضمن تأمين العائلة.",
        "InvalidBirthDate": "يرجى إدخال تاريخ ميلاد صالح.",
        "schema_invalid": "النموذج غير مكتمل أو غير صالح.",
        "record_not_found": "لم يتم العثور على بيانات المريض. يرجى المحاولة مرة أخرى.",
        "document_unavailable": "تعذر إنشاء المستند.",
    },
    "ru": {
        "MissingGuardian": "Для пациентов младше 18 лет необходимо указать законного представителя.",
        "MissingPolicyholder": "Пожалуйста, укажите основного страхователя.",
        "InvalidInsuranceTypeForMinor": "Несовершеннолетние пациенты должны быть застрахованы через семью.",
        "InvalidBirthDate": "Пожалуйста, укажите корректную дату рождения.",
        "schema_invalid": "Форма заполнена не полностью или неверно.",
        "record_not_found": "Данные пациента не найдены. Пожалуйста, попробуйте еще раз.",
        "document_unavailable": "Не удалось создать документ.",
    },
}

LABELS = {
    "de": {
        "title": "Anamnesebogen",
        "patient": "Patient",
        "name": "Name",
        "birth_date": "Geburtsdatum",
        "gender": "Geschlecht",
        "address": "Adresse",
        "phone": "Telefon",
        "mobile": "Mobil",
        "email": "E-Mail",
        "insurance": "Versicherung",
        "insurance_type": "Versicherungsart",
        "policy_number": "Versichertennummer",
        "group_number": "Gruppennummer",
        "medical_history": "Krankengeschichte",
        "allergies": "Allergien",
        "current_medications": "Aktuelle Medikamente",
        "medical_conditions": "Vorerkrankungen",
        "previous_surgeries": "Frühere Operationen",
        "primary_care_doctor": "Hausarzt",
        "guardian": "Erziehungsberechtigter",
        "relationship": "Verhältnis",
        "policyholder": "Hauptversicherter",
        "job": "Beruf",
        "signature": "Unterschrift",
        "signed_at": "Unterschrieben am",
    },
    "en": {
        "title": "Medical History Form",
        "patient": "Patient",
        "name": "Name",
        "birth_date": "Date of birth",
        "gender": "Gender",
        "address": "Address",
        "phone": "Phone",
        "mobile": "Mobile",
        "email": "Email",
        "insurance": "Insurance",
        "insurance_type": "Insurance type",
        "policy_number": "Policy number",
        "group_number": "Group number",
        "medical_history": "Medical history",
        "allergies": "Allergies",
        "current_medications": "Current medications",
        "medical_conditions": "Medical conditions",
        "previous_surgeries": "Previous surgeries",
        "primary_care_doctor": "Primary care doctor",
        "guardian": "Legal guardian",
        "relationship": "Relationship",
        "policyholder": "Policyholder",
        "job": "Occupation",
        "signature": "Signature",
        "signed_at": "Signed at",
    },
    "ar": {
        "title": "استمارة التاريخ الطبي",
        "patient": "المريض",
        "name": "الاسم",
        "birth_date": "تاريخ الميلاد",
        "gender": "الجنس",
        "address": "العنوان",
        "phone": "الهاتف",
        "mobile": "الجوال",
        "email": "البريد الإلكتروني",
        "insurance": "التأمين",
        "insurance_type": "نوع التأمين",
        "policy_number": "رقم الوثيقة",
        "group_number": "رقم المجموعة",
        "medical_history": "التاريخ الطبي",
        "allergies": "الحساسية",
        "current_medications": "الأدوية الحالية",
        "medical_conditions": "الحالات المرضية",
        "previous_surgeries": "العمليات السابقة",
        "primary_care_doctor": "طبيب الرعاية الأولية",
        "guardian": "ولي الأمر",
        "relationship": "صلة القرابة",
        "policyholder": "حامل الوثيقة",
        "job": "المهنة",
        "signature": "التوقيع",
        "signed_at": "تاريخ التوقيع",
    },
    "ru": {
        "title": "Анамнестическая анкета",
        "patient": "Пациент",
        "name": "Имя",
        "birth_date": "Дата рождения",
        "gender": "Пол",
        "address": "Адрес",
        "phone": "Телефон",
        "mobile": "Мобильный",
        "email": "Эл. почта",
        "insurance": "Страхование",
        "insurance_type": "Тип страхования",
        "policy_number": "Номер полиса",
        "group_number": "Номер группы",
        "medical_history": "Анамнез",
        "allergies": "Аллергии",
        "current_medications": "Текущие лекарства",
        "medical_conditions": "Заболевания",
        "previous_surgeries": "Перенесённые операции",
        "primary_care_doctor": "Лечащий врач",
        "guardian": "Законный представитель",
        "relationship": "Степень родства",
        "policyholder": "Страхователь",
        "job": "Профессия",
        "signature": "Подпись",
        "signed_at": "Дата подписи",
    },
}

# Display names for enum values, keyed by the stored value.
RELATIONSHIP_NAMES = {
    "de": {
        "MOTHER": "Mutter",
        "FATHER": "Vater",
        "LEGAL_GUARDIAN": "Vormund",
        "GRANDPARENT": "Großelternteil",
        "OTHER": "Andere",
    },
    "en": {
        "MOTHER": "Mother",
        "FATHER": "Father",
        "LEGAL_GUARDIAN": "Legal guardian",
        "GRANDPARENT": "Grandparent",
        "OTHER": "Other",
    },
    "ar": {
        "MOTHER": "الأم",
        "FATHER": "الأب",
        "LEGAL_GUARDIAN": "الوصي القانوني",
        "GRANDPARENT": "أحد الأجداد",
        "OTHER": "أخرى",
    },
    "ru": {
        "MOTHER": "Мать",
        "FATHER": "Отец",
        "LEGAL_GUARDIAN": "Опекун",
        "GRANDPARENT": "Бабушка или дедушка",
        "OTHER": "Другое",
    },
}

INSURANCE_TYPE_NAMES = {
    "de": {"SELF_INSURED": "Selbstversichert", "FAMILY_INSURED": "Familienversichert"},
    "en": {"SELF_INSURED": "Self-insured", "FAMILY_INSURED": "Family-insured"},
    "ar": {"SELF_INSURED": "تأمين ذاتي", "FAMILY_INSURED": "تأمين عائلي"},
    "ru": {"SELF_INSURED": "Самостоятельно застрахован", "FAMILY_INSURED": "Застрахован через семью"},
}


def resolve_language(language: str | None) -> str:
    """Normalise a language code, falling back to the configured default."""
    lang = (language or "").strip().lower()[:2]
    if lang in SUPPORTED_LANGUAGES:
        return lang
    return settings.DEFAULT_LANGUAGE


def get_message(key: str, language: str | None = None) -> str:
    lang = resolve_language(language)
    message = MESSAGES[lang].get(key) or MESSAGES["de"].get(key)
    if message is None:
        logger.warning("No message for key %r", key)
        return key
    return message


def get_labels(language: str) -> dict[str, str]:
    return LABELS[language]


def relationship_name(value: str, language: str) -> str:
    return RELATIONSHIP_NAMES[language][value]


def insurance_type_name(value: str, language: str) -> str:
    return INSURANCE_TYPE_NAMES[language][value]
