"""
JSON schema for raw intake submissions.

Structural checks only (types, required names, enum values). Dates are kept
as strings here: a missing or unparseable birth date is an eligibility
rejection with its own reason code, not a schema error.
"""

_TEXT = {"type": "string", "maxLength": 2000}
_SHORT = {"type": "string", "maxLength": 255}

_PERSON_PROPERTIES: dict = {
    "first_name": {"type": "string", "minLength": 1, "maxLength": 100},
    "last_name": {"type": "string", "minLength": 1, "maxLength": 100},
    "birth_date": {"type": "string", "maxLength": 10},
    "gender": {"type": "string", "maxLength": 20},
    "street": _SHORT,
    "zip_code": {"type": "string", "maxLength": 20},
    "city": {"type": "string", "maxLength": 100},
    "mobile_number": {"type": "string", "maxLength": 30},
    "phone_number": {"type": "string", "maxLength": 30},
    "email_address": {"type": "string", "maxLength": 255},
    "job": _SHORT,
}

GUARDIAN_SCHEMA: dict = {
    "type": "object",
    "properties": {
        **_PERSON_PROPERTIES,
        "relationship_type": {"type": "string", "maxLength": 30},
    },
    "additionalProperties": False,
}

POLICYHOLDER_SCHEMA: dict = {
    "type": "object",
    "properties": _PERSON_PROPERTIES,
    "additionalProperties": False,
}

INTAKE_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Patient intake submission",
    "type": "object",
    "required": ["first_name", "last_name", "birth_date"],
    "properties": {
        **_PERSON_PROPERTIES,
        "language": {"type": "string", "pattern": "^[a-z]{2}$"},
        "insurance_type": {"type": "string", "enum": ["SELF_INSURED", "FAMILY_INSURED"]},
        "insurance_provider": _SHORT,
        "insurance_policy_number": {"type": "string", "maxLength": 100},
        "insurance_group_number": {"type": "string", "maxLength": 100},
        "allergies": _TEXT,
        "current_medications": _TEXT,
        "medical_conditions": _TEXT,
        "previous_surgeries": _TEXT,
        "primary_care_doctor": _SHORT,
        "guardian": GUARDIAN_SCHEMA,
        "policyholder": POLICYHOLDER_SCHEMA,
        "signature_data": {
            "type": "string",
            "description": "Canvas capture as a data URL, e.g. data:image/png;base64,...",
        },
    },
    "additionalProperties": False,
}
