"""Calendar-accurate age calculation."""

from __future__ import annotations

from datetime import date, datetime

from anamnesis.errors import InvalidDateError

LEGAL_MAJORITY = 18

# Tried in order; ISO first, then the formats the intake form has historically sent.
DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y", "%m/%d/%Y")


def parse_date(value: date | str | None) -> date:
    """Coerce a date or a date string into a date, raising InvalidDateError."""
    if value is None:
        raise InvalidDateError("Birth date is missing")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        raise InvalidDateError("Birth date is missing")
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise InvalidDateError(f"Unparseable birth date: {text!r}")


def years(birth_date: date | str | None, reference_date: date) -> int:
    """
    Whole years elapsed between birth_date and reference_date.

    A birthday falling on reference_date counts as reached. Someone born on
    Feb 29 turns a year older on Mar 1 in non-leap years.
    """
    born = parse_date(birth_date)
    if born > reference_date:
        raise InvalidDateError("Birth date lies in the future")

    elapsed = reference_date.year - born.year
    if (reference_date.month, reference_date.day) < (born.month, born.day):
        elapsed -= 1
    return elapsed


def is_minor(age: int) -> bool:
    return age < LEGAL_MAJORITY
