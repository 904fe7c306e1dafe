"""
Eligibility gate for intake submissions.

A verdict starts PENDING and moves exactly once to ACCEPTED or REJECTED.
Rules are plain functions evaluated in a fixed order and the first violation
wins:

    1. birth date must yield an age
    2. a minor needs a legal guardian
    3. a minor needs a policyholder
    4. a minor must be FAMILY_INSURED
    5. FAMILY_INSURED (any age) needs a policyholder

So a minor with the wrong insurance type is only reported as such once
guardian and policyholder are both present.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Optional

from anamnesis.domain.age import LEGAL_MAJORITY, is_minor
from anamnesis.domain.models import InsuranceType, PatientRecord
from anamnesis.errors import InvalidDateError

logger = logging.getLogger(__name__)


class ReasonCode(str, Enum):
    MISSING_GUARDIAN = "MissingGuardian"
    MISSING_POLICYHOLDER = "MissingPolicyholder"
    INVALID_INSURANCE_TYPE_FOR_MINOR = "InvalidInsuranceTypeForMinor"
    INVALID_BIRTH_DATE = "InvalidBirthDate"


class VerdictState(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ValidationVerdict:
    state: VerdictState
    reason: ReasonCode | None = None
    detail: str | None = None

    @classmethod
    def pending(cls) -> ValidationVerdict:
        return cls(VerdictState.PENDING)

    @classmethod
    def accepted(cls) -> ValidationVerdict:
        return cls(VerdictState.ACCEPTED)

    @classmethod
    def rejected(cls, reason: ReasonCode, detail: str) -> ValidationVerdict:
        return cls(VerdictState.REJECTED, reason, detail)

    @property
    def is_accepted(self) -> bool:
        return self.state == VerdictState.ACCEPTED

    @property
    def is_terminal(self) -> bool:
        return self.state != VerdictState.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "reason_code": self.reason.value if self.reason else None,
            "detail": self.detail,
        }


# A rule returns a rejected verdict or None when the record passes it.
Rule = Callable[[PatientRecord, int], Optional[ValidationVerdict]]


def minor_requires_guardian(record: PatientRecord, age: int) -> ValidationVerdict | None:
    if is_minor(age) and record.guardian is None:
        return ValidationVerdict.rejected(
            ReasonCode.MISSING_GUARDIAN,
            f"Patients under {LEGAL_MAJORITY} must have a legal guardian",
        )
    return None


def minor_requires_policyholder(record: PatientRecord, age: int) -> ValidationVerdict | None:
    if is_minor(age) and record.policyholder is None:
        return ValidationVerdict.rejected(
            ReasonCode.MISSING_POLICYHOLDER,
            f"Patients under {LEGAL_MAJORITY} must have a policyholder",
        )
    return None


def minor_must_be_family_insured(record: PatientRecord, age: int) -> ValidationVerdict | None:
    if is_minor(age) and record.insurance_type != InsuranceType.FAMILY_INSURED:
        return ValidationVerdict.rejected(
            ReasonCode.INVALID_INSURANCE_TYPE_FOR_MINOR,
            f"Patients under {LEGAL_MAJORITY} cannot be self-insured",
        )
    return None


def family_insured_requires_policyholder(record: PatientRecord, age: int) -> ValidationVerdict | None:
    if record.insurance_type == InsuranceType.FAMILY_INSURED and record.policyholder is None:
        return ValidationVerdict.rejected(
            ReasonCode.MISSING_POLICYHOLDER,
            "Family-insured patients must name a policyholder",
        )
    return None


RULES: tuple[Rule, ...] = (
    minor_requires_guardian,
    minor_requires_policyholder,
    minor_must_be_family_insured,
    family_insured_requires_policyholder,
)


class EligibilityValidator:
    """
    Pure decision procedure over a record snapshot.

    The clock is injectable so "today" can be pinned in tests; nothing is
    persisted here, that is the caller's job.
    """

    def __init__(self, clock: Callable[[], date] = date.today, rules: tuple[Rule, ...] = RULES):
        self._clock = clock
        self._rules = rules

    def decide(self, record: PatientRecord, age: int) -> ValidationVerdict:
        """Transition PENDING -> ACCEPTED | REJECTED for an already computed age."""
        verdict = ValidationVerdict.pending()
        for rule in self._rules:
            rejection = rule(record, age)
            if rejection is not None:
                verdict = rejection
                break
        else:
            verdict = ValidationVerdict.accepted()

        logger.info(
            "Eligibility: %s%s",
            verdict.state.value,
            f" ({verdict.reason.value})" if verdict.reason else "",
        )
        return verdict

    def validate(self, record: PatientRecord) -> ValidationVerdict:
        try:
            age = record.age(self._clock())
        except InvalidDateError as exc:
            logger.info("Eligibility: rejected (%s)", ReasonCode.INVALID_BIRTH_DATE.value)
            return ValidationVerdict.rejected(ReasonCode.INVALID_BIRTH_DATE, str(exc))
        return self.decide(record, age)


def validate(record: PatientRecord, reference_date: date | None = None) -> ValidationVerdict:
    """Validate a record as of reference_date (defaults to today)."""
    if reference_date is None:
        return EligibilityValidator().validate(record)
    return EligibilityValidator(clock=lambda: reference_date).validate(record)
