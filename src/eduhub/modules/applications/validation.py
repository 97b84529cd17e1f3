"""
Application form validation.

``validate_field`` checks a single value as it is typed; ``validate_step``
gates advancing out of a wizard step. Both return user-facing messages
keyed by field (``course_<institution_id>`` and ``documents.<slot>`` for
per-institution and per-upload errors).
"""

import re
from typing import Any

from eduhub.modules.applications.schemas import DocumentSlot, FormData
from eduhub.modules.institutions.catalog import ETHNICITIES, GENDERS, PRONOUNS, PROVINCES

MIN_SUBJECTS = 4
TOTAL_STEPS = 6

_PHONE_CHARS = re.compile(r"[0-9\s\-+()]*")
_NON_DIGITS = re.compile(r"[^0-9]")
_ID_NUMBER = re.compile(r"[0-9]{13}")
_EMAIL = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "id_number",
    "email",
    "phone",
    "province",
    "gender",
    "ethnicity",
    "pronouns",
)

_CHOICES = {
    "province": PROVINCES,
    "gender": GENDERS,
    "ethnicity": ETHNICITIES,
    "pronouns": PRONOUNS,
}


def validate_phone(value: str | None) -> str | None:
    text = value or ""
    if not text.strip():
        return "Required"
    if not _PHONE_CHARS.fullmatch(text):
        return "Invalid characters"
    digits = _NON_DIGITS.sub("", text)
    if len(digits) < 10:
        return "Too short"
    if len(digits) > 15:
        return "Too long"
    return None


def validate_field(name: str, value: Any) -> str | None:
    if name == "phone":
        return validate_phone(value)
    if name in ("first_name", "last_name"):
        return None if value and str(value).strip() else "Required"
    if name == "id_number":
        return None if _ID_NUMBER.fullmatch(value or "") else "13 digits"
    if name == "email":
        return None if _EMAIL.fullmatch(value or "") else "Invalid email"
    if name in _CHOICES:
        return None if value in _CHOICES[name] else "Select"
    if name == "household_income":
        return "Required" if value is None or value < 0 else None
    return None


def _income_required(form: FormData) -> bool:
    return form.nsfas_required and not form.sassa_beneficiary


def _validate_subjects(form: FormData) -> dict[str, str]:
    if not form.subjects:
        return {"subjects": "Please add at least one subject."}
    seen: set[str] = set()
    for subject in form.subjects:
        key = subject.name.strip().lower()
        if key in seen:
            return {"subjects": f"{subject.name} is already added."}
        seen.add(key)
    if len(form.subjects) < MIN_SUBJECTS:
        return {"subjects": f"Please add at least {MIN_SUBJECTS} subjects."}
    return {}


def _validate_courses(form: FormData) -> dict[str, str]:
    if not form.selected_institutions:
        return {"institutions": "Select at least one institution."}
    return {
        f"course_{institution_id}": "Required"
        for institution_id in form.selected_institutions
        if not form.selected_courses.get(institution_id)
    }


def _validate_documents(form: FormData) -> dict[str, str]:
    required = [DocumentSlot.ID_DOCUMENT, DocumentSlot.ACADEMIC_RECORD]
    if _income_required(form):
        required.append(DocumentSlot.PROOF_OF_INCOME)
    return {
        f"documents.{slot.value}": "Required"
        for slot in required
        if getattr(form.documents, slot.value) is None
    }


def validate_step(step: int, form: FormData) -> dict[str, str]:
    """Errors blocking the move out of ``step``; empty when it may advance."""
    if step == 1:
        errors = {}
        for name in PROFILE_FIELDS:
            error = validate_field(name, getattr(form, name))
            if error:
                errors[name] = error
        return errors
    if step == 2:
        return _validate_subjects(form)
    if step == 3:
        return _validate_courses(form)
    if step == 4:
        if _income_required(form):
            error = validate_field("household_income", form.household_income)
            if error:
                return {"household_income": error}
        return {}
    if step == 5:
        return _validate_documents(form)
    # Review step
    return {}
