"""
Application Wizard

Six linear steps (Profile, Academics, Course Selection, Funding, Documents,
Review) over one FormData aggregate. ``next`` only advances once the
current step validates; ``back`` is unconditional. Every edit made while
not submitting and not complete is snapshotted to the DraftStore as
``{"form_data": ..., "step": ...}``.

Submitting moves the wizard into the terminal packaged state, where one
mail draft per basket institution is generated. Nothing is persisted
upstream until the student confirms the emails were sent.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import ValidationError

from eduhub.core.config import settings
from eduhub.modules.applications.drafts import DraftStore, draft_key, packaged_key
from eduhub.modules.applications.errors import (
    InvalidFormDataError,
    StepValidationError,
    UploadError,
    WizardStateError,
)
from eduhub.modules.applications.mail import build_mail_links
from eduhub.modules.applications.schemas import (
    EDITABLE_FIELDS,
    DocumentSlot,
    FormData,
    LeaveResponse,
    MailLinkResponse,
    UploadedDocument,
    WizardStateResponse,
)
from eduhub.modules.applications.uploads import process_document, process_profile_picture
from eduhub.modules.applications.validation import TOTAL_STEPS, validate_field, validate_step
from eduhub.modules.eligibility.funding import NsfasEstimate, estimate_nsfas
from eduhub.modules.eligibility.rules import evaluate_course
from eduhub.modules.eligibility.schemas import (
    CourseEligibilityResponse,
    RuleResultResponse,
    SubjectMark,
)
from eduhub.modules.institutions.catalog import Institution

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNSAVED_CHANGES_MESSAGE = "You have unsaved changes. Your progress has been drafted."

# Logged-in identity overrides stale draft values for these
IDENTITY_FIELDS = ("first_name", "last_name", "email", "id_number", "gender", "ethnicity")


@dataclass(frozen=True)
class ApplicantIdentity:
    """Profile values taken from the logged-in account."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    id_number: str = ""
    gender: str = ""
    ethnicity: str = ""
    phone: str = ""
    province: str = ""

    @classmethod
    def from_user(cls, user: Any) -> "ApplicantIdentity":
        return cls(
            first_name=user.first_name or "",
            last_name=user.last_name or "",
            email=user.email or "",
            id_number=user.id_number or "",
            gender=user.gender or "",
            ethnicity=user.ethnicity or "",
            phone=user.phone or "",
            province=user.province or "",
        )


class ApplicationWizard:
    def __init__(
        self,
        store: DraftStore,
        owner: str,
        *,
        identity: ApplicantIdentity | None = None,
        institutions: Mapping[str, Institution] | None = None,
    ):
        self.store = store
        self.owner = owner
        self.identity = identity
        self.institutions = dict(institutions or {})

        self.form = FormData()
        self.step = 1
        self.errors: dict[str, str] = {}
        self.complete = False
        self.submitting = False

    # ------------------------------------------------------------------
    # Loading and persistence
    # ------------------------------------------------------------------

    async def restore(self) -> "ApplicationWizard":
        """
        Load the packaged snapshot if one exists, otherwise the draft.

        Draft fields are merged over the defaults; identity fields from the
        account always win for name, email, ID number, gender and ethnicity.
        """
        packaged = await self.store.get(packaged_key(self.owner))
        if packaged is not None:
            try:
                self.form = FormData.model_validate(packaged["form_data"])
                self.step = TOTAL_STEPS
                self.complete = True
                return self
            except (KeyError, ValidationError) as e:
                logger.error(f"Discarding unreadable packaged application for {self.owner}: {e}")
                await self.store.clear(packaged_key(self.owner))

        data = FormData().model_dump(mode="json")
        if self.identity is not None:
            data.update({k: v for k, v in vars(self.identity).items() if v})

        draft = await self.store.get(draft_key(self.owner))
        saved_step = None
        if draft:
            data.update(draft.get("form_data") or {})
            saved_step = draft.get("step")

        if self.identity is not None:
            data.update({k: getattr(self.identity, k) for k in IDENTITY_FIELDS if getattr(self.identity, k)})

        try:
            self.form = FormData.model_validate(data)
        except ValidationError as e:
            logger.error(f"Failed to load draft for {self.owner}: {e}")
            self.form = FormData.model_validate(
                {k: getattr(self.identity, k) for k in vars(self.identity)} if self.identity else {}
            )
            saved_step = None

        if isinstance(saved_step, int) and saved_step >= 1:
            self.step = min(saved_step, TOTAL_STEPS)
        return self

    def _snapshot(self) -> dict[str, Any]:
        return {"form_data": self.form.model_dump(mode="json"), "step": self.step}

    async def _autosave(self) -> None:
        if self.submitting or self.complete:
            return
        await self.store.set(draft_key(self.owner), self._snapshot())

    def _ensure_editable(self) -> None:
        if self.complete:
            raise WizardStateError("Application has already been packaged")
        if self.submitting:
            raise WizardStateError("Submission in progress")

    def _replace_form(self, **changes: Any) -> None:
        data = self.form.model_dump()
        data.update(changes)
        try:
            self.form = FormData.model_validate(data)
        except ValidationError as e:
            raise InvalidFormDataError(str(e.errors()[0]["msg"])) from e

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    async def update(self, changes: Mapping[str, Any]) -> dict[str, str]:
        """Set scalar form fields and re-check each changed value."""
        self._ensure_editable()
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidFormDataError(f"Field(s) cannot be edited: {', '.join(sorted(unknown))}")

        self._replace_form(**changes)
        for name, value in changes.items():
            if not value and name not in self.errors:
                continue
            error = validate_field(name, value)
            if error:
                self.errors[name] = error
            else:
                self.errors.pop(name, None)

        await self._autosave()
        return self.errors

    async def toggle_institution(self, institution_id: str) -> bool:
        """
        Add the institution to the basket, or remove it along with its course
        choice. Returns True when the institution is now in the basket.
        """
        self._ensure_editable()
        basket = list(self.form.selected_institutions)
        courses = dict(self.form.selected_courses)

        if institution_id in basket:
            basket.remove(institution_id)
            courses.pop(institution_id, None)
            self.errors.pop(f"course_{institution_id}", None)
            selected = False
        else:
            if institution_id not in self.institutions:
                raise InvalidFormDataError(f"Unknown institution: {institution_id}", field="institutions")
            basket.append(institution_id)
            self.errors.pop("institutions", None)
            selected = True

        self._replace_form(selected_institutions=basket, selected_courses=courses)
        await self._autosave()
        return selected

    async def add_subject(self, name: str, percentage: int) -> bool:
        """Append a subject mark. Returns False with an inline error if rejected."""
        self._ensure_editable()
        name = name.strip()
        if not name:
            self.errors["subjects"] = "Please select a subject."
            return False
        if percentage < 0 or percentage > 100:
            self.errors["subjects"] = "Mark must be between 0 and 100"
            return False
        if any(s.name.lower() == name.lower() for s in self.form.subjects):
            self.errors["subjects"] = f"{name} is already added."
            return False

        try:
            mark = SubjectMark(name=name, percentage=percentage)
        except ValidationError as e:
            self.errors["subjects"] = str(e.errors()[0]["msg"])
            return False

        self._replace_form(subjects=[*self.form.subjects, mark])
        self.errors.pop("subjects", None)
        await self._autosave()
        return True

    async def remove_subject(self, index: int) -> None:
        self._ensure_editable()
        subjects = list(self.form.subjects)
        if index < 0 or index >= len(subjects):
            raise InvalidFormDataError(f"No subject at position {index}", field="subjects")
        del subjects[index]
        self._replace_form(subjects=subjects)
        await self._autosave()

    async def select_course(self, institution_id: str, course: str) -> None:
        self._ensure_editable()
        if institution_id not in self.form.selected_institutions:
            raise InvalidFormDataError(
                f"Institution {institution_id} is not in the basket", field=f"course_{institution_id}"
            )
        institution = self.institutions.get(institution_id)
        if institution is not None and course not in {c.name for c in institution.courses}:
            raise InvalidFormDataError(
                f"{institution.name} does not offer {course}", field=f"course_{institution_id}"
            )

        self._replace_form(selected_courses={**self.form.selected_courses, institution_id: course})
        self.errors.pop(f"course_{institution_id}", None)
        await self._autosave()

    async def upload_document(
        self, slot: DocumentSlot, name: str, content_type: str, content: bytes
    ) -> UploadedDocument:
        """
        Process and attach an upload to a document slot.

        Raises:
            UploadError: The file was rejected; the slot keeps its error
        """
        self._ensure_editable()
        field = f"documents.{slot.value}"
        try:
            document = await process_document(name, content_type, content)
        except UploadError as e:
            self.errors[field] = e.message
            raise UploadError(e.message, field=field) from e

        documents = self.form.documents.model_copy(update={slot.value: document})
        self._replace_form(documents=documents)
        self.errors.pop(field, None)
        await self._autosave()
        return document

    async def remove_document(self, slot: DocumentSlot) -> None:
        self._ensure_editable()
        documents = self.form.documents.model_copy(update={slot.value: None})
        self._replace_form(documents=documents)
        self.errors.pop(f"documents.{slot.value}", None)
        await self._autosave()

    async def upload_profile_picture(self, name: str, content_type: str, content: bytes) -> UploadedDocument:
        self._ensure_editable()
        try:
            picture = await process_profile_picture(name, content_type, content)
        except UploadError as e:
            self.errors["profile_picture"] = e.message
            raise UploadError(e.message, field="profile_picture") from e

        self._replace_form(profile_picture=picture)
        self.errors.pop("profile_picture", None)
        await self._autosave()
        return picture

    async def remove_profile_picture(self) -> None:
        self._ensure_editable()
        self._replace_form(profile_picture=None)
        self.errors.pop("profile_picture", None)
        await self._autosave()

    async def demo_fill(self) -> None:
        """Fill every step with sample data; each basket institution gets its first course."""
        self._ensure_editable()
        upload_date = datetime.now(UTC)

        def mock_doc(name: str) -> dict[str, Any]:
            return {"name": name, "size": 450000, "type": "application/pdf", "upload_date": upload_date}

        courses = {
            institution_id: self.institutions[institution_id].courses[0].name
            for institution_id in self.form.selected_institutions
            if institution_id in self.institutions and self.institutions[institution_id].courses
        }
        self._replace_form(
            first_name="Thabo",
            last_name="Nkosi",
            pronouns="He/Him",
            gender="Male",
            ethnicity="Black African",
            id_number="0502125678089",
            email="thabo.demo@nkgo.edu.za",
            phone="0721234567",
            province="Gauteng",
            subjects=[
                {"name": "Mathematics", "percentage": 78},
                {"name": "English Home Language", "percentage": 82},
                {"name": "Physical Sciences", "percentage": 75},
                {"name": "Life Orientation", "percentage": 88},
                {"name": "Geography", "percentage": 70},
                {"name": "Life Sciences", "percentage": 85},
            ],
            nsfas_required=True,
            household_income=125000,
            sassa_beneficiary=False,
            selected_courses=courses,
            documents={
                "id_document": mock_doc("id_copy.pdf"),
                "academic_record": mock_doc("results.pdf"),
                "proof_of_income": mock_doc("payslip.pdf"),
            },
        )
        self.errors = {}
        await self._autosave()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def next(self) -> bool:
        """Advance one step if the current one validates. Errors are kept on failure."""
        self._ensure_editable()
        if self.step >= TOTAL_STEPS:
            raise WizardStateError("Already on the review step; submit the application instead")

        errors = validate_step(self.step, self.form)
        if errors:
            self.errors = errors
            return False

        self.errors = {}
        self.step += 1
        await self._autosave()
        return True

    async def back(self) -> None:
        self._ensure_editable()
        if self.step > 1:
            self.step -= 1
        await self._autosave()

    async def leave(self) -> LeaveResponse:
        """Force a draft snapshot when the student navigates away."""
        if self.submitting or self.complete:
            return LeaveResponse(saved=False, message="")
        await self.store.set(draft_key(self.owner), self._snapshot())
        return LeaveResponse(saved=True, message=UNSAVED_CHANGES_MESSAGE)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self, delay: float | None = None) -> list[MailLinkResponse]:
        """
        Package the application and generate one mail draft per institution.

        Every step is re-checked because form fields can be patched from
        any step.

        Raises:
            WizardStateError: Not on the review step, or already packaged
            StepValidationError: A step has blocking errors
        """
        self._ensure_editable()
        if self.step != TOTAL_STEPS:
            raise WizardStateError("Complete all steps before submitting")

        for step in range(1, TOTAL_STEPS + 1):
            errors = validate_step(step, self.form)
            if errors:
                self.errors = errors
                raise StepValidationError(step, errors)

        self.submitting = True
        try:
            await asyncio.sleep(settings.submission_delay_seconds if delay is None else delay)
            await self.store.set(
                packaged_key(self.owner),
                {"form_data": self.form.model_dump(mode="json"), "packaged_at": datetime.now(UTC).isoformat()},
            )
            self.complete = True
        finally:
            self.submitting = False

        logger.info(
            f"Application packaged for {self.owner} "
            f"({len(self.form.selected_institutions)} institution(s))"
        )
        return self.mail_links()

    async def confirm_sent(self, persist: Callable[[FormData], Awaitable[T]]) -> T:
        """
        Persist the packaged application, then clear the draft and basket.

        If ``persist`` raises, the draft and packaged snapshot are left in
        place so the student can retry.
        """
        if not self.complete:
            raise WizardStateError("Application has not been packaged yet")

        result = await persist(self.form)

        await self.store.clear(draft_key(self.owner))
        await self.store.clear(packaged_key(self.owner))
        self.form = FormData()
        self.step = 1
        self.errors = {}
        self.complete = False
        return result

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def nsfas_estimate(self) -> NsfasEstimate | None:
        return estimate_nsfas(
            self.form.nsfas_required, self.form.sassa_beneficiary, self.form.household_income
        )

    def eligibility_report(self) -> list[CourseEligibilityResponse]:
        """Advisory prerequisite check for each chosen course. Never blocks submission."""
        report = []
        for institution_id in self.form.selected_institutions:
            course_name = self.form.selected_courses.get(institution_id)
            institution = self.institutions.get(institution_id)
            if not course_name or institution is None:
                continue
            course = next((c for c in institution.courses if c.name == course_name), None)
            if course is None:
                continue
            eligibility = evaluate_course(course.name, course.prerequisites, self.form.subjects)
            report.append(
                CourseEligibilityResponse(
                    institution_id=institution_id,
                    course=eligibility.course,
                    qualified=eligibility.qualified,
                    rules=[RuleResultResponse(text=r.text, status=r.status) for r in eligibility.results],
                )
            )
        return report

    def mail_links(self) -> list[MailLinkResponse]:
        if not self.complete:
            return []
        return build_mail_links(self.form, self.institutions)

    def state(self) -> WizardStateResponse:
        return WizardStateResponse(
            step=self.step,
            total_steps=TOTAL_STEPS,
            complete=self.complete,
            form_data=self.form,
            errors=dict(self.errors),
            nsfas_estimate=self.nsfas_estimate(),
            eligibility=self.eligibility_report(),
            mail_links=self.mail_links(),
        )
