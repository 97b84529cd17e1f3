"""
Applications Router

Endpoints:
- POST /applications - Persist a submitted application
- GET /applications - Current student's applications
- GET /applications/form-options - Closed option lists for the form
- /applications/wizard/... - The student's application wizard
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from eduhub.core.auth import CurrentUser, get_current_user, get_optional_user
from eduhub.core.config import settings
from eduhub.core.database import get_db
from eduhub.core.rate_limit import client_ip
from eduhub.modules.applications import service
from eduhub.modules.applications.drafts import DraftStore, get_draft_store
from eduhub.modules.applications.errors import (
    ApplicationServiceError,
    InvalidFormDataError,
    StepValidationError,
    UploadError,
)
from eduhub.modules.applications.schemas import (
    AddSubjectRequest,
    ApplicationRecordResponse,
    DocumentSlot,
    FormOptionsResponse,
    FormUpdateRequest,
    LeaveResponse,
    SaveApplicationRequest,
    SelectCourseRequest,
    StepResultResponse,
    UploadRequest,
    WizardStateResponse,
)
from eduhub.modules.applications.uploads import decode_base64
from eduhub.modules.applications.validation import TOTAL_STEPS
from eduhub.modules.applications.wizard import ApplicationWizard
from eduhub.modules.eligibility.schemas import CourseEligibilityResponse
from eduhub.modules.institutions.catalog import (
    ETHNICITIES,
    GENDERS,
    MATRIC_SUBJECTS,
    PRONOUNS,
    PROVINCES,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http(e: ApplicationServiceError) -> HTTPException:
    detail: dict = {"error": e.error_code, "message": e.message}
    if isinstance(e, StepValidationError):
        detail["step"] = e.step
        detail["errors"] = e.errors
    if isinstance(e, (UploadError, InvalidFormDataError)) and e.field:
        detail["field"] = e.field
    return HTTPException(status_code=e.status_code, detail=detail)


async def get_wizard(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    store: DraftStore = Depends(get_draft_store),
) -> ApplicationWizard:
    return await service.load_wizard(db, store, str(current_user.id))


# ============================================================================
# Submitted applications
# ============================================================================


@router.post("", response_model=ApplicationRecordResponse, status_code=status.HTTP_201_CREATED)
async def save_application(
    request: Request,
    body: SaveApplicationRequest,
    current_user: CurrentUser | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
) -> ApplicationRecordResponse:
    """Persist an application as ``submitted``; the owner is the logged-in student if any."""
    record = await service.save_application(
        db,
        body.form_data,
        user_id=str(current_user.id) if current_user else None,
        ip_address=client_ip(request),
    )
    return ApplicationRecordResponse.model_validate(record)


@router.get("", response_model=list[ApplicationRecordResponse])
async def list_my_applications(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[ApplicationRecordResponse]:
    records = await service.list_applications(db, user_id=str(current_user.id))
    return [ApplicationRecordResponse.model_validate(r) for r in records]


@router.get("/form-options", response_model=FormOptionsResponse)
async def form_options() -> FormOptionsResponse:
    return FormOptionsResponse(
        provinces=list(PROVINCES),
        genders=list(GENDERS),
        ethnicities=list(ETHNICITIES),
        pronouns=list(PRONOUNS),
        subjects=list(MATRIC_SUBJECTS),
        total_steps=TOTAL_STEPS,
    )


# ============================================================================
# Wizard
# ============================================================================


@router.get("/wizard", response_model=WizardStateResponse)
async def get_wizard_state(wizard: ApplicationWizard = Depends(get_wizard)) -> WizardStateResponse:
    """Current step, form data, derived eligibility and (once packaged) mail links."""
    return wizard.state()


@router.patch("/wizard/form", response_model=WizardStateResponse)
async def update_form(
    body: FormUpdateRequest,
    wizard: ApplicationWizard = Depends(get_wizard),
) -> WizardStateResponse:
    try:
        await wizard.update(body.model_dump(exclude_unset=True))
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.post("/wizard/institutions/{institution_id}/toggle", response_model=WizardStateResponse)
async def toggle_institution(
    institution_id: str,
    wizard: ApplicationWizard = Depends(get_wizard),
) -> WizardStateResponse:
    """Add the institution to the basket, or remove it along with its course choice."""
    try:
        await wizard.toggle_institution(institution_id)
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.post("/wizard/subjects", response_model=WizardStateResponse)
async def add_subject(
    body: AddSubjectRequest,
    wizard: ApplicationWizard = Depends(get_wizard),
) -> WizardStateResponse:
    """A rejected subject (duplicate, bad mark) is reported in ``errors.subjects``."""
    try:
        await wizard.add_subject(body.name, body.percentage)
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.delete("/wizard/subjects/{index}", response_model=WizardStateResponse)
async def remove_subject(index: int, wizard: ApplicationWizard = Depends(get_wizard)) -> WizardStateResponse:
    try:
        await wizard.remove_subject(index)
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.put("/wizard/courses/{institution_id}", response_model=WizardStateResponse)
async def select_course(
    institution_id: str,
    body: SelectCourseRequest,
    wizard: ApplicationWizard = Depends(get_wizard),
) -> WizardStateResponse:
    try:
        await wizard.select_course(institution_id, body.course)
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.put("/wizard/documents/{slot}", response_model=WizardStateResponse)
async def upload_document(
    slot: DocumentSlot,
    body: UploadRequest,
    wizard: ApplicationWizard = Depends(get_wizard),
) -> WizardStateResponse:
    """
    Upload a document as base64.

    Oversized images are compressed; oversized non-images are rejected.

    Raises:
        HTTPException 400: Upload rejected (error scoped to the slot)
    """
    try:
        await wizard.upload_document(slot, body.name, body.content_type, decode_base64(body.data_base64))
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.delete("/wizard/documents/{slot}", response_model=WizardStateResponse)
async def remove_document(slot: DocumentSlot, wizard: ApplicationWizard = Depends(get_wizard)) -> WizardStateResponse:
    try:
        await wizard.remove_document(slot)
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.put("/wizard/profile-picture", response_model=WizardStateResponse)
async def upload_profile_picture(
    body: UploadRequest,
    wizard: ApplicationWizard = Depends(get_wizard),
) -> WizardStateResponse:
    try:
        await wizard.upload_profile_picture(body.name, body.content_type, decode_base64(body.data_base64))
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.delete("/wizard/profile-picture", response_model=WizardStateResponse)
async def remove_profile_picture(wizard: ApplicationWizard = Depends(get_wizard)) -> WizardStateResponse:
    try:
        await wizard.remove_profile_picture()
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.post("/wizard/demo-fill", response_model=WizardStateResponse)
async def demo_fill(wizard: ApplicationWizard = Depends(get_wizard)) -> WizardStateResponse:
    """Fill the form with sample data. Development only."""
    if not settings.is_development:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    try:
        await wizard.demo_fill()
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.post("/wizard/next", response_model=StepResultResponse)
async def next_step(wizard: ApplicationWizard = Depends(get_wizard)) -> StepResultResponse:
    """Advance if the current step validates; ``ok`` is false with field errors otherwise."""
    try:
        ok = await wizard.next()
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return StepResultResponse(ok=ok, **wizard.state().model_dump())


@router.post("/wizard/back", response_model=WizardStateResponse)
async def previous_step(wizard: ApplicationWizard = Depends(get_wizard)) -> WizardStateResponse:
    try:
        await wizard.back()
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.post("/wizard/leave", response_model=LeaveResponse)
async def leave(wizard: ApplicationWizard = Depends(get_wizard)) -> LeaveResponse:
    """Snapshot the draft when the student navigates away."""
    return await wizard.leave()


@router.get("/wizard/eligibility", response_model=list[CourseEligibilityResponse])
async def eligibility_report(wizard: ApplicationWizard = Depends(get_wizard)) -> list[CourseEligibilityResponse]:
    return wizard.eligibility_report()


@router.post("/wizard/submit", response_model=WizardStateResponse)
async def submit(wizard: ApplicationWizard = Depends(get_wizard)) -> WizardStateResponse:
    """
    Package the application and return one mail draft per institution.

    Nothing is stored upstream until ``confirm-sent``.

    Raises:
        HTTPException 409: Not on the review step, or already packaged
        HTTPException 422: A step has blocking errors
    """
    try:
        await wizard.submit()
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return wizard.state()


@router.post("/wizard/confirm-sent", response_model=ApplicationRecordResponse, status_code=status.HTTP_201_CREATED)
async def confirm_sent(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    wizard: ApplicationWizard = Depends(get_wizard),
) -> ApplicationRecordResponse:
    """
    Record that the emails were sent: persist the application, then clear
    the draft and basket. On failure the draft is kept for a retry.
    """

    async def persist(form_data):
        return await service.save_application(
            db, form_data, user_id=str(current_user.id), ip_address=client_ip(request)
        )

    try:
        record = await wizard.confirm_sent(persist)
    except ApplicationServiceError as e:
        raise _to_http(e) from e
    return ApplicationRecordResponse.model_validate(record)
