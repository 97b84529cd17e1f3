"""
Application Schemas

FormData is the single aggregate the wizard edits. It is deliberately
lenient about empty fields (a draft is incomplete by nature); step
validation decides what is required. The one structural rule enforced
here is that course choices only exist for institutions in the basket.
"""

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from eduhub.modules.applications.models import ApplicationStatus
from eduhub.modules.eligibility.funding import NsfasEstimate
from eduhub.modules.eligibility.schemas import CourseEligibilityResponse, SubjectMark


class DocumentSlot(str, enum.Enum):
    ID_DOCUMENT = "id_document"
    ACADEMIC_RECORD = "academic_record"
    PROOF_OF_INCOME = "proof_of_income"


class UploadedDocument(BaseModel):
    name: str
    size: int = Field(..., ge=0)
    type: str
    upload_date: datetime
    # Inline preview, images only
    data_url: str | None = None


class Documents(BaseModel):
    id_document: UploadedDocument | None = None
    academic_record: UploadedDocument | None = None
    proof_of_income: UploadedDocument | None = None


class FormData(BaseModel):
    profile_picture: UploadedDocument | None = None

    # Profile
    first_name: str = ""
    last_name: str = ""
    pronouns: str = ""
    gender: str = ""
    ethnicity: str = ""
    id_number: str = ""
    email: str = ""
    phone: str = ""
    province: str = ""

    # Academics
    subjects: list[SubjectMark] = Field(default_factory=list)

    # Funding
    nsfas_required: bool = True
    household_income: float | None = 0
    sassa_beneficiary: bool = False

    # Basket and course choices
    selected_institutions: list[str] = Field(default_factory=list)
    selected_courses: dict[str, str] = Field(default_factory=dict)

    documents: Documents = Field(default_factory=Documents)

    @model_validator(mode="after")
    def courses_within_basket(self) -> "FormData":
        stray = set(self.selected_courses) - set(self.selected_institutions)
        if stray:
            raise ValueError(
                f"Course chosen for institution(s) not in basket: {', '.join(sorted(stray))}"
            )
        return self


# Fields that can be set directly through a form update
EDITABLE_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "pronouns",
        "gender",
        "ethnicity",
        "id_number",
        "email",
        "phone",
        "province",
        "nsfas_required",
        "household_income",
        "sassa_beneficiary",
    }
)


class ApplicationRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str | None
    first_name: str
    last_name: str
    status: ApplicationStatus
    submitted_at: datetime
    content: dict[str, Any]


class SaveApplicationRequest(BaseModel):
    form_data: FormData


# ---------------------------------------------------------------------------
# Wizard requests / responses
# ---------------------------------------------------------------------------


class FormUpdateRequest(BaseModel):
    """Partial update of scalar form fields."""

    model_config = ConfigDict(extra="forbid")

    first_name: str | None = None
    last_name: str | None = None
    pronouns: str | None = None
    gender: str | None = None
    ethnicity: str | None = None
    id_number: str | None = None
    email: str | None = None
    phone: str | None = None
    province: str | None = None
    nsfas_required: bool | None = None
    household_income: float | None = None
    sassa_beneficiary: bool | None = None


class AddSubjectRequest(BaseModel):
    name: str = Field(..., max_length=100)
    percentage: int


class SelectCourseRequest(BaseModel):
    course: str = Field(..., min_length=1)


class UploadRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1, max_length=100)
    data_base64: str


class MailLinkResponse(BaseModel):
    institution_id: str
    institution_name: str
    course: str
    recipient: str
    subject: str
    body: str
    url: str


class WizardStateResponse(BaseModel):
    step: int
    total_steps: int
    complete: bool
    form_data: FormData
    errors: dict[str, str]
    nsfas_estimate: NsfasEstimate | None
    eligibility: list[CourseEligibilityResponse]
    mail_links: list[MailLinkResponse] = Field(default_factory=list)


class StepResultResponse(WizardStateResponse):
    ok: bool


class LeaveResponse(BaseModel):
    saved: bool
    message: str


class FormOptionsResponse(BaseModel):
    provinces: list[str]
    genders: list[str]
    ethnicities: list[str]
    pronouns: list[str]
    subjects: list[str]
    total_steps: int
