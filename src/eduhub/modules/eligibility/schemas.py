"""
Eligibility Schemas

SubjectMark is the shared representation of one transcript line and is
reused by the application form.
"""

from pydantic import BaseModel, ConfigDict, Field

from eduhub.modules.eligibility.funding import NsfasEstimate
from eduhub.modules.eligibility.rules import RuleStatus


class SubjectMark(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=100)
    percentage: int = Field(..., ge=0, le=100)


class RuleResultResponse(BaseModel):
    text: str
    status: RuleStatus


class CourseEligibilityResponse(BaseModel):
    institution_id: str | None = None
    course: str
    qualified: bool
    rules: list[RuleResultResponse]


class EvaluateRulesRequest(BaseModel):
    """Evaluate arbitrary prerequisite strings against a set of marks."""

    prerequisites: list[str] = Field(..., min_length=1)
    marks: list[SubjectMark] = Field(default_factory=list)


class NsfasEstimateRequest(BaseModel):
    nsfas_required: bool = True
    sassa_beneficiary: bool = False
    household_income: float | None = Field(None, ge=0)


class NsfasEstimateResponse(BaseModel):
    estimate: NsfasEstimate | None
    label: str | None
