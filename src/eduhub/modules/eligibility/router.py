"""
Eligibility Router

Stateless endpoints for checking prerequisites and funding.

Endpoints:
- POST /eligibility/evaluate - Classify prerequisite strings against marks
- POST /eligibility/nsfas - NSFAS funding estimate
"""

from fastapi import APIRouter

from eduhub.modules.eligibility.funding import NSFAS_LABELS, estimate_nsfas
from eduhub.modules.eligibility.rules import evaluate_course
from eduhub.modules.eligibility.schemas import (
    CourseEligibilityResponse,
    EvaluateRulesRequest,
    NsfasEstimateRequest,
    NsfasEstimateResponse,
    RuleResultResponse,
)

router = APIRouter()


@router.post("/evaluate", response_model=CourseEligibilityResponse)
async def evaluate_prerequisites(body: EvaluateRulesRequest) -> CourseEligibilityResponse:
    report = evaluate_course("", body.prerequisites, body.marks)
    return CourseEligibilityResponse(
        course="",
        qualified=report.qualified,
        rules=[RuleResultResponse(text=r.text, status=r.status) for r in report.results],
    )


@router.post("/nsfas", response_model=NsfasEstimateResponse)
async def nsfas_estimate(body: NsfasEstimateRequest) -> NsfasEstimateResponse:
    estimate = estimate_nsfas(body.nsfas_required, body.sassa_beneficiary, body.household_income)
    return NsfasEstimateResponse(
        estimate=estimate,
        label=NSFAS_LABELS[estimate] if estimate else None,
    )
