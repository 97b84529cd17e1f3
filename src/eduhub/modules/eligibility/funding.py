"""NSFAS funding eligibility estimate."""

import enum

NSFAS_INCOME_THRESHOLD = 350_000


class NsfasEstimate(str, enum.Enum):
    LIKELY_ELIGIBLE = "likely_eligible"
    MAY_NOT_BE_ELIGIBLE = "may_not_be_eligible"


NSFAS_LABELS = {
    NsfasEstimate.LIKELY_ELIGIBLE: "Likely Eligible",
    NsfasEstimate.MAY_NOT_BE_ELIGIBLE: "May Not Be Eligible",
}


def estimate_nsfas(
    nsfas_required: bool,
    sassa_beneficiary: bool,
    household_income: float | None,
) -> NsfasEstimate | None:
    """
    Heuristic NSFAS estimate.

    SASSA beneficiaries qualify regardless of income; otherwise the annual
    household income must not exceed R350 000. Returns None when funding
    was not requested.
    """
    if not nsfas_required:
        return None
    if sassa_beneficiary:
        return NsfasEstimate.LIKELY_ELIGIBLE
    if household_income is not None and household_income <= NSFAS_INCOME_THRESHOLD:
        return NsfasEstimate.LIKELY_ELIGIBLE
    return NsfasEstimate.MAY_NOT_BE_ELIGIBLE
