"""
Eligibility Module

Course prerequisite evaluation and the NSFAS funding estimate.
"""

from eduhub.modules.eligibility.funding import NsfasEstimate, estimate_nsfas
from eduhub.modules.eligibility.router import router
from eduhub.modules.eligibility.rules import (
    CourseEligibility,
    RuleStatus,
    evaluate_course,
    evaluate_rule,
    is_course_qualified,
    parse_rule,
)

__all__ = [
    "CourseEligibility",
    "NsfasEstimate",
    "RuleStatus",
    "estimate_nsfas",
    "evaluate_course",
    "evaluate_rule",
    "is_course_qualified",
    "parse_rule",
    "router",
]
