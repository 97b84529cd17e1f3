"""
Unit tests for the NSFAS estimate.
"""

from eduhub.modules.eligibility.funding import NsfasEstimate, estimate_nsfas


class TestEstimateNsfas:
    def test_not_requested(self):
        assert estimate_nsfas(False, False, 10_000) is None

    def test_sassa_beneficiary_ignores_income(self):
        assert estimate_nsfas(True, True, 900_000) is NsfasEstimate.LIKELY_ELIGIBLE

    def test_income_at_threshold(self):
        assert estimate_nsfas(True, False, 350_000) is NsfasEstimate.LIKELY_ELIGIBLE

    def test_zero_income(self):
        assert estimate_nsfas(True, False, 0) is NsfasEstimate.LIKELY_ELIGIBLE

    def test_income_over_threshold(self):
        assert estimate_nsfas(True, False, 350_001) is NsfasEstimate.MAY_NOT_BE_ELIGIBLE
